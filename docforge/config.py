from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

SETTINGS_FILENAME = "docforge.yml"


@dataclass(frozen=True, slots=True)
class OptionDescriptor:
    """Describes one user-facing option contributed by the renderer, a plugin or a theme."""

    name: str
    help: str
    default: Any = None
    type: str = "string"


class RendererSettings(BaseModel):
    """Options consumed by the renderer; unknown keys pass through to events."""

    model_config = ConfigDict(extra="allow")

    theme: str = Field(
        default="default",
        description="Theme name (looked up under themes_dir) or path to a theme directory.",
    )
    themes_dir: Path | None = Field(
        default=None,
        description="Directory holding named themes; defaults to the built-in themes.",
    )
    show_progress: bool = Field(default=True, description="Display a progress bar while rendering.")
    max_page_errors: int | None = Field(
        default=10,
        ge=0,
        description="Abort the render once more pages than this raised errors; unset for no limit.",
    )

    @field_validator("themes_dir", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    def snapshot(self) -> dict[str, Any]:
        """Return a plain copy handed to plugins through render and page events."""
        return self.model_dump(mode="json")


RENDERER_OPTIONS: tuple[OptionDescriptor, ...] = (
    OptionDescriptor(
        name="theme",
        help="Specify the path to the theme that should be used.",
        default="default",
    ),
    OptionDescriptor(
        name="themes_dir",
        help="Directory searched for named themes.",
    ),
    OptionDescriptor(
        name="show_progress",
        help="Display a progress bar while rendering.",
        default=True,
        type="boolean",
    ),
    OptionDescriptor(
        name="max_page_errors",
        help="Number of failing pages tolerated before the render is aborted.",
        default=10,
        type="number",
    ),
)


def load_settings(path: str | Path) -> RendererSettings:
    """Load settings and resolve relative paths based on the settings location.

    ``path`` may point to a file or to a directory containing ``docforge.yml``;
    a directory without that file yields the defaults.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    if candidate.is_dir():
        settings_file = candidate / SETTINGS_FILENAME
        if settings_file.exists():
            with settings_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        base_dir = candidate.parent.resolve()

    settings = RendererSettings.model_validate(data)

    if settings.themes_dir is not None and not settings.themes_dir.is_absolute():
        settings.themes_dir = (base_dir / settings.themes_dir).resolve()
    # Only path-like theme values are anchored to the settings file; bare names
    # keep the working-directory-then-themes-root lookup.
    theme = Path(settings.theme)
    theme_path = base_dir / theme
    if theme.name != settings.theme and not theme.is_absolute() and theme_path.is_dir():
        settings.theme = str(theme_path.resolve())

    return settings
