"""Theme contract, registry and loading for the docforge renderer."""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence, runtime_checkable

from ..config import OptionDescriptor
from ..events import UrlMapping
from .defaults import DEFAULT_THEME_NAME, DEFAULT_THEME_ROOT, THEMES_ROOT, DefaultTheme

if TYPE_CHECKING:
    from ..renderer import Renderer

logger = logging.getLogger(__name__)

THEME_SCRIPT = "theme.py"
REQUIRED_THEME_MEMBERS = ("base_path", "get_urls", "is_output_directory")


class ThemeError(RuntimeError):
    """Raised when a theme cannot be loaded or instantiated."""


@runtime_checkable
class Theme(Protocol):
    """Layout and URL strategy bound to one renderer and one base directory.

    Themes may additionally define ``get_parameters()`` returning a sequence
    of :class:`~docforge.config.OptionDescriptor`.
    """

    base_path: Path

    def get_urls(self, project: Any) -> Sequence[UrlMapping]:
        ...

    def is_output_directory(self, path: Path) -> bool:
        ...


ThemeFactory = Callable[["Renderer", Path], Theme]

_registry: dict[str, ThemeFactory] = {}


def register_theme(name: str, factory: ThemeFactory) -> None:
    """Use ``factory`` for theme directories called ``name`` that ship no theme script."""
    if name in _registry:
        logger.warning("Theme factory '%s' is already registered and will be replaced.", name)
    _registry[name] = factory


def unregister_theme(name: str) -> None:
    _registry.pop(name, None)


def resolve_theme_directory(name: str, themes_root: Path | None = None) -> Path | None:
    """Find the base directory of ``name``: first as a path, then under the themes root."""
    candidate = Path(name).resolve()
    if candidate.is_dir():
        return candidate
    root = themes_root if themes_root is not None else THEMES_ROOT
    candidate = root / name
    if candidate.is_dir():
        return candidate.resolve()
    return None


def load_theme(renderer: "Renderer", base_path: Path) -> Theme:
    """Instantiate the theme living in ``base_path``.

    A ``theme.py`` script inside the directory takes precedence and must define
    a ``Theme`` callable; otherwise a registered factory for the directory name
    is used, and finally :class:`DefaultTheme`. Theme scripts are trusted code.
    """
    script = base_path / THEME_SCRIPT
    if script.exists():
        factory: ThemeFactory = _load_theme_script(script)
    else:
        factory = _registry.get(base_path.name, DefaultTheme)
    try:
        theme = factory(renderer, base_path)
    except Exception as exc:
        raise ThemeError(f"Unable to instantiate theme at '{base_path}': {exc}") from exc

    missing = [
        name
        for name in REQUIRED_THEME_MEMBERS
        if not hasattr(theme, name) or (name != "base_path" and not callable(getattr(theme, name)))
    ]
    if missing:
        raise ThemeError(f"Theme at '{base_path}' does not provide {', '.join(missing)}.")
    return theme


def theme_parameters(theme: Theme) -> list[OptionDescriptor]:
    get_parameters = getattr(theme, "get_parameters", None)
    if get_parameters is None:
        return []
    return list(get_parameters())


def _load_theme_script(script: Path) -> ThemeFactory:
    module_name = f"docforge_theme_{script.parent.name.replace('-', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, script)
    if spec is None or spec.loader is None:
        raise ThemeError(f"Theme script '{script}' cannot be imported.")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ThemeError(f"Failed to evaluate theme script '{script}': {exc}") from exc
    factory = getattr(module, "Theme", None)
    if not callable(factory):
        raise ThemeError(f"Theme script '{script}' does not define a 'Theme' class.")
    return factory


__all__ = [
    "DEFAULT_THEME_NAME",
    "DEFAULT_THEME_ROOT",
    "THEMES_ROOT",
    "DefaultTheme",
    "Theme",
    "ThemeError",
    "ThemeFactory",
    "load_theme",
    "register_theme",
    "resolve_theme_directory",
    "theme_parameters",
    "unregister_theme",
]
