"""Render orchestration: theme, output directory, events and pages.

The :class:`Renderer` resolves a theme, prepares the output directory and
walks the URL mappings the theme produces, dispatching ``beginRender`` /
``endRender`` around the whole run and ``beginPage`` / ``endPage`` around
every page. Plugins listen to these events and may alter or cancel output.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping

from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from .config import RENDERER_OPTIONS, OptionDescriptor, RendererSettings
from .events import (
    BEGIN_PAGE,
    BEGIN_RENDER,
    END_PAGE,
    END_RENDER,
    Event,
    EventDispatcher,
    Listener,
    PageEvent,
    RenderEvent,
)
from .output import is_within, prepare_output_directory, write_page
from .plugins import Plugin, PluginFactory, registered_plugins
from .templates import PageTemplate, TemplateCache
from .themes import (
    DEFAULT_THEME_ROOT,
    Theme,
    ThemeError,
    load_theme,
    resolve_theme_directory,
    theme_parameters,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIRNAME = "templates"


class RenderStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class FailureKind(str, Enum):
    """Why a page produced no file."""

    MISSING_TEMPLATE = "missing-template"
    UNSAFE_PATH = "unsafe-path"
    WRITE_ERROR = "write-error"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class PageFailure:
    url: str
    kind: FailureKind


@dataclass(slots=True)
class RenderResult:
    """Summary of one render call."""

    status: RenderStatus
    written: int = 0
    failed: list[PageFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is RenderStatus.COMPLETED and not self.failed

    @property
    def error_count(self) -> int:
        return sum(1 for failure in self.failed if failure.kind is FailureKind.ERROR)


class RenderAbortedError(RuntimeError):
    """Raised when more pages failed with an exception than the settings tolerate."""

    def __init__(self, message: str, *, result: RenderResult) -> None:
        super().__init__(message)
        self.result = result


class _PageOutcome(Enum):
    WRITTEN = "written"
    CANCELLED = "cancelled"
    MISSING_TEMPLATE = FailureKind.MISSING_TEMPLATE.value
    UNSAFE_PATH = FailureKind.UNSAFE_PATH.value
    WRITE_ERROR = FailureKind.WRITE_ERROR.value


class Renderer:
    """Turn a documentation project into output files using a theme and plugins.

    One instance owns one resolved theme and one template cache; neither is
    shared, and :meth:`render` must not be called concurrently on the same
    instance.
    """

    def __init__(
        self,
        settings: RendererSettings | Mapping[str, Any] | None = None,
        *,
        plugins: Iterable[PluginFactory] | None = None,
    ) -> None:
        if settings is None:
            settings = RendererSettings()
        elif not isinstance(settings, RendererSettings):
            settings = RendererSettings(**settings)
        self.settings = settings
        self.theme: Theme | None = None
        self.plugins: dict[str, Plugin] = {}
        self._events = EventDispatcher()
        self._templates: TemplateCache | None = None
        self._output_root: Path | None = None

        factories = registered_plugins().values() if plugins is None else plugins
        for factory in factories:
            plugin = factory(self)
            self.plugins[plugin.name] = plugin

    # Events -----------------------------------------------------------------

    def on(self, event_name: str, listener: Listener, priority: int = 0) -> None:
        self._events.on(event_name, listener, priority)

    def off(self, event_name: str, listener: Listener | None = None) -> None:
        self._events.off(event_name, listener)

    def dispatch(self, event_name: str, event: Event) -> Event:
        return self._events.dispatch(event_name, event)

    # Options ----------------------------------------------------------------

    def get_plugin(self, name: str) -> Plugin | None:
        return self.plugins.get(name)

    def get_parameters(self) -> list[OptionDescriptor]:
        """Return renderer, plugin and theme options; resolves the theme if needed."""
        result = list(RENDERER_OPTIONS)
        for plugin in self.plugins.values():
            get_parameters = getattr(plugin, "get_parameters", None)
            if get_parameters is not None:
                result.extend(get_parameters())
        if self.prepare_theme():
            assert self.theme is not None
            result.extend(theme_parameters(self.theme))
        return result

    # Templates --------------------------------------------------------------

    def get_template(self, file_name: str) -> PageTemplate | None:
        if self.theme is None or self._templates is None:
            logger.error("Cannot resolve templates before theme is set.")
            return None
        return self._templates.get(file_name)

    def clear_templates(self) -> None:
        """Forget every compiled template, e.g. after theme files changed on disk."""
        if self._templates is not None:
            self._templates.clear()

    # Preparation ------------------------------------------------------------

    def prepare_theme(self) -> bool:
        if self.theme is not None:
            return True

        theme_name = self.settings.theme
        base_path = resolve_theme_directory(theme_name, self.settings.themes_dir)
        if base_path is None:
            logger.error("The theme %s could not be found.", theme_name)
            return False

        try:
            theme = load_theme(self, base_path)
        except ThemeError as exc:
            logger.error("%s", exc)
            return False

        self.theme = theme
        self._templates = TemplateCache(Path(theme.base_path), DEFAULT_THEME_ROOT)
        return True

    def prepare_output_directory(self, directory: Path | str) -> bool:
        if not self.prepare_theme():
            return False
        assert self.theme is not None
        return prepare_output_directory(Path(directory), self.theme.is_output_directory)

    # Rendering --------------------------------------------------------------

    def render(self, project: Any, output_directory: Path | str) -> RenderResult:
        """Render ``project`` into ``output_directory``.

        Configuration problems (theme not found, unusable directory) are logged
        and reported as an aborted result before any event is dispatched.
        """
        directory = Path(output_directory)
        if not self.prepare_theme():
            return RenderResult(status=RenderStatus.ABORTED, reason="theme")
        if not self.prepare_output_directory(directory):
            return RenderResult(status=RenderStatus.ABORTED, reason="output-directory")
        assert self.theme is not None

        output = RenderEvent(
            output_directory=directory,
            project=project,
            settings=self.settings.snapshot(),
            urls=list(self.theme.get_urls(project)),
        )
        result = RenderResult(status=RenderStatus.COMPLETED)

        self.dispatch(BEGIN_RENDER, output)
        if output.cancelled:
            logger.info("Rendering of %s was cancelled before any page was written.", directory)
            result.status = RenderStatus.CANCELLED
            return result

        self._output_root = directory
        try:
            with Progress(
                TextColumn("Rendering"),
                BarColumn(bar_width=40),
                TaskProgressColumn(),
                transient=True,
                disable=not self.settings.show_progress,
            ) as progress:
                task = progress.add_task("render", total=len(output.urls))
                for mapping in output.urls:
                    self._render_mapping(output.create_page_event(mapping), result)
                    progress.advance(task)
        finally:
            self._output_root = None

        self.dispatch(END_RENDER, output)
        return result

    def render_document(self, page: PageEvent) -> bool:
        """Render and write one page; returns whether a file was written.

        Exceptions raised by page listeners or by the template propagate.
        """
        return self._render_page(page) is _PageOutcome.WRITTEN

    def _render_mapping(self, page: PageEvent, result: RenderResult) -> None:
        try:
            outcome = self._render_page(page)
        except Exception as exc:
            logger.exception("Rendering %s failed", page.url)
            result.failed.append(PageFailure(url=page.url, kind=FailureKind.ERROR))
            limit = self.settings.max_page_errors
            if limit is not None and result.error_count > limit:
                result.status = RenderStatus.ABORTED
                result.reason = "page-errors"
                raise RenderAbortedError(
                    f"Rendering aborted after {result.error_count} failing page(s).",
                    result=result,
                ) from exc
            return

        if outcome is _PageOutcome.WRITTEN:
            result.written += 1
        elif outcome is _PageOutcome.CANCELLED:
            result.skipped.append(page.url)
        else:
            result.failed.append(PageFailure(url=page.url, kind=FailureKind(outcome.value)))

    def _render_page(self, page: PageEvent) -> _PageOutcome:
        self.dispatch(BEGIN_PAGE, page)
        if page.cancelled:
            return _PageOutcome.CANCELLED

        if page.template is None:
            page.template = self.get_template(posixpath.join(TEMPLATES_DIRNAME, page.template_name))
            if page.template is None:
                logger.error("Skipping %s: no template named %s.", page.url, page.template_name)
                return _PageOutcome.MISSING_TEMPLATE

        page.contents = page.template(page)

        self.dispatch(END_PAGE, page)
        if page.cancelled:
            return _PageOutcome.CANCELLED

        if self._output_root is not None and not is_within(page.filename, self._output_root):
            logger.error("Refusing to write %s outside of %s", page.filename, self._output_root)
            return _PageOutcome.UNSAFE_PATH

        try:
            write_page(page.filename, page.contents or "")
        except OSError as exc:
            logger.error("Could not write %s: %s", page.filename, exc)
            return _PageOutcome.WRITE_ERROR
        return _PageOutcome.WRITTEN
