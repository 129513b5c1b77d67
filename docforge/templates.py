"""Template lookup, compilation and caching for page rendering with Jinja2."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from jinja2 import BaseLoader, Environment, Template, TemplateNotFound, select_autoescape

from .events import PageEvent
from .markdown import markdown_filter
from .reader import read_file

logger = logging.getLogger(__name__)

CompiledTemplate = Callable[[PageEvent], str]


def resolve_template_path(search_paths: Sequence[Path], file_name: str) -> Path | None:
    """Return the first existing ``<search path>/<file_name>``."""
    for root in search_paths:
        candidate = (root / file_name).resolve()
        if candidate.is_file():
            return candidate
    return None


class ThemeTemplateLoader(BaseLoader):
    """Load sources from the theme directory, then the default theme, through the BOM-aware reader."""

    def __init__(self, search_paths: Sequence[Path]) -> None:
        self.search_paths = list(search_paths)

    def get_source(self, environment: Environment, template: str) -> tuple[str, str, Callable[[], bool]]:
        path = resolve_template_path(self.search_paths, template)
        if path is None:
            raise TemplateNotFound(template)
        mtime = path.stat().st_mtime_ns
        source = read_file(path)

        def uptodate() -> bool:
            try:
                return path.stat().st_mtime_ns == mtime
            except OSError:
                return False

        return source, str(path), uptodate


def create_environment(search_paths: Sequence[Path]) -> Environment:
    # Whitespace in template sources is emitted literally; nothing is re-indented or trimmed.
    environment = Environment(
        loader=ThemeTemplateLoader(search_paths),
        autoescape=select_autoescape(["html", "htm", "xml"]),
        trim_blocks=False,
        lstrip_blocks=False,
        keep_trailing_newline=True,
    )
    environment.filters["markdown"] = markdown_filter
    return environment


@dataclass(frozen=True, slots=True)
class PageTemplate:
    """Compiled template callable with a page event."""

    name: str
    path: Path
    template: Template

    def __call__(self, page: PageEvent) -> str:
        return self.template.render(
            page=page,
            model=page.model,
            project=page.project,
            settings=page.settings,
            url=page.url,
        )


class TemplateCache:
    """Compile templates on first use and keep them for the cache's lifetime.

    Entries are keyed by the file name exactly as requested and are never
    replaced; :meth:`clear` is the only way to drop them.
    """

    def __init__(self, base_path: Path, fallback_path: Path | None = None) -> None:
        search_paths = [base_path]
        if fallback_path is not None and fallback_path.resolve() != base_path.resolve():
            search_paths.append(fallback_path)
        self._search_paths = search_paths
        self._environment = create_environment(search_paths)
        self._templates: dict[str, PageTemplate] = {}

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def search_paths(self) -> list[Path]:
        return list(self._search_paths)

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, file_name: str) -> PageTemplate | None:
        cached = self._templates.get(file_name)
        if cached is not None:
            return cached

        path = resolve_template_path(self._search_paths, file_name)
        if path is None:
            logger.error("Cannot find template %s", file_name)
            return None
        try:
            template = self._environment.get_template(Path(file_name).as_posix())
        except TemplateNotFound:
            logger.error("Cannot find template %s", file_name)
            return None

        compiled = PageTemplate(name=file_name, path=path, template=template)
        self._templates[file_name] = compiled
        return compiled

    def clear(self) -> None:
        self._templates.clear()
        if self._environment.cache is not None:
            self._environment.cache.clear()
