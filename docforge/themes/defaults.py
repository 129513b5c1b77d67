"""Built-in theme used when a theme directory ships no theme script."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator

from ..config import OptionDescriptor
from ..events import UrlMapping
from ..models import Document, Project
from ..reader import read_file

if TYPE_CHECKING:
    from ..renderer import Renderer

THEMES_ROOT = Path(__file__).resolve().parent
DEFAULT_THEME_NAME = "default"
DEFAULT_THEME_ROOT = THEMES_ROOT / DEFAULT_THEME_NAME

OUTPUT_MARKERS = ("index.html", "assets/css/main.css")


@dataclass(frozen=True, slots=True)
class PageLink:
    label: str
    url: str


@dataclass(frozen=True, slots=True)
class PageModel:
    """View of one page handed to the default templates."""

    title: str
    project: Project
    document: Document | None = None
    readme: str | None = None
    links: tuple[PageLink, ...] = ()
    members: tuple[Document, ...] = ()


class DefaultTheme:
    """One page per module, class, interface and enum plus an index page."""

    def __init__(self, renderer: "Renderer", base_path: Path) -> None:
        self.renderer = renderer
        self.base_path = base_path

    def get_parameters(self) -> list[OptionDescriptor]:
        return [
            OptionDescriptor(
                name="readme",
                help="Path to a readme file for the index page, or 'none' to omit the project readme.",
            ),
        ]

    def is_output_directory(self, path: Path) -> bool:
        return all((path / marker).exists() for marker in OUTPUT_MARKERS)

    def get_urls(self, project: Any) -> list[UrlMapping]:
        if not isinstance(project, Project):
            project = Project.model_validate(project)

        pages: list[tuple[str, Document]] = _unique_urls(_walk_pages(project.documents))
        page_urls = {id(document): url for url, document in pages}
        urls = [UrlMapping(url="index.html", model=self._index_model(project, pages), template_name="index.html")]
        for url, document in pages:
            model = PageModel(
                title=document.name,
                project=project,
                document=document,
                links=tuple(
                    PageLink(label=child.name, url=page_urls[id(child)])
                    for child in document.children
                    if child.kind.has_own_page
                ),
                members=tuple(child for child in document.children if not child.kind.has_own_page),
            )
            urls.append(UrlMapping(url=url, model=model, template_name="reflection.html"))
        return urls

    def _index_model(self, project: Project, pages: list[tuple[str, Document]]) -> PageModel:
        top_level = {id(document) for document in project.documents}
        return PageModel(
            title=project.name,
            project=project,
            readme=self._readme(project),
            links=tuple(PageLink(label=document.name, url=url) for url, document in pages if id(document) in top_level),
            members=tuple(document for document in project.documents if not document.kind.has_own_page),
        )

    def _readme(self, project: Project) -> str | None:
        option = getattr(self.renderer.settings, "readme", None)
        if option is None:
            return project.readme
        if str(option).lower() == "none":
            return None
        path = Path(option)
        if not path.is_file():
            return project.readme
        return read_file(path)


def _walk_pages(documents: list[Document], prefix: str = "") -> Iterator[tuple[str, Document]]:
    for document in documents:
        if not document.kind.has_own_page:
            continue
        full_name = f"{prefix}.{document.slug}" if prefix else document.slug
        yield f"{document.kind.directory}/{full_name}.html", document
        yield from _walk_pages(document.children, prefix=full_name)


def _unique_urls(pages: Iterator[tuple[str, Document]]) -> list[tuple[str, Document]]:
    """Suffix URLs that collide after slugging: `a_b.html`, `a_b_2.html`, ..."""
    seen: set[str] = {"index.html"}
    unique: list[tuple[str, Document]] = []
    for url, document in pages:
        stem = url.removesuffix(".html")
        candidate, counter = url, 1
        while candidate in seen:
            counter += 1
            candidate = f"{stem}_{counter}.html"
        seen.add(candidate)
        unique.append((candidate, document))
    return unique
