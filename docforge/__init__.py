"""docforge rendering engine exposing the renderer and its extension points."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .events import BEGIN_PAGE, BEGIN_RENDER, END_PAGE, END_RENDER, PageEvent, RenderEvent, UrlMapping
from .renderer import RenderAbortedError, Renderer, RenderResult, RenderStatus

__all__ = [
    "BEGIN_PAGE",
    "BEGIN_RENDER",
    "END_PAGE",
    "END_RENDER",
    "PageEvent",
    "RenderAbortedError",
    "RenderEvent",
    "RenderResult",
    "RenderStatus",
    "Renderer",
    "UrlMapping",
    "__version__",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("docforge")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
