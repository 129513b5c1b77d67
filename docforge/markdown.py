"""Markdown rendering exposed to templates as the ``markdown`` filter."""

from __future__ import annotations

from functools import lru_cache
from typing import cast

from markdown_it import MarkdownIt
from markupsafe import Markup
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin


@lru_cache(maxsize=1)
def _renderer() -> MarkdownIt:
    """Configure and cache a CommonMark renderer for doc comments."""
    md = MarkdownIt("commonmark", {"html": True, "typographer": True})
    md.enable("table").enable("strikethrough")
    md.use(deflist_plugin)
    md.use(footnote_plugin)
    return md


def render_markdown(text: str | None) -> str:
    """Render Markdown to HTML; empty input yields an empty string."""
    if not text or not text.strip():
        return ""
    return cast(str, _renderer().render(text))


def markdown_filter(text: str | None) -> Markup:
    return Markup(render_markdown(text))
