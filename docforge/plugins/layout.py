"""Wrap rendered page contents in the theme's layout template."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from ..events import END_PAGE, PageEvent

if TYPE_CHECKING:
    from ..renderer import Renderer

LAYOUTS_DIRNAME = "layouts"


class LayoutPlugin:
    """Render ``layouts/<page.layout>.html`` around each page; ``layout = None`` opts out."""

    name = "layout"

    def __init__(self, renderer: "Renderer") -> None:
        self.renderer = renderer
        renderer.on(END_PAGE, self.on_end_page)

    def on_end_page(self, page: PageEvent) -> None:
        if not page.layout:
            return
        layout = self.renderer.get_template(posixpath.join(LAYOUTS_DIRNAME, f"{page.layout}.html"))
        if layout is None:
            return
        page.contents = layout(page)
