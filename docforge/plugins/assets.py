"""Copy theme assets into the output directory before pages are written."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..events import BEGIN_RENDER, RenderEvent
from ..themes import DEFAULT_THEME_ROOT

if TYPE_CHECKING:
    from ..renderer import Renderer

logger = logging.getLogger(__name__)

ASSETS_DIRNAME = "assets"


class AssetsPlugin:
    """Stage the default theme's assets, then overlay the active theme's own."""

    name = "assets"

    def __init__(self, renderer: "Renderer") -> None:
        self.renderer = renderer
        self.copy_default_assets = True
        # Runs after other listeners so a cancelled render copies nothing.
        renderer.on(BEGIN_RENDER, self.on_begin_render, priority=-100)

    def on_begin_render(self, event: RenderEvent) -> None:
        theme = self.renderer.theme
        if theme is None:
            return
        sources = []
        if self.copy_default_assets:
            sources.append(DEFAULT_THEME_ROOT / ASSETS_DIRNAME)
        theme_assets = Path(theme.base_path) / ASSETS_DIRNAME
        if theme_assets not in sources:
            sources.append(theme_assets)

        destination = event.output_directory / ASSETS_DIRNAME
        for source in sources:
            if not source.is_dir():
                continue
            logger.debug("Copying assets from %s to %s", source, destination)
            shutil.copytree(source, destination, dirs_exist_ok=True)
