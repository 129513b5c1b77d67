"""Output directory lifecycle and page persistence."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


def prepare_output_directory(directory: Path, is_output_directory: Callable[[Path], bool]) -> bool:
    """Make ``directory`` ready to receive a fresh render.

    Missing directories are created. An empty directory is used as is. A
    non-empty directory is only wiped when ``is_output_directory`` recognizes
    it as an earlier render; anything else is left untouched and rejected.
    """
    if directory.exists():
        if not directory.is_dir():
            logger.error('The output target "%s" exists but it is not a directory.', directory)
            return False

        if not any(directory.iterdir()):
            return True

        if not is_output_directory(directory):
            logger.error(
                'The output directory "%s" exists but does not seem to be generated documentation.\n'
                "Make sure this is the right target directory, or choose an empty or different "
                "directory and render again.",
                directory,
            )
            return False

        try:
            shutil.rmtree(directory)
        except OSError as exc:
            logger.warning("Could not empty the output directory %s: %s", directory, exc)

    if not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create output directory %s: %s", directory, exc)
            return False

    return True


def is_within(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def write_page(destination: Path, contents: str) -> Path:
    """Write ``contents`` as UTF-8, creating parent directories; overwrites in place."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(contents, encoding="utf-8")
    return destination
