"""Plugin contract and the registry of plugins every renderer instantiates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..renderer import Renderer

logger = logging.getLogger(__name__)


@runtime_checkable
class Plugin(Protocol):
    """Listener bundle attached to a renderer.

    Plugins subscribe to lifecycle events in their constructor and may define
    ``get_parameters()`` to contribute option descriptors.
    """

    name: str


PluginFactory = Callable[["Renderer"], Plugin]

_registry: dict[str, PluginFactory] = {}


def register_plugin(name: str, factory: PluginFactory) -> None:
    if name in _registry:
        logger.warning("Plugin '%s' is already registered and will be replaced.", name)
    _registry[name] = factory


def unregister_plugin(name: str) -> None:
    _registry.pop(name, None)


def registered_plugins() -> dict[str, PluginFactory]:
    """Return the registered factories in registration order."""
    return dict(_registry)


from .assets import AssetsPlugin  # noqa: E402
from .layout import LayoutPlugin  # noqa: E402

register_plugin(AssetsPlugin.name, AssetsPlugin)
register_plugin(LayoutPlugin.name, LayoutPlugin)

__all__ = [
    "AssetsPlugin",
    "LayoutPlugin",
    "Plugin",
    "PluginFactory",
    "register_plugin",
    "registered_plugins",
    "unregister_plugin",
]
