"""Lifecycle events and the synchronous dispatcher plugins subscribe through."""

from __future__ import annotations

import logging
import posixpath
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, DefaultDict

if TYPE_CHECKING:
    from .templates import CompiledTemplate

logger = logging.getLogger(__name__)

BEGIN_RENDER = "beginRender"
END_RENDER = "endRender"
BEGIN_PAGE = "beginPage"
END_PAGE = "endPage"


class EventSignal(str, Enum):
    """Value a listener may return to steer the dispatch chain."""

    CONTINUE = "continue"
    CANCEL = "cancel"


@dataclass(eq=False)
class Event:
    """Context object handed by reference to every listener of a dispatch."""

    cancelled: bool = field(default=False, init=False)

    def cancel(self) -> None:
        """Stop the scope this event belongs to (whole render or one page)."""
        self.cancelled = True


Listener = Callable[[Any], "EventSignal | None"]


@dataclass(frozen=True, slots=True)
class UrlMapping:
    """Output path, model reference and template name produced by a theme."""

    url: str
    model: Any
    template_name: str


@dataclass(eq=False)
class PageEvent(Event):
    """Per-page render context carrying the resolved template and output."""

    project: Any = None
    settings: dict[str, Any] = field(default_factory=dict)
    url: str = ""
    model: Any = None
    template_name: str = ""
    filename: Path = field(default_factory=Path)
    template: "CompiledTemplate | None" = None
    contents: str | None = None
    layout: str | None = "default"

    def relative_url(self, target: str) -> str:
        """Return ``target`` (relative to the output root) as seen from this page."""
        if "://" in target or target.startswith(("//", "#", "mailto:")):
            return target
        base = posixpath.dirname(self.url) or "."
        return posixpath.relpath(target.lstrip("/"), base)


@dataclass(eq=False)
class RenderEvent(Event):
    """Context for one whole render call."""

    output_directory: Path = field(default_factory=Path)
    project: Any = None
    settings: dict[str, Any] = field(default_factory=dict)
    urls: list[UrlMapping] = field(default_factory=list)

    def create_page_event(self, mapping: UrlMapping) -> PageEvent:
        return PageEvent(
            project=self.project,
            settings=self.settings,
            url=mapping.url,
            model=mapping.model,
            template_name=mapping.template_name,
            filename=self.output_directory / mapping.url,
        )


@dataclass(slots=True)
class _Registration:
    listener: Listener
    priority: int


class EventDispatcher:
    """Synchronous publish/subscribe with cancellable payloads.

    Listeners run in descending priority, ties in registration order. The
    dispatcher checks the event after each listener and stops the chain once
    it has been cancelled. Listener exceptions are not caught.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[_Registration]] = defaultdict(list)

    def on(self, event_name: str, listener: Listener, priority: int = 0) -> None:
        if not isinstance(event_name, str) or not event_name.strip():
            raise ValueError("event_name must be a non-empty string.")
        registrations = self._listeners[event_name]
        registrations.append(_Registration(listener=listener, priority=priority))
        registrations.sort(key=lambda entry: -entry.priority)

    def off(self, event_name: str, listener: Listener | None = None) -> None:
        """Remove one listener, or every listener of ``event_name`` when omitted."""
        if listener is None:
            self._listeners.pop(event_name, None)
            return
        registrations = self._listeners.get(event_name)
        if not registrations:
            return
        registrations[:] = [entry for entry in registrations if entry.listener != listener]

    def has_listeners(self, event_name: str) -> bool:
        return bool(self._listeners.get(event_name))

    def dispatch(self, event_name: str, event: Event) -> Event:
        for registration in list(self._listeners.get(event_name, ())):
            if event.cancelled:
                break
            signal = registration.listener(event)
            if signal is EventSignal.CANCEL:
                event.cancel()
            if event.cancelled:
                logger.debug("Event '%s' cancelled by %r", event_name, registration.listener)
        return event
