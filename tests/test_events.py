from __future__ import annotations

import pytest

from docforge.events import (
    BEGIN_PAGE,
    EventDispatcher,
    EventSignal,
    PageEvent,
    RenderEvent,
    UrlMapping,
)


def test_listeners_run_in_registration_order_with_shared_payload() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []

    def first(event: PageEvent) -> None:
        calls.append("first")
        event.contents = "a"

    def second(event: PageEvent) -> None:
        calls.append("second")
        event.contents = (event.contents or "") + "b"

    dispatcher.on(BEGIN_PAGE, first)
    dispatcher.on(BEGIN_PAGE, second)
    page = PageEvent(url="index.html")

    returned = dispatcher.dispatch(BEGIN_PAGE, page)

    assert returned is page
    assert calls == ["first", "second"]
    assert page.contents == "ab"
    assert not page.cancelled


def test_higher_priority_listeners_run_first() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []

    dispatcher.on("custom", lambda event: calls.append("low"), priority=-5)
    dispatcher.on("custom", lambda event: calls.append("default"))
    dispatcher.on("custom", lambda event: calls.append("high"), priority=10)

    dispatcher.dispatch("custom", PageEvent())

    assert calls == ["high", "default", "low"]


def test_cancel_stops_the_remaining_chain() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []

    def canceller(event: PageEvent) -> None:
        calls.append("canceller")
        event.cancel()

    dispatcher.on(BEGIN_PAGE, canceller)
    dispatcher.on(BEGIN_PAGE, lambda event: calls.append("late"))

    page = dispatcher.dispatch(BEGIN_PAGE, PageEvent())

    assert page.cancelled
    assert calls == ["canceller"]


def test_returning_cancel_signal_cancels_event() -> None:
    dispatcher = EventDispatcher()
    dispatcher.on(BEGIN_PAGE, lambda event: EventSignal.CANCEL)

    page = dispatcher.dispatch(BEGIN_PAGE, PageEvent())

    assert page.cancelled


def test_listener_exceptions_propagate() -> None:
    dispatcher = EventDispatcher()

    def broken(event: PageEvent) -> None:
        raise RuntimeError("plugin failure")

    dispatcher.on(BEGIN_PAGE, broken)

    with pytest.raises(RuntimeError, match="plugin failure"):
        dispatcher.dispatch(BEGIN_PAGE, PageEvent())


def test_off_removes_listeners() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []

    def listener(event: PageEvent) -> None:
        calls.append("called")

    dispatcher.on(BEGIN_PAGE, listener)
    dispatcher.off(BEGIN_PAGE, listener)
    dispatcher.dispatch(BEGIN_PAGE, PageEvent())

    assert calls == []
    assert not dispatcher.has_listeners(BEGIN_PAGE)


def test_on_rejects_blank_event_names() -> None:
    with pytest.raises(ValueError):
        EventDispatcher().on("  ", lambda event: None)


def test_render_event_creates_page_events(tmp_path) -> None:
    output = RenderEvent(output_directory=tmp_path, project="project", settings={"theme": "default"})
    mapping = UrlMapping(url="classes/widget.html", model="widget", template_name="reflection.html")

    page = output.create_page_event(mapping)

    assert page.filename == tmp_path / "classes" / "widget.html"
    assert page.project == "project"
    assert page.model == "widget"
    assert page.template_name == "reflection.html"
    assert page.settings == {"theme": "default"}
    assert page.template is None and page.contents is None
    assert page.relative_url("assets/css/main.css") == "../assets/css/main.css"


def test_pre_cancelled_event_runs_no_listeners() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []
    dispatcher.on(BEGIN_PAGE, lambda event: calls.append("listener"))
    page = PageEvent()
    page.cancel()

    dispatcher.dispatch(BEGIN_PAGE, page)

    assert calls == []
