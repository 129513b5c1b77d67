from __future__ import annotations

from pathlib import Path

from docforge.events import BEGIN_PAGE, BEGIN_RENDER, PageEvent
from docforge.models import Document, DocumentKind, Project
from docforge.plugins import AssetsPlugin, LayoutPlugin, register_plugin, registered_plugins, unregister_plugin
from docforge.renderer import Renderer, RenderStatus


def _project() -> Project:
    return Project(
        name="Widgets",
        readme="Widgets *everywhere*.",
        documents=[
            Document(
                name="core",
                comment="Core building blocks.",
                children=[
                    Document(name="Widget", kind=DocumentKind.CLASS, comment="Builds **widgets**."),
                    Document(name="make_widget", kind=DocumentKind.FUNCTION, signature="make_widget(size: int) -> Widget"),
                ],
            ),
        ],
    )


def test_builtin_plugins_are_registered() -> None:
    renderer = Renderer({"show_progress": False})

    assert isinstance(renderer.get_plugin("assets"), AssetsPlugin)
    assert isinstance(renderer.get_plugin("layout"), LayoutPlugin)


def test_registered_plugins_are_instantiated_per_renderer() -> None:
    created: list[Renderer] = []

    class CountingPlugin:
        name = "counting"

        def __init__(self, renderer: Renderer) -> None:
            created.append(renderer)
            renderer.on(BEGIN_RENDER, lambda event: None)

    register_plugin("counting", CountingPlugin)
    try:
        assert "counting" in registered_plugins()
        renderer = Renderer({"show_progress": False})
    finally:
        unregister_plugin("counting")

    assert created == [renderer]
    assert "counting" not in registered_plugins()


def test_default_theme_render_with_layout_and_assets(tmp_path: Path) -> None:
    renderer = Renderer({"show_progress": False})
    out = tmp_path / "docs"

    result = renderer.render(_project(), out)

    assert result.status is RenderStatus.COMPLETED and result.ok
    assert result.written == 3
    assert (out / "assets" / "css" / "main.css").is_file()

    index = (out / "index.html").read_text(encoding="utf-8")
    assert index.startswith("<!DOCTYPE html>")
    assert "<title>Widgets | Widgets</title>" in index
    assert 'href="assets/css/main.css"' in index
    assert "<em>everywhere</em>" in index
    assert 'href="modules/core.html"' in index

    widget = (out / "classes" / "core.widget.html").read_text(encoding="utf-8")
    assert 'href="../assets/css/main.css"' in widget
    assert "<strong>widgets</strong>" in widget

    module = (out / "modules" / "core.html").read_text(encoding="utf-8")
    assert 'href="../classes/core.widget.html"' in module
    assert "make_widget(size: int) -&gt; Widget" in module


def test_rendering_twice_reuses_recognized_output(tmp_path: Path) -> None:
    out = tmp_path / "docs"
    first = Renderer({"show_progress": False}).render(_project(), out)
    (out / "classes" / "stale.html").write_text("old", encoding="utf-8")

    second = Renderer({"show_progress": False}).render(_project(), out)

    assert first.written == second.written == 3
    assert not (out / "classes" / "stale.html").exists()


def test_theme_assets_overlay_default_assets(tmp_path: Path) -> None:
    theme = tmp_path / "theme"
    (theme / "assets" / "css").mkdir(parents=True)
    (theme / "assets" / "css" / "main.css").write_text("body { color: red; }", encoding="utf-8")
    (theme / "assets" / "logo.svg").write_text("<svg/>", encoding="utf-8")
    renderer = Renderer({"theme": str(theme), "show_progress": False})
    out = tmp_path / "docs"

    renderer.render(Project(name="Themed"), out)

    assert (out / "assets" / "css" / "main.css").read_text(encoding="utf-8") == "body { color: red; }"
    assert (out / "assets" / "logo.svg").is_file()


def test_assets_plugin_can_skip_default_assets(tmp_path: Path) -> None:
    theme = tmp_path / "theme"
    (theme / "assets").mkdir(parents=True)
    (theme / "assets" / "logo.svg").write_text("<svg/>", encoding="utf-8")
    renderer = Renderer({"theme": str(theme), "show_progress": False})
    plugin = renderer.get_plugin("assets")
    assert isinstance(plugin, AssetsPlugin)
    plugin.copy_default_assets = False
    out = tmp_path / "docs"

    renderer.render(Project(name="Themed"), out)

    assert (out / "assets" / "logo.svg").is_file()
    assert not (out / "assets" / "css" / "main.css").exists()


def test_cancelled_render_copies_no_assets(tmp_path: Path) -> None:
    renderer = Renderer({"show_progress": False})
    renderer.on(BEGIN_RENDER, lambda event: event.cancel())
    out = tmp_path / "docs"

    result = renderer.render(_project(), out)

    assert result.status is RenderStatus.CANCELLED
    assert list(out.iterdir()) == []


def test_colliding_document_names_render_separate_pages(tmp_path: Path) -> None:
    project = Project(name="Collisions", documents=[Document(name="a b"), Document(name="a_b")])
    out = tmp_path / "docs"

    result = Renderer({"show_progress": False}).render(project, out)

    assert result.written == 3
    assert sorted(path.name for path in (out / "modules").iterdir()) == ["a_b.html", "a_b_2.html"]


def test_page_can_opt_out_of_layout(tmp_path: Path) -> None:
    renderer = Renderer({"show_progress": False})

    def skip_layout(page: PageEvent) -> None:
        if page.url == "modules/core.html":
            page.layout = None

    renderer.on(BEGIN_PAGE, skip_layout)
    out = tmp_path / "docs"

    renderer.render(_project(), out)

    assert not (out / "modules" / "core.html").read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
    assert (out / "index.html").read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_theme_with_string_base_path_copies_assets(tmp_path: Path) -> None:
    theme = tmp_path / "scripted"
    (theme / "assets").mkdir(parents=True)
    (theme / "assets" / "logo.svg").write_text("<svg/>", encoding="utf-8")
    (theme / "theme.py").write_text(
        "from docforge.events import UrlMapping\n"
        "\n"
        "\n"
        "class Theme:\n"
        "    def __init__(self, renderer, base_path):\n"
        "        self.base_path = str(base_path)\n"
        "\n"
        "    def get_urls(self, project):\n"
        "        return []\n"
        "\n"
        "    def is_output_directory(self, path):\n"
        "        return False\n",
        encoding="utf-8",
    )
    out = tmp_path / "docs"

    result = Renderer({"theme": str(theme), "show_progress": False}).render(Project(name="Scripted"), out)

    assert result.status is RenderStatus.COMPLETED
    assert (out / "assets" / "logo.svg").is_file()
    assert (out / "assets" / "css" / "main.css").is_file()
