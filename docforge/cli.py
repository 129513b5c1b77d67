"""CLI entrypoints for the docforge renderer."""

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from .config import RendererSettings, load_settings
from .models import Project
from .renderer import RenderAbortedError, Renderer, RenderResult, RenderStatus

console = Console()
app = typer.Typer(help="docforge documentation renderer.")

ConfigPathOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a docforge.yml settings file or its directory."),
]
ThemeOption = Annotated[
    str | None,
    typer.Option("--theme", "-t", help="Theme name or path to a theme directory."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def render(
    project_path: Annotated[
        Path,
        typer.Argument(..., help="YAML or JSON file describing the documentation project."),
    ],
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Directory the documentation is written to."),
    ] = Path("docs"),
    theme: ThemeOption = None,
    config_path: ConfigPathOption = None,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Display a progress bar while rendering."),
    ] = True,
) -> None:
    """Render a documentation project into an output directory."""
    settings = _load(config_path)
    if theme:
        settings.theme = theme
    settings.show_progress = progress
    project = _load_project(project_path)

    renderer = Renderer(settings)
    try:
        result = renderer.render(project, out)
    except RenderAbortedError as exc:
        console.print(f"[bold red]Render aborted[/]: {exc}")
        raise typer.Exit(code=1) from exc

    _print_result(result, out)
    if result.status is RenderStatus.ABORTED or result.failed:
        raise typer.Exit(code=1)


@app.command()
def options(
    theme: ThemeOption = None,
    config_path: ConfigPathOption = None,
) -> None:
    """List the options understood by the renderer, its plugins and the theme."""
    settings = _load(config_path)
    if theme:
        settings.theme = theme
    for descriptor in Renderer(settings).get_parameters():
        default = "" if descriptor.default is None else f" (default: {descriptor.default})"
        console.print(f"[bold blue]{descriptor.name}[/] [{descriptor.type}] {descriptor.help}{default}")


def _load(config_path: Path | None) -> RendererSettings:
    target = config_path if config_path is not None else Path.cwd()
    try:
        return load_settings(target)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Settings not found[/]: {target}")
        raise typer.Exit(code=1) from exc
    except yaml.YAMLError as exc:
        console.print(f"[bold red]Settings file is not valid YAML[/]: {exc}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        console.print(f"[bold red]Invalid settings[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _load_project(path: Path) -> Project:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data: Any = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        console.print(f"[bold red]Project file not found[/]: {path}")
        raise typer.Exit(code=1) from exc
    except yaml.YAMLError as exc:
        console.print(f"[bold red]Project file is not valid YAML/JSON[/]: {exc}")
        raise typer.Exit(code=1) from exc
    try:
        return Project.model_validate(data)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid project[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _print_result(result: RenderResult, out: Path) -> None:
    if result.status is RenderStatus.ABORTED:
        console.print(f"[bold red]Render aborted[/]: {result.reason}; nothing was written to {out}")
        return
    if result.status is RenderStatus.CANCELLED:
        console.print(f"[bold yellow]Render cancelled[/]: no pages written to {out}")
        return
    console.print(f"[bold green]Rendered[/]: {result.written} page(s) into {out}")
    if result.skipped:
        console.print(f"[bold yellow]Skipped[/]: {len(result.skipped)} page(s) cancelled by plugins")
    for failure in result.failed:
        console.print(f"[bold red]Failed[/]: {failure.url} ({failure.kind.value})")


if __name__ == "__main__":
    app()
