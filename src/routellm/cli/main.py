"""routellm CLI: the main entry point."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from routellm import __version__

app = typer.Typer(
    name="routellm",
    help="Route each request to a strong or a weak LLM.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    if version:
        console.print(f"routellm [dim]v{__version__}[/dim]")
        raise typer.Exit()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from config)"),
):
    """Run the OpenAI-compatible routing server in the foreground."""
    import uvicorn

    from routellm.config.settings import get_settings
    from routellm.server.app import create_app

    settings = get_settings()
    if host:
        settings.server.host = host
    if port:
        settings.server.port = port

    _show_status(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
    )


@app.command()
def route(
    prompt: str = typer.Argument(..., help="Prompt to route"),
    strategy: str = typer.Option("random", "--strategy", "-s", help="Strategy name"),
    threshold: float = typer.Option(0.5, "--threshold", "-t", help="Score cutoff in [0, 1]"),
):
    """Print the model a strategy picks for PROMPT."""
    from routellm.config.settings import get_settings
    from routellm.routing.errors import RoutingError

    settings = get_settings()
    try:
        model = asyncio.run(_route_once(settings, prompt, strategy, threshold))
    except RoutingError as exc:
        console.print(f"[red]{exc.kind.value}:[/red] {escape(exc.message)}")
        raise typer.Exit(1)

    console.print(f"  [bold]Model:[/bold] {model}")


async def _route_once(settings, prompt: str, strategy: str, threshold: float) -> str:
    from routellm.routing.controller import RoutingController

    controller = RoutingController.from_settings(settings)
    try:
        return await controller.route(prompt, strategy, threshold)
    finally:
        await controller.aclose()


@app.command()
def status():
    """Show the resolved configuration."""
    from routellm.config.settings import get_settings

    _show_status(get_settings())


def _show_status(settings) -> None:
    """Print current config summary."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("[bold]Strong model[/bold]", settings.models.strong_model)
    table.add_row("[bold]Weak model[/bold]", settings.models.weak_model)
    table.add_row("[bold]Strategies[/bold]", ", ".join(settings.strategies))
    table.add_row("[bold]Upstream[/bold]", settings.upstream.base_url)
    table.add_row(
        "[bold]API key[/bold]",
        "[green]set[/green]" if settings.upstream.api_key else "[dim]not set[/dim]",
    )
    if "sw_ranking" in settings.strategies:
        sw = settings.sw_ranking
        table.add_row("[bold]Embeddings[/bold]", f"{settings.embedding.model} @ {settings.embedding.base_url}")
        table.add_row("[bold]Tiers[/bold]", str(sw.num_tiers))
        table.add_row("[bold]Battles[/bold]", ", ".join(sw.battle_datasets) or "[dim]none[/dim]")
    table.add_row("[bold]Server[/bold]", f"http://{settings.server.host}:{settings.server.port}")

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    app()
