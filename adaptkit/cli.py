"""CLI entry point for adaptkit."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from adaptkit.adapt import adapt_project
from adaptkit.config import AdaptConfig, load_config
from adaptkit.config.loader import DEFAULT_CONFIG_TEMPLATE
from adaptkit.errors import AdaptError, ConfigError, TransformError
from adaptkit.files import find_files
from adaptkit.logging_setup import configure_logging
from adaptkit.project import load_project

app = typer.Typer(
    name="adaptkit",
    help="Adapt framework build output so several bundles can share one page.",
)

config_app = typer.Typer(help="Manage adaptkit configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: AdaptConfig | None = None


def _get_config() -> AdaptConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to adaptkit.yaml")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ConfigError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging("debug" if verbose else _config.log_level, _config.log_format)


@app.command()
def run(
    framework: str | None = typer.Option(
        None, "--framework", "-f", help="create-react-app | angular-cli | vue-cli (default: detect)"
    ),
) -> None:
    """Adapt the project's build output into the output directory."""
    cfg = _get_config()
    try:
        project = load_project(cfg, framework)
    except ConfigError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint(f"[bold]Adapting[/bold] {project.module_prefix} ({project.profile.name}) from {project.build_dir}")

    try:
        report = asyncio.run(adapt_project(project))
    except TransformError as e:
        rprint(f"[red]Error:[/red] {e.path} (stage: {e.stage or '-'})\n  {e.message}")
        raise typer.Exit(1)
    except AdaptError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Adapted {report.framework} build")
    table.add_column("Step", style="cyan")
    table.add_column("Files", justify="right")
    table.add_row("Static assets", str(report.static_assets))
    table.add_row("Webpack bundles", str(report.bundles))
    table.add_row("CSS files", str(report.css_files))
    table.add_row("Adapter modules", str(report.adapter_modules))
    rprint(table)
    rprint(f"[green]Output:[/green] {project.output_dir} [dim]({report.duration:.2f}s)[/dim]")


@app.command()
def files(
    globs: list[str] = typer.Argument(..., help="Glob patterns (prefix with ! to exclude)"),
    directory: str = typer.Option(".", "--dir", "-d", help="Directory to match against"),
) -> None:
    """Show which files a set of globs resolves to."""
    matched = find_files(directory, globs)
    if not matched:
        rprint(f"[yellow]No files in {directory} match.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Matches ({len(matched)})")
    table.add_column("Path", style="green")
    for ref in matched:
        table.add_row(ref.as_posix)
    rprint(table)


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing adaptkit.yaml"),
) -> None:
    """Write a default adaptkit.yaml in the current directory."""
    path = Path("adaptkit.yaml")
    if path.exists() and not force:
        rprint(f"[yellow]{path} already exists (use --force to overwrite).[/yellow]")
        raise typer.Exit(1)
    path.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created:[/green] {path}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    dumped = yaml.safe_dump(cfg.model_dump(), default_flow_style=False, sort_keys=False)
    rprint(Panel(Syntax(dumped, "yaml"), title="Effective configuration", border_style="blue"))
