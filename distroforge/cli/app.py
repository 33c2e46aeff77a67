"""Main Typer application — imports and registers all CLI commands.

Entry point: ``distroforge`` (configured via pyproject.toml project.scripts).

Commands: build, list, plan.
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from distroforge.cli.commands.build import build_cmd
from distroforge.cli.commands.list_cmd import list_cmd
from distroforge.cli.commands.plan import plan_cmd
from distroforge.config import ForgeConfig

app = typer.Typer(
    name="distroforge",
    help="Distroforge: republish WSL root filesystems as container base images.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Download, import and publish every distribution.")(build_cmd)
app.command(name="list", help="List the distributions in the manifest.")(list_cmd)
app.command(name="plan", help="Show the registry references for a build.")(plan_cmd)


def configure_logging(level: str) -> None:
    """Route all ``distroforge`` loggers through a Rich handler at *level*."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: config.",
    ),
) -> None:
    """Distroforge: republish WSL root filesystems as container base images."""
    configure_logging((log_level or ForgeConfig().log_level).upper())


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
