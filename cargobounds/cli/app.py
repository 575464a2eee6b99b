"""Main Typer application — registers the CLI commands.

Entry point: ``cargo-bounds`` (configured via pyproject.toml scripts). Cargo
runs ``cargo-bounds bounds ...`` for ``cargo bounds ...``; the extra
``bounds`` argument is dropped in :func:`main`.
"""

from __future__ import annotations

import logging
import sys

import typer
from rich.logging import RichHandler

from cargobounds.cli.commands.minimize_cmd import minimize_cmd
from cargobounds.cli.commands.test_cmd import test_cmd
from cargobounds.config import config

app = typer.Typer(
    name="cargo-bounds",
    help="Find and verify the real version bounds of your dependencies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="test", help="Test if your current dependency bounds are valid.")(test_cmd)
app.command(name="minimize", help="Find the most flexible range you could support.")(minimize_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: CARGO_BOUNDS_LOG_LEVEL or WARNING).",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    args = sys.argv[1:]
    if args and args[0] == "bounds":
        args = args[1:]
    app(args=args, prog_name="cargo bounds")


if __name__ == "__main__":
    main()
