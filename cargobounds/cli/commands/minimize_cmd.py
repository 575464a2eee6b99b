"""``cargo bounds minimize [DEP]`` — find the most flexible range you could support.

Binary-searches below the declared minimum and above the declared maximum
for the widest range that still passes the check command, then replays one
version per release line inside it. The discovered range is printed; the
manifest is left as it was.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from cargobounds.cli.commands._session import FATAL_ERRORS, bounds_session
from cargobounds.config import config
from cargobounds.models.config import MinimizeConfig
from cargobounds.monitor.renderer import TrialRenderer

console = Console()


def minimize_cmd(
    dep: str = typer.Argument(
        None,
        help="Minimize a specific dependency.",
    ),
    skip_sanity: bool = typer.Option(
        False,
        "--skip-sanity",
        "-s",
        help="Skip the sanity check.",
    ),
    strict_sanity: bool = typer.Option(
        False,
        "--strict-sanity",
        help="Fail when the sanity check finds a failing version inside the range.",
    ),
    command: str = typer.Option(
        None,
        "--command",
        "-c",
        help='Override the check command (default: "cargo check --all-features").',
    ),
    manifest_path: Path = typer.Option(
        None,
        "--manifest-path",
        help="Path to Cargo.toml (default: ./Cargo.toml).",
    ),
) -> None:
    """Find the most flexible range you could support."""
    minimize_config = MinimizeConfig(
        dependency=dep,
        skip_sanity=skip_sanity,
        strict_sanity=strict_sanity,
        command=command,
    )

    try:
        with bounds_session(manifest_path or config.manifest_path, console) as orchestrator:
            summary = orchestrator.minimize(minimize_config)
    except FATAL_ERRORS as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print()
    TrialRenderer(console=console).print_minimize_summary(summary)
    if not summary.passed:
        raise typer.Exit(code=1)
