"""cargo-bounds CLI — Typer-based command-line interface.

Provides the ``cargo-bounds`` command (also reachable as ``cargo bounds``)
with subcommands for testing and minimizing dependency bounds.

All output uses Rich for formatted terminal display.
"""
