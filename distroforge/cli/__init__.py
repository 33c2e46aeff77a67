"""Distroforge CLI — Typer-based command-line interface.

Provides the ``distroforge`` command with subcommands for running the
publication pipeline, listing manifest contents and previewing registry
references.

All output uses Rich for formatted terminal display.
"""
