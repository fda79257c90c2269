"""CLI entry points."""

from __future__ import annotations

from flask import Flask

from .cache import cleanup_cache, fetch_rates


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(fetch_rates)
    app.cli.add_command(cleanup_cache)
