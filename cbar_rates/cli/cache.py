"""CLI commands for warming and pruning the rates cache."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from cbar_rates.errors import APIError
from cbar_rates.services import get_coordinator, get_sweeper
from cbar_rates.utils.datetime import today


@click.command("fetch-rates")
@click.option(
    "--date",
    "rates_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Date to fetch (YYYY-MM-DD); defaults to today",
)
@with_appcontext
def fetch_rates(rates_date) -> None:
    """Fetch and cache CBAR rates for a date unless already cached."""

    target = rates_date.date() if rates_date is not None else today()
    click.echo(f"Fetching CBAR rates for {target.isoformat()}...")
    try:
        records = get_coordinator(current_app).get_rates(target)
    except APIError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"{len(records)} currencies cached for {target.isoformat()}.")


@click.command("cleanup-cache")
@click.option("--days", type=int, default=None, help="Days of snapshots to keep")
@with_appcontext
def cleanup_cache(days: int | None) -> None:
    """Delete cached snapshots older than the retention window."""

    sweeper = get_sweeper(current_app)
    kept = sweeper.default_retention_days if days is None else days
    deleted = sweeper.sweep(kept)
    click.echo(f"Removed {deleted} cached rows older than {kept} days.")
