"""Flask CLI commands for administering registered partners."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from ocpi_hub.api.deps import get_credentials_service
from ocpi_hub.models.enums import PartnerStatus
from ocpi_hub.schemas import PartnerSummarySchema
from ocpi_hub.services._shared.errors import ServiceError

summary_schema = PartnerSummarySchema()


def _echo_partners(rows: list[dict]) -> None:
    """Pretty-print partners as aligned columns."""
    if not rows:
        click.echo("  (no partners)")
        return
    width = max(len(row["partner_id"]) for row in rows)
    for row in rows:
        click.echo(
            f"  {row['partner_id'].ljust(width)}  {row['type']:<4}  {row['status']:<9}  {row['name']}"
        )


@click.group("partners")
def partners_cli() -> None:
    """Inspect and administer partners registered with the hub."""


@partners_cli.command("list")
@click.option("--offset", default=0, show_default=True, type=click.IntRange(min=0))
@click.option("--limit", default=50, show_default=True, type=click.IntRange(min=1))
@with_appcontext
def list_command(offset: int, limit: int) -> None:
    """List partners, newest first."""
    try:
        page = get_credentials_service().list_partners(offset=offset, limit=limit)
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    meta = page.meta
    first = meta.offset + 1 if page.items else 0
    click.echo(f"Partners {first}-{meta.offset + len(page.items)} of {meta.total}:")
    _echo_partners(summary_schema.dump(page.items, many=True))


@partners_cli.command("set-status")
@click.argument("partner_id")
@click.argument(
    "status", type=click.Choice([status.value for status in PartnerStatus], case_sensitive=True)
)
@with_appcontext
def set_status_command(partner_id: str, status: str) -> None:
    """Move PARTNER_ID to STATUS (ACTIVE, INACTIVE or SUSPENDED)."""
    try:
        partner = get_credentials_service().set_status(partner_id, PartnerStatus(status))
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{partner.partner_id} is now {partner.status.value}")
