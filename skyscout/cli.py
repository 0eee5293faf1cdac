from __future__ import annotations

import json
import logging
from typing import Optional, Tuple

import click

from .config import Settings, get_settings
from .engine import FlightAggregator, build_aggregator
from .models import InvalidQueryError, Query
from .providers import canonical_name, missing_credentials

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: list = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.option("--log-file", default=None, help="Also write logs to this file")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_file: Optional[str]) -> None:
    """SkyScout flight price aggregator."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level, log_file)
    ctx.obj = settings


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("depart_date")
@click.option("--return-date", default=None, help="Return date (YYYY-MM-DD)")
@click.option("--passengers", type=int, default=1, show_default=True)
@click.option(
    "--provider",
    "provider_names",
    multiple=True,
    help="Limit the search to these providers (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON result")
@click.pass_obj
def search(
    settings: Settings,
    origin: str,
    destination: str,
    depart_date: str,
    return_date: Optional[str],
    passengers: int,
    provider_names: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Search all configured providers and print ranked offers."""
    if provider_names:
        try:
            names = [canonical_name(p) for p in provider_names]
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--provider")
        settings = settings.model_copy(update={"providers": names})

    aggregator: FlightAggregator = build_aggregator(settings)
    query = Query(
        origin=origin.upper(),
        destination=destination.upper(),
        depart_date=depart_date,
        return_date=return_date,
        passengers=passengers,
    )
    try:
        result = aggregator.aggregate(query)
    except InvalidQueryError as exc:
        raise click.UsageError(str(exc))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.offers:
        click.echo("No offers found")
        return
    for off in result.offers:
        click.echo(
            f"{off.price:>10.2f} {off.currency}  {off.airline:<12} "
            f"{off.stops} stop(s)  {off.duration:<10} {off.source:<22} {off.booking_url}"
        )
    if result.served_from_cache:
        click.echo(f"{len(result.offers)} offers (served from cache)")
    else:
        counts = ", ".join(f"{k}={v}" for k, v in result.provider_counts.items())
        click.echo(f"{len(result.offers)} offers ({counts})")


@cli.command()
@click.pass_obj
def providers(settings: Settings) -> None:
    """Show configured providers and whether their credentials are set."""
    for raw in settings.providers:
        try:
            name = canonical_name(raw)
        except ValueError:
            click.echo(f"{raw:<16} unknown")
            continue
        missing = missing_credentials(name, settings)
        status = "ok" if not missing else f"missing {', '.join(missing)}"
        click.echo(f"{name:<16} {status}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
