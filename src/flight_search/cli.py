"""Command-line interface for flight search."""

import json
import logging
import sys
from typing import Optional

import click
import pydantic

from .client import AmadeusClient
from .config import Settings, validate_credentials
from .constants import VERSION, TravelClass
from .errors import ClassifiedError
from .flights import search_airports, search_flight_offers
from .models import FlightSearchParams

logger = logging.getLogger(__name__)


def _show_config_error(invalid_vars: list[str], config_path: str, exit_code: Optional[int] = 1):
    """Display configuration error message and optionally exit."""
    logger.error("="*60)
    logger.error("CONFIGURATION ERROR: Missing or invalid credentials")
    logger.error("="*60)
    logger.error("Missing/invalid variables:")
    for var in invalid_vars:
        logger.error(f"  - {var}")
    logger.error("")
    logger.error("Required steps:")
    logger.error("  1. Get Amadeus credentials: https://developers.amadeus.com/my-apps")
    logger.error(f"  2. Edit {config_path} or set the environment variables above")
    logger.error("="*60)
    if exit_code is not None:
        sys.exit(exit_code)


def _require_valid_config(settings: Settings):
    """Validate config credentials and exit if invalid."""
    is_valid, invalid_vars = validate_credentials(settings)
    if not is_valid:
        _show_config_error(invalid_vars, str(settings.config_path))


def setup_logging(level: str):
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


@click.group()
@click.version_option(version=VERSION)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yaml (default: data/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default=None,
    help="Logging level (overrides config)",
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """Flight search backed by the Amadeus API."""
    settings = Settings(config_path)
    setup_logging(log_level or settings.log_level)
    ctx.obj = settings


@main.command("check-config")
@click.pass_obj
def check_config(settings: Settings):
    """Check credentials and try to obtain an access token."""
    _require_valid_config(settings)

    client = AmadeusClient.from_settings(settings)
    try:
        client.token_manager.get_valid_token()
    except ClassifiedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()

    click.echo(f"Credentials OK for {settings.credentials.base_url}")


@main.command()
@click.argument("keyword")
@click.pass_obj
def airports(settings: Settings, keyword: str):
    """Search airports and cities by KEYWORD."""
    _require_valid_config(settings)

    client = AmadeusClient.from_settings(settings)
    try:
        results = search_airports(client, keyword)
    finally:
        client.close()

    if not results:
        click.echo("No airports found")
        return
    for airport in results:
        click.echo(f"{airport.iata_code}  {airport.name} ({airport.city}, {airport.country}) [{airport.type}]")


@main.command()
@click.option("--origin", required=True, help="Origin IATA code")
@click.option("--destination", required=True, help="Destination IATA code")
@click.option("--departure-date", required=True, help="Departure date (YYYY-MM-DD)")
@click.option("--return-date", default=None, help="Return date (YYYY-MM-DD)")
@click.option("--adults", type=int, default=1, show_default=True)
@click.option("--children", type=int, default=None)
@click.option("--infants", type=int, default=None)
@click.option(
    "--travel-class",
    type=click.Choice([c.value for c in TravelClass]),
    default=None,
)
@click.option("--non-stop/--allow-stops", default=None, help="Only direct flights (default: no filter)")
@click.option("--max-price", type=int, default=None, help="Maximum price per traveler")
@click.option("--currency", default="USD", show_default=True)
@click.option("--max", "max_results", type=int, default=50, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the raw response as JSON")
@click.pass_obj
def flights(
    settings: Settings,
    origin: str,
    destination: str,
    departure_date: str,
    return_date: Optional[str],
    adults: int,
    children: Optional[int],
    infants: Optional[int],
    travel_class: Optional[str],
    non_stop: Optional[bool],
    max_price: Optional[int],
    currency: str,
    max_results: int,
    as_json: bool,
):
    """Search flight offers."""
    _require_valid_config(settings)

    try:
        params = FlightSearchParams(
            originLocationCode=origin,
            destinationLocationCode=destination,
            departureDate=departure_date,
            returnDate=return_date,
            adults=adults,
            children=children,
            infants=infants,
            travelClass=travel_class,
            nonStop=non_stop,
            maxPrice=max_price,
            currencyCode=currency,
            max=max_results,
        )
    except pydantic.ValidationError as e:
        raise click.BadParameter(str(e))

    client = AmadeusClient.from_settings(settings)
    try:
        result = search_flight_offers(client, params)
    except ClassifiedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()

    if as_json:
        click.echo(json.dumps(result.model_dump(), indent=2))
        return

    click.echo(f"\n=== {len(result.data)} offers ===")
    for offer in result.data:
        price = offer.get("price", {})
        itineraries = offer.get("itineraries", [])
        stops = [max(len(i.get("segments", [])) - 1, 0) for i in itineraries]
        click.echo(
            f"  {offer.get('id', '?'):>4}  {price.get('grandTotal') or price.get('total')} "
            f"{price.get('currency', '')}  stops: {'/'.join(str(s) for s in stops)}"
        )


@main.command()
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", type=int, default=None, help="Port (overrides config)")
@click.pass_obj
def serve(settings: Settings, host: Optional[str], port: Optional[int]):
    """Run the HTTP API."""
    import uvicorn
    from .web import create_app

    _require_valid_config(settings)

    app = create_app(settings)
    host = host or settings.host
    port = port or settings.port
    logger.info(f"Serving flight search API on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
