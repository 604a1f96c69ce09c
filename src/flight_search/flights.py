"""Airport lookup, flight-offer search and price confirmation."""

import logging
from typing import Any

from .client import AmadeusClient
from .constants import (
    FLIGHT_OFFERS_PATH,
    FLIGHT_PRICING_PATH,
    LOCATION_PAGE_LIMIT,
    LOCATIONS_PATH,
    MIN_KEYWORD_LENGTH,
)
from .errors import ClassifiedError
from .models import Airport, FlightOffersResponse, FlightSearchParams

logger = logging.getLogger(__name__)


def _parse_location(item: dict) -> Airport:
    """Parse an upstream location to the Airport model."""
    address = item.get("address") or {}
    return Airport(
        iata_code=item.get("iataCode", ""),
        name=item.get("name", ""),
        city=address.get("cityName") or item.get("name", ""),
        country=address.get("countryName") or "",
        type=item.get("subType"),
    )


def search_airports(client: AmadeusClient, keyword: str, sub_type: str = "AIRPORT,CITY") -> list[Airport]:
    """Search airports and cities by keyword (city, airport name or IATA code).

    Keywords shorter than two characters never reach the API. Upstream
    failures degrade to an empty list so autocomplete keeps working.
    """
    keyword = (keyword or "").strip()
    if len(keyword) < MIN_KEYWORD_LENGTH:
        return []

    params = {
        "keyword": keyword,
        "subType": sub_type,
        "page[limit]": LOCATION_PAGE_LIMIT,
    }
    try:
        response = client.get(LOCATIONS_PATH, params)
    except ClassifiedError as e:
        logger.error(f"Airport search failed for '{keyword}': {e}")
        return []

    airports = []
    for item in (response or {}).get("data", []):
        if item.get("iataCode"):
            airports.append(_parse_location(item))

    logger.info(f"Found {len(airports)} locations for '{keyword}'")
    return airports


def search_flight_offers(client: AmadeusClient, params: FlightSearchParams) -> FlightOffersResponse:
    """Search flight offers. Classified errors propagate to the caller."""
    query = params.to_query()
    logger.info(
        f"Searching flights {query['originLocationCode']} -> {query['destinationLocationCode']} "
        f"on {query['departureDate']}"
    )
    response = client.get(FLIGHT_OFFERS_PATH, query)
    result = FlightOffersResponse(**(response or {}))
    logger.info(f"Fetched {len(result.data)} flight offers")
    return result


def confirm_flight_price(client: AmadeusClient, flight_offer: dict[str, Any]) -> FlightOffersResponse:
    """Confirm the current price of a single flight offer before booking."""
    body = {
        "data": {
            "type": "flight-offers-pricing",
            "flightOffers": [flight_offer],
        }
    }
    response = client.post(FLIGHT_PRICING_PATH, body)
    return FlightOffersResponse(**(response or {}))
