"""Tests for airport lookup and flight-offer search."""

from datetime import date
from unittest.mock import Mock

import pytest

from flight_search.client import AmadeusClient
from flight_search.constants import FLIGHT_OFFERS_PATH, FLIGHT_PRICING_PATH, LOCATIONS_PATH
from flight_search.errors import GenericUpstreamError, RateLimitError, ValidationError
from flight_search.flights import confirm_flight_price, search_airports, search_flight_offers
from flight_search.models import FlightSearchParams

LOCATIONS = {
    "data": [
        {
            "type": "location",
            "subType": "AIRPORT",
            "name": "HEATHROW",
            "iataCode": "LHR",
            "address": {"cityName": "LONDON", "countryName": "UNITED KINGDOM"},
        },
        {
            "type": "location",
            "subType": "CITY",
            "name": "LONDON",
            "iataCode": "LON",
        },
        {"type": "location", "subType": "AIRPORT", "name": "NO CODE"},
    ]
}


@pytest.fixture
def api():
    return Mock(spec=AmadeusClient)


def test_search_airports_maps_locations(api):
    """Test parsing of location search results."""
    api.get.return_value = LOCATIONS

    airports = search_airports(api, "  lon ")

    api.get.assert_called_once_with(
        LOCATIONS_PATH,
        {"keyword": "lon", "subType": "AIRPORT,CITY", "page[limit]": 10},
    )
    assert [a.iata_code for a in airports] == ["LHR", "LON"]
    assert airports[0].city == "LONDON"
    assert airports[0].country == "UNITED KINGDOM"
    assert airports[0].type == "AIRPORT"
    # Missing address falls back to the location name
    assert airports[1].city == "LONDON"
    assert airports[1].country == ""


@pytest.mark.parametrize("keyword", ["", "l", " l ", None])
def test_search_airports_short_keyword_skips_api(api, keyword):
    assert search_airports(api, keyword) == []
    api.get.assert_not_called()


@pytest.mark.parametrize("error", [GenericUpstreamError("boom", 500), RateLimitError("slow", 429)])
def test_search_airports_degrades_to_empty_list(api, error):
    api.get.side_effect = error
    assert search_airports(api, "paris") == []


def test_search_flight_offers_builds_query(api):
    api.get.return_value = {
        "data": [{"id": "1"}, {"id": "2"}],
        "meta": {"count": 2},
        "dictionaries": {"carriers": {"BA": "BRITISH AIRWAYS"}},
    }
    params = FlightSearchParams(
        originLocationCode="jfk",
        destinationLocationCode="lhr",
        departureDate=date(2026, 12, 1),
        returnDate=date(2026, 12, 8),
        adults=2,
        children=1,
        travelClass="BUSINESS",
        nonStop=True,
    )

    result = search_flight_offers(api, params)

    api.get.assert_called_once_with(
        FLIGHT_OFFERS_PATH,
        {
            "originLocationCode": "JFK",
            "destinationLocationCode": "LHR",
            "departureDate": "2026-12-01",
            "returnDate": "2026-12-08",
            "adults": 2,
            "children": 1,
            "travelClass": "BUSINESS",
            "nonStop": "true",
            "currencyCode": "USD",
            "max": 50,
        },
    )
    assert len(result.data) == 2
    assert result.meta == {"count": 2}
    assert result.dictionaries["carriers"]["BA"] == "BRITISH AIRWAYS"


def test_search_flight_offers_propagates_errors(api):
    api.get.side_effect = ValidationError("Invalid date", 400)
    params = FlightSearchParams(
        originLocationCode="JFK",
        destinationLocationCode="LHR",
        departureDate="2026-12-01",
    )
    with pytest.raises(ValidationError):
        search_flight_offers(api, params)


def test_confirm_flight_price_posts_offer(api):
    offer = {"id": "1", "type": "flight-offer"}
    api.post.return_value = {"data": {"type": "flight-offers-pricing", "flightOffers": [offer]}}

    result = confirm_flight_price(api, offer)

    api.post.assert_called_once_with(
        FLIGHT_PRICING_PATH,
        {"data": {"type": "flight-offers-pricing", "flightOffers": [offer]}},
    )
    assert result.data["flightOffers"] == [offer]
