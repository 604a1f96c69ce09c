"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from conftest import BASE_URL, make_response, token_response
from flight_search.cli import main
from flight_search.client import AmadeusClient
from flight_search.config import ENV_API_KEY, ENV_API_SECRET, ENV_API_URL
from flight_search.constants import FLIGHT_OFFERS_PATH, TOKEN_PATH, VERSION


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "missing.yaml")


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setenv(ENV_API_KEY, "key")
    monkeypatch.setenv(ENV_API_SECRET, "secret")
    monkeypatch.setenv(ENV_API_URL, BASE_URL)


@pytest.fixture
def fake_client(monkeypatch, credentials, session, clock):
    """Route every client the CLI builds to the fake session."""
    client = AmadeusClient(credentials, session=session, clock=clock)
    monkeypatch.setattr(AmadeusClient, "from_settings", classmethod(lambda cls, settings: client))
    return client


def test_check_config_without_credentials_fails(monkeypatch, config_path):
    monkeypatch.delenv(ENV_API_KEY, raising=False)
    monkeypatch.delenv(ENV_API_SECRET, raising=False)

    result = CliRunner().invoke(main, ["--config", config_path, "check-config"])

    assert result.exit_code == 1


def test_check_config_obtains_token(configured, config_path, fake_client, session):
    session.add("POST", TOKEN_PATH, token_response("tok-1"))

    result = CliRunner().invoke(main, ["--config", config_path, "check-config"])

    assert result.exit_code == 0
    assert "Credentials OK" in result.output
    assert len(session.token_calls) == 1


def test_check_config_reports_rejected_credentials(configured, config_path, fake_client, session):
    session.add("POST", TOKEN_PATH, make_response(401))

    result = CliRunner().invoke(main, ["--config", config_path, "check-config"])

    assert result.exit_code == 1


def test_airports_short_keyword(configured, config_path, fake_client, session):
    result = CliRunner().invoke(main, ["--config", config_path, "airports", "l"])

    assert result.exit_code == 0
    assert "No airports found" in result.output
    assert session.calls == []


def test_flights_prints_offers(configured, config_path, fake_client, session):
    session.add("POST", TOKEN_PATH, token_response("tok-1"))
    session.add(
        "GET",
        FLIGHT_OFFERS_PATH,
        make_response(
            200,
            {
                "data": [
                    {
                        "id": "1",
                        "price": {"grandTotal": "512.30", "currency": "USD"},
                        "itineraries": [{"segments": [{}, {}]}],
                    }
                ]
            },
        ),
    )

    result = CliRunner().invoke(
        main,
        ["--config", config_path, "flights", "--origin", "JFK", "--destination", "LHR", "--departure-date", "2026-12-01"],
    )

    assert result.exit_code == 0
    assert "1 offers" in result.output
    assert "512.30 USD" in result.output
    assert "stops: 1" in result.output


def test_flights_upstream_error_exits_nonzero(configured, config_path, fake_client, session):
    session.add("POST", TOKEN_PATH, token_response("tok-1"))
    session.add("GET", FLIGHT_OFFERS_PATH, make_response(400, {"errors": [{"detail": "Invalid date"}]}))

    result = CliRunner().invoke(
        main,
        ["--config", config_path, "flights", "--origin", "JFK", "--destination", "LHR", "--departure-date", "2026-12-01"],
    )

    assert result.exit_code == 1


def test_flights_forwards_optional_filters(configured, config_path, fake_client, session):
    session.add("POST", TOKEN_PATH, token_response("tok-1"))
    session.add("GET", FLIGHT_OFFERS_PATH, make_response(200, {"data": []}))

    result = CliRunner().invoke(
        main,
        [
            "--config", config_path, "flights",
            "--origin", "JFK", "--destination", "LHR", "--departure-date", "2026-12-01",
            "--adults", "2", "--infants", "1", "--non-stop", "--max-price", "800",
        ],
    )

    assert result.exit_code == 0
    params = session.calls_to(FLIGHT_OFFERS_PATH)[0]["params"]
    assert params["infants"] == 1
    assert params["nonStop"] == "true"
    assert params["maxPrice"] == 800


def test_version_option():
    result = CliRunner().invoke(main, ["--version"])

    assert result.exit_code == 0
    assert VERSION in result.output
