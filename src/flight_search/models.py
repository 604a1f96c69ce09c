"""Data models for credentials, tokens, requests and flight data."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import DEFAULT_CURRENCY, DEFAULT_MAX_OFFERS, TravelClass


class Credentials(BaseModel):
    """Upstream API credentials, loaded once at startup."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    api_secret: str = ""
    base_url: str

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key and self.api_secret)


class Token(BaseModel):
    """Cached OAuth2 access token.

    ``expires_at`` is a UNIX timestamp that already has the safety buffer
    subtracted, so a token is valid iff ``now < expires_at``.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class OutboundRequest(BaseModel):
    """One logical call to the upstream API."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    params: Optional[dict[str, Any]] = None
    json_body: Any = None


class UpstreamError(BaseModel):
    """A failed upstream call. ``http_status`` is None when no response arrived."""

    http_status: Optional[int] = None
    raw_body: Any = None


class Airport(BaseModel):
    """Airport or city returned by the location search."""

    model_config = ConfigDict(populate_by_name=True)

    iata_code: str = Field(alias="iataCode")
    name: str
    city: str
    country: str = ""
    type: Optional[str] = None


class FlightSearchParams(BaseModel):
    """Query parameters for the flight-offer search."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    origin_location_code: str = Field(alias="originLocationCode", min_length=3, max_length=3)
    destination_location_code: str = Field(alias="destinationLocationCode", min_length=3, max_length=3)
    departure_date: date = Field(alias="departureDate")
    adults: int = Field(default=1, ge=1, le=9)
    return_date: Optional[date] = Field(default=None, alias="returnDate")
    children: Optional[int] = Field(default=None, ge=0, le=9)
    infants: Optional[int] = Field(default=None, ge=0, le=9)
    travel_class: Optional[TravelClass] = Field(default=None, alias="travelClass")
    non_stop: Optional[bool] = Field(default=None, alias="nonStop")
    max_price: Optional[int] = Field(default=None, alias="maxPrice", ge=1)
    currency_code: str = Field(default=DEFAULT_CURRENCY, alias="currencyCode", min_length=3, max_length=3)
    max: int = Field(default=DEFAULT_MAX_OFFERS, ge=1, le=250)

    @model_validator(mode="after")
    def check_dates(self):
        """Return date may not precede the departure date."""
        if self.return_date and self.return_date < self.departure_date:
            raise ValueError("returnDate must be on or after departureDate")
        return self

    def to_query(self) -> dict[str, Any]:
        """Build upstream query parameters, omitting unset optional fields."""
        query: dict[str, Any] = {
            "originLocationCode": self.origin_location_code.upper(),
            "destinationLocationCode": self.destination_location_code.upper(),
            "departureDate": self.departure_date.isoformat(),
            "adults": self.adults,
            "currencyCode": self.currency_code.upper(),
            "max": self.max,
        }
        if self.return_date:
            query["returnDate"] = self.return_date.isoformat()
        # Zero passengers of a kind is the same as not sending the field
        if self.children:
            query["children"] = self.children
        if self.infants:
            query["infants"] = self.infants
        if self.travel_class:
            query["travelClass"] = self.travel_class
        if self.non_stop is not None:
            query["nonStop"] = "true" if self.non_stop else "false"
        if self.max_price:
            query["maxPrice"] = self.max_price
        return query


class FlightOffersResponse(BaseModel):
    """Flight-offer search (or pricing) response body."""

    data: Any = Field(default_factory=list)
    meta: Optional[dict[str, Any]] = None
    dictionaries: Optional[dict[str, Any]] = None
