"""Constants used throughout the application."""

from enum import Enum

VERSION = "0.1.0"


class TravelClass(str, Enum):
    """Cabin classes accepted by the flight-offer search."""

    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


# HTTP Status Codes
HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500

# Upstream endpoints
DEFAULT_BASE_URL = "https://test.api.amadeus.com"
TOKEN_PATH = "/v1/security/oauth2/token"
LOCATIONS_PATH = "/v1/reference-data/locations"
FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
FLIGHT_PRICING_PATH = "/v1/shopping/flight-offers/pricing"

# Default values
DEFAULT_WEB_UI_PORT = 8080
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
TOKEN_EXPIRY_BUFFER_SECONDS = 300  # 5 minutes
MIN_KEYWORD_LENGTH = 2
LOCATION_PAGE_LIMIT = 10
DEFAULT_CURRENCY = "USD"
DEFAULT_MAX_OFFERS = 50
