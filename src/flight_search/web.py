"""
HTTP API for flight search.
Thin route handlers that parse query strings and forward them to the client.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import pydantic
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .client import AmadeusClient
from .config import Settings
from .constants import HTTP_BAD_REQUEST, HTTP_INTERNAL_SERVER_ERROR, VERSION
from .errors import ClassifiedError
from .flights import search_airports, search_flight_offers
from .models import FlightSearchParams

logger = logging.getLogger(__name__)


def create_app(settings: Settings, client: Optional[AmadeusClient] = None) -> FastAPI:
    """Create the API app around one shared client."""
    client = client or AmadeusClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down, closing upstream session")
        client.close()

    app = FastAPI(title="Flight Search", version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.client = client

    @app.exception_handler(ClassifiedError)
    async def classified_error_handler(request: Request, exc: ClassifiedError):
        return JSONResponse(
            {"error": exc.message},
            status_code=exc.status or HTTP_INTERNAL_SERVER_ERROR,
        )

    # Sync handlers run in the threadpool and share the client's token cache
    @app.get("/api/airports")
    def airports(request: Request, keyword: str = ""):
        """Airport autocomplete"""
        results = search_airports(request.app.state.client, keyword, sub_type="AIRPORT")
        return {"data": [a.model_dump(by_alias=True) for a in results]}

    @app.get("/api/flights")
    def flights(request: Request):
        """Flight-offer search"""
        try:
            params = FlightSearchParams(**dict(request.query_params))
        except pydantic.ValidationError as e:
            errors = e.errors()
            message = errors[0]["msg"] if errors else "Invalid request parameters"
            return JSONResponse({"error": message}, status_code=HTTP_BAD_REQUEST)

        result = search_flight_offers(request.app.state.client, params)
        return {
            "data": result.data,
            "meta": result.meta,
            "dictionaries": result.dictionaries,
        }

    @app.get("/api/health")
    def health(request: Request):
        """Report which credentials are configured without revealing them"""
        credentials = request.app.state.settings.credentials
        return {
            "status": "ok",
            "hasApiKey": bool(credentials.api_key),
            "hasApiSecret": bool(credentials.api_secret),
            "apiKeyPrefix": credentials.api_key[:4] if credentials.api_key else "none",
            "apiUrl": credentials.base_url,
        }

    return app
