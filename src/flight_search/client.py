"""Authenticated client for the Amadeus travel API."""

import logging
import time
from typing import Any, Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings
from .constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
    TOKEN_PATH,
)
from .errors import (
    DEADLINE_EXCEEDED_MESSAGE,
    GENERIC_UPSTREAM_MESSAGE,
    DeadlineExceededError,
    GenericUpstreamError,
    classify,
)
from .models import Credentials, OutboundRequest, Token, UpstreamError
from .oauth import TokenManager

logger = logging.getLogger(__name__)

# Statuses retried with backoff when upstream.backoff_retries > 0
BACKOFF_STATUSES = [HTTP_TOO_MANY_REQUESTS, 500, 502, 503, 504]


class AmadeusClient:
    """Request pipeline for the upstream API.

    Every call gets a bearer token from the TokenManager. A 401 invalidates
    the token and replays the same request once with a fresh one. Anything
    still failing is classified and raised as a ClassifiedError.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: Optional[requests.Session] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        backoff_retries: int = 0,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize client; the token manager exchanges through this pipeline."""
        self.base_url = credentials.base_url
        self.request_timeout = request_timeout
        self.session = session or self._build_session(backoff_retries)
        self.token_manager = TokenManager(credentials, self._exchange_token, clock=clock)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AmadeusClient":
        """Build the process-wide client from loaded settings."""
        return cls(
            settings.credentials,
            request_timeout=settings.request_timeout,
            backoff_retries=settings.backoff_retries,
        )

    @staticmethod
    def _build_session(backoff_retries: int) -> requests.Session:
        session = requests.Session()
        session.headers.update({"Accept": "application/json"})

        # 429/5xx are not retried unless explicitly configured
        if backoff_retries > 0:
            retry_strategy = Retry(
                total=backoff_retries,
                backoff_factor=1,
                status_forcelist=BACKOFF_STATUSES,
                allowed_methods=["GET", "POST"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        return session

    def close(self) -> None:
        self.session.close()

    def get(self, path: str, params: Optional[dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        """GET ``path`` with query ``params`` and return the decoded JSON body."""
        return self.send(OutboundRequest(method="GET", path=path, params=params), timeout=timeout)

    def post(self, path: str, body: Any = None, timeout: Optional[float] = None) -> Any:
        """POST a JSON ``body`` to ``path`` and return the decoded JSON body."""
        return self.send(OutboundRequest(method="POST", path=path, json_body=body), timeout=timeout)

    def send(self, request: OutboundRequest, timeout: Optional[float] = None) -> Any:
        """Run one logical call through the pipeline.

        ``timeout`` is a deadline for the whole call in seconds, covering
        token fetches and both attempts. If it runs out before the retry, the
        retry is abandoned.
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        # The token endpoint itself is never authenticated or retried
        if request.path == TOKEN_PATH:
            return self._decode(request, self._attempt(request, None, deadline))

        token = self.token_manager.get_valid_token(timeout=self._remaining(deadline))
        response = self._attempt(request, token, deadline)

        if response.status_code == HTTP_UNAUTHORIZED:
            logger.warning(f"{request.method} {request.path} returned 401, refreshing token and retrying once")
            self.token_manager.invalidate(token, timeout=self._remaining(deadline))
            token = self.token_manager.get_valid_token(timeout=self._remaining(deadline))
            response = self._attempt(request, token, deadline)

        return self._decode(request, response)

    def _exchange_token(self, form: dict, timeout: Optional[float]) -> Any:
        """Post the client-credentials form to the token endpoint."""
        deadline = None if timeout is None else time.monotonic() + timeout
        request = OutboundRequest(method="POST", path=TOKEN_PATH)
        return self._decode(request, self._attempt(request, None, deadline, form=form))

    def _attempt(
        self,
        request: OutboundRequest,
        token: Optional[Token],
        deadline: Optional[float],
        form: Optional[dict] = None,
    ) -> requests.Response:
        """Issue one HTTP request. Network failures are classified here."""
        headers = {}
        if token is not None:
            headers["Authorization"] = f"Bearer {token.access_token}"

        try:
            return self.session.request(
                request.method,
                f"{self.base_url}{request.path}",
                params=request.params,
                json=request.json_body,
                data=form,
                headers=headers,
                timeout=self._http_timeout(deadline),
            )
        except requests.RequestException as e:
            logger.error(f"{request.method} {request.path} failed without a response: {e}")
            raise classify(UpstreamError()) from e

    def _decode(self, request: OutboundRequest, response: requests.Response) -> Any:
        """Return the JSON body of a 2xx response, or raise its classified error."""
        if 200 <= response.status_code < 300:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"{request.method} {request.path} returned invalid JSON")
                raise GenericUpstreamError(GENERIC_UPSTREAM_MESSAGE, response.status_code) from e

        error = classify(UpstreamError(http_status=response.status_code, raw_body=self._error_body(response)))
        logger.error(f"{request.method} {request.path} failed (HTTP {response.status_code}): {error.message}")
        raise error

    @staticmethod
    def _error_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _remaining(self, deadline: Optional[float]) -> Optional[float]:
        """Seconds left before ``deadline``; raises once it has passed."""
        if deadline is None:
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("Upstream call abandoned: deadline exceeded")
            raise DeadlineExceededError(DEADLINE_EXCEEDED_MESSAGE)
        return remaining

    def _http_timeout(self, deadline: Optional[float]) -> float:
        remaining = self._remaining(deadline)
        if remaining is None:
            return self.request_timeout
        return min(remaining, self.request_timeout)
