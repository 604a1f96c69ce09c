"""OAuth2 client-credentials token management."""

import logging
import threading
import time
from typing import Any, Callable, Optional

from .constants import TOKEN_EXPIRY_BUFFER_SECONDS
from .errors import (
    MISSING_CREDENTIALS_MESSAGE,
    TOKEN_EXCHANGE_FAILED_MESSAGE,
    AuthenticationError,
    ClassifiedError,
    ConfigurationError,
    DeadlineExceededError,
)
from .models import Credentials, Token

logger = logging.getLogger(__name__)

TOKEN_WAIT_TIMEOUT_MESSAGE = "Timed out waiting for an upstream access token"

# Posts the form to the token endpoint and returns the decoded JSON body.
TokenExchange = Callable[[dict, Optional[float]], Any]


class TokenManager:
    """Owns the cached access token and refreshes it when it expires.

    Concurrent callers that find the cache empty or expired share a single
    token exchange: the fetch path is serialized by a lock and the cache is
    re-checked once the lock is held.
    """

    def __init__(
        self,
        credentials: Credentials,
        exchange: TokenExchange,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize token manager with credentials and a token exchange callable."""
        self.credentials = credentials
        self._exchange = exchange
        self._clock = clock
        self._token: Optional[Token] = None
        self._lock = threading.Lock()

    @property
    def cached_token(self) -> Optional[Token]:
        """Currently cached token, valid or not."""
        return self._token

    def get_valid_token(self, timeout: Optional[float] = None) -> Token:
        """Get a valid token, fetching a new one if necessary.

        ``timeout`` bounds both the wait for an in-flight fetch and the fetch
        itself. Raises ConfigurationError when credentials are missing and
        AuthenticationError when the exchange fails.
        """
        if not self.credentials.is_complete:
            logger.error("Upstream API key or secret is missing")
            raise ConfigurationError(MISSING_CREDENTIALS_MESSAGE)

        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token

        started = time.monotonic()
        if not self._lock.acquire(timeout=-1 if timeout is None else max(timeout, 0)):
            raise DeadlineExceededError(TOKEN_WAIT_TIMEOUT_MESSAGE)
        try:
            # Another caller may have refreshed while we waited
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token

            remaining = None
            if timeout is not None:
                remaining = timeout - (time.monotonic() - started)
                if remaining <= 0:
                    raise DeadlineExceededError(TOKEN_WAIT_TIMEOUT_MESSAGE)

            self._token = self._fetch_token(remaining)
            return self._token
        finally:
            self._lock.release()

    def invalidate(self, stale: Optional[Token] = None, timeout: Optional[float] = None) -> None:
        """Drop the cached token so the next get_valid_token() re-fetches.

        When ``stale`` is given, the cache is only cleared if it still holds
        that token; a token refreshed by another caller is kept. ``timeout``
        bounds the wait for an in-flight fetch.
        """
        if not self._lock.acquire(timeout=-1 if timeout is None else max(timeout, 0)):
            raise DeadlineExceededError(TOKEN_WAIT_TIMEOUT_MESSAGE)
        try:
            if self._token is None:
                return
            if stale is not None and self._token.access_token != stale.access_token:
                logger.debug("Cached token already refreshed, not invalidating")
                return
            logger.info("Invalidating cached upstream access token")
            self._token = None
        finally:
            self._lock.release()

    def _fetch_token(self, timeout: Optional[float]) -> Token:
        """Perform the client-credentials exchange."""
        data = {
            "grant_type": "client_credentials",
            "client_id": self.credentials.api_key,
            "client_secret": self.credentials.api_secret,
        }

        logger.info("Requesting new upstream access token...")
        try:
            payload = self._exchange(data, timeout)
        except DeadlineExceededError:
            raise
        except ClassifiedError as e:
            logger.error(f"Token exchange failed: {e.status or 'no response'}")
            raise AuthenticationError(TOKEN_EXCHANGE_FAILED_MESSAGE, e.status) from e

        try:
            access_token = str(payload["access_token"])
            expires_in = int(payload["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Token response is missing access_token or expires_in: {e}")
            raise AuthenticationError(TOKEN_EXCHANGE_FAILED_MESSAGE) from e

        # Renew slightly before the upstream expiry
        expires_at = self._clock() + expires_in - TOKEN_EXPIRY_BUFFER_SECONDS
        logger.info(f"Upstream access token obtained (expires in {expires_in}s)")
        return Token(access_token=access_token, expires_at=expires_at)
