"""Shared fixtures: a fake HTTP session and a controllable clock."""

import json
import threading
import time
from urllib.parse import urlparse

import pytest
import requests

from flight_search.client import AmadeusClient
from flight_search.constants import TOKEN_PATH
from flight_search.models import Credentials

BASE_URL = "https://api.example.test"


def make_response(status: int, body=None) -> requests.Response:
    """Build a real requests.Response with a JSON body."""
    response = requests.Response()
    response.status_code = status
    if body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    return response


def token_response(access_token: str, expires_in: int = 1800) -> requests.Response:
    return make_response(200, {"access_token": access_token, "expires_in": expires_in, "token_type": "Bearer"})


class FakeClock:
    """Wall clock the tests can move forward."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeSession:
    """Stands in for requests.Session, answering from per-route queues.

    Each route holds a list of responses consumed in order; the last one is
    repeated. An item may also be an exception to raise or a callable that
    takes the recorded call and returns a response.
    """

    def __init__(self):
        self.calls = []
        self.routes = {}
        self._lock = threading.Lock()

    def add(self, method: str, path: str, *responses):
        self.routes[(method, path)] = list(responses)

    def request(self, method, url, params=None, json=None, data=None, headers=None, timeout=None):
        path = urlparse(url).path
        call = {
            "method": method,
            "path": path,
            "params": params,
            "json": json,
            "data": data,
            "headers": dict(headers or {}),
            "timeout": timeout,
        }
        with self._lock:
            self.calls.append(call)
            queue = self.routes[(method, path)]
            item = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(call)
        return item

    def close(self):
        pass

    def calls_to(self, path: str) -> list[dict]:
        return [c for c in self.calls if c["path"] == path]

    @property
    def token_calls(self) -> list[dict]:
        return self.calls_to(TOKEN_PATH)


@pytest.fixture
def credentials():
    return Credentials(api_key="test-key", api_secret="test-secret", base_url=BASE_URL)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(credentials, session, clock):
    return AmadeusClient(credentials, session=session, clock=clock)


def slow(response: requests.Response, seconds: float):
    """Callable route item that delays before answering."""
    def respond(call):
        time.sleep(seconds)
        return response
    return respond
