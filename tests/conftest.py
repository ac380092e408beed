"""Pytest configuration and shared fixtures."""

import json
from typing import Any, Dict, List, Optional

import pytest

from cache_manager import DataCache
from errors import RequestError
from markets_client import MarketDataClient
from transport import RawResponse

BASE_URL = "https://markets.example.test/api/"


class FakeTransport:
    """Records every GET and answers from a queue of canned bodies or errors."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self._replies: List[Any] = []
        self.closed = False

    def reply(self, body: Any, status_code: int = 200, raw_text: Optional[str] = None,
              elapsed_ms: int = 0):
        """Queue a response. Bodies are JSON-encoded unless raw_text is given."""
        text = raw_text if raw_text is not None else json.dumps(body)
        self._replies.append((status_code, text, elapsed_ms))
        return self

    def fail(self, error: Exception):
        self._replies.append(error)
        return self

    def get(self, url, params):
        sent = tuple(params)
        self.calls.append({"url": url, "params": sent})
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        status_code, text, elapsed_ms = reply
        raw = RawResponse(url=url, params=sent, status_code=status_code, text=text,
                          elapsed_ms=elapsed_ms)
        if status_code >= 400:
            raise RequestError(f"HTTP {status_code}", url=url,
                               status_code=status_code, response=raw)
        return raw

    def close(self):
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def cache() -> DataCache:
    return DataCache()


@pytest.fixture
def client(transport, cache) -> MarketDataClient:
    return MarketDataClient(base_url=BASE_URL, transport=transport, cache=cache)


@pytest.fixture
def sample_depth() -> Dict[str, Any]:
    """Depth payload as the server sends it (wrapped in its envelope)."""
    return {
        "depth": {
            "buys": ["9500.00000000", "9450.00000000"],
            "sells": ["9600.00000000", "9700.00000000"],
        }
    }


@pytest.fixture
def sample_currencies() -> Dict[str, Any]:
    return {
        "BTC": {"code": "BTC", "name": "Bitcoin", "precision": 8, "_type": "crypto"},
        "EUR": {"code": "EUR", "name": "Euro", "precision": 8, "_type": "fiat"},
    }
