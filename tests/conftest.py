# Ensure `src/` is on sys.path so tests can import `juice_monitor` without requiring editable install
import os
import sys

import pytest

HERE = os.path.dirname(__file__)
SRC = os.path.abspath(os.path.join(HERE, "..", "src"))
if os.path.isdir(SRC) and SRC not in sys.path:
    sys.path.insert(0, SRC)

from juice_monitor.config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        telegram_bot_token="123:secret-token",
        telegram_chat_id="-100200300",
        juiceswap_graphql_url="https://swap.example/graphql",
        juicedollar_graphql_url="https://dollar.example/graphql",
        citrea_explorer_url="https://citreascan.com",
        poll_interval_ms=1000,
        watermark_path=str(tmp_path / "wm.json"),
    )


class FakeResponse:
    """Just enough of requests.Response for the client and delivery code."""

    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    def raise_for_status(self):
        import requests
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Replays queued responses (or raises queued exceptions) for each post()."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, timeout=None, headers=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession
