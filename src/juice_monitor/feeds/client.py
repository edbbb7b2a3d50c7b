# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/client.py
"""
Minimal GraphQL transport for the Ponder indexers behind each feed.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 30


class FeedQueryError(RuntimeError):
    """One feed query failed (transport, timeout, HTTP status, or GraphQL errors)."""


class GraphQLClient(Protocol):
    """Anything that can run a GraphQL document against one feed."""

    def query(self, document: str, variables: Mapping[str, Any]) -> Dict[str, Any]: ...


class RequestsGraphQLClient:
    """
    GraphQL over HTTP POST using ``requests``.

    Every call carries a bounded timeout; a timeout surfaces as FeedQueryError
    like any other transport failure.
    """

    def __init__(
        self,
        url: str,
        timeout: float = REQUEST_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def query(self, document: str, variables: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.url,
                json={"query": document, "variables": dict(variables)},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise FeedQueryError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise FeedQueryError(f"Invalid JSON from {self.url}: {e}") from e

        if not isinstance(body, dict):
            raise FeedQueryError(f"Unexpected response shape from {self.url}")
        errors = body.get("errors")
        if errors:
            messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err)
                                 for err in errors)
            raise FeedQueryError(f"GraphQL errors: {messages}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise FeedQueryError(f"Response from {self.url} has no data")
        return data

    def __repr__(self) -> str:
        return f"RequestsGraphQLClient({self.url!r})"
