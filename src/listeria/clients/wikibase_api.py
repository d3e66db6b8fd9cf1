from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, TypeVar

import httpx

from listeria.config.settings import settings
from listeria.services.errors import EntityLoadError, SparqlParseError, SparqlQueryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retries(fn: Callable[[], T], max_retries: int | None = None, backoff: float = 0.5) -> T:
    """
    Call `fn`, retrying transport errors and 5xx responses with exponential backoff.

    4xx responses are not retried.
    """
    max_retries = settings.http_max_retries if max_retries is None else max_retries
    attempts = 0
    while True:
        try:
            return fn()
        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500 or attempts >= max_retries:
                raise
        except httpx.TransportError:
            if attempts >= max_retries:
                raise
        attempts += 1
        logger.warning("HTTP request failed, retry %d/%d in %.1fs", attempts, max_retries, backoff)
        time.sleep(backoff)
        backoff *= 2


def _default_client() -> httpx.Client:
    return httpx.Client(
        timeout=settings.http_timeout_s,
        headers={"User-Agent": settings.user_agent},
    )


class WikibaseClient:
    """
    Entity store backed by the Wikibase action API (`wbgetentities`).

    Design:
    - one GET per batch of ids (the API caps a request at 50)
    - an injected `client` replaces real HTTP in tests
    """

    def __init__(
        self,
        api_url: str | None = None,
        client: httpx.Client | None = None,
        batch_size: int | None = None,
    ):
        self.api_url = api_url or settings.wikibase_api_url
        self.batch_size = batch_size or settings.entity_batch_size
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = _default_client()
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def _get_batch(self, ids: List[str]) -> Dict[str, Any]:
        params = {"action": "wbgetentities", "ids": "|".join(ids), "format": "json"}

        def _fetch() -> Dict[str, Any]:
            r = self.client.get(self.api_url, params=params)
            r.raise_for_status()
            return r.json()

        try:
            payload = with_retries(_fetch)
        except httpx.HTTPError as e:
            raise EntityLoadError(f"wbgetentities failed: {e}") from e
        except ValueError as e:
            raise EntityLoadError(f"wbgetentities returned invalid JSON: {e}") from e

        if "error" in payload:
            error = payload["error"]
            raise EntityLoadError(f"wbgetentities error: {error.get('code')}: {error.get('info')}")
        return payload.get("entities", {}) or {}

    def load_entities(self, ids: List[str]) -> Dict[str, dict]:
        out: Dict[str, dict] = {}
        for start in range(0, len(ids), self.batch_size):
            batch = ids[start : start + self.batch_size]
            for entity_id, data in self._get_batch(batch).items():
                if "missing" in data:
                    continue
                out[entity_id] = data
        logger.debug("wbgetentities: %d ids requested, %d entities returned", len(ids), len(out))
        return out


class SparqlClient:
    """Runs list queries against a SPARQL endpoint."""

    def __init__(self, endpoint_url: str | None = None, client: httpx.Client | None = None):
        self.endpoint_url = endpoint_url or settings.sparql_endpoint_url
        self._client = client

    def query(self, sparql: str) -> Dict[str, Any]:
        close_client = False
        client = self._client
        if client is None:
            client = _default_client()
            close_client = True

        def _fetch() -> Dict[str, Any]:
            r = client.get(self.endpoint_url, params={"query": sparql, "format": "json"})
            r.raise_for_status()
            return r.json()

        try:
            return with_retries(_fetch)
        except httpx.HTTPError as e:
            raise SparqlQueryError(f"SPARQL query failed: {e}") from e
        except ValueError as e:
            raise SparqlParseError(f"SPARQL endpoint returned invalid JSON: {e}") from e
        finally:
            if close_client:
                client.close()


@dataclass(frozen=True)
class StubEntityLoader:
    """Deterministic in-memory entity store for tests and offline runs."""

    entities: Dict[str, dict] = field(default_factory=dict)

    def load_entities(self, ids: List[str]) -> Dict[str, dict]:
        return {entity_id: self.entities[entity_id] for entity_id in ids if entity_id in self.entities}
