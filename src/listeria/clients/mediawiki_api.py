from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

import httpx

from listeria.clients.wikibase_api import with_retries
from listeria.config.settings import settings
from listeria.services.errors import WikiLookupError

logger = logging.getLogger(__name__)


def wiki_api_url(server: str) -> str:
    """`en.wikipedia.org` -> `https://en.wikipedia.org/w/api.php`"""
    server = server.rstrip("/")
    if not server.startswith("http"):
        server = f"https://{server}"
    return f"{server}/w/api.php"


class MediaWikiClient:
    """Page and file lookups against the wiki a list lives on."""

    def __init__(self, api_url: str, client: httpx.Client | None = None):
        self.api_url = api_url
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=settings.http_timeout_s,
                headers={"User-Agent": settings.user_agent},
            )
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def _query(self, params: Dict[str, str]) -> Dict[str, Any]:
        params = {"action": "query", "format": "json", "formatversion": "2", **params}

        def _fetch() -> Dict[str, Any]:
            r = self.client.get(self.api_url, params=params)
            r.raise_for_status()
            return r.json()

        try:
            payload = with_retries(_fetch)
        except (httpx.HTTPError, ValueError) as e:
            raise WikiLookupError(f"API query failed: {e}") from e
        if "error" in payload:
            raise WikiLookupError(f"API error: {payload['error'].get('info')}")
        return payload

    def _pages(self, payload: Dict[str, Any]) -> list:
        return (payload.get("query") or {}).get("pages") or []

    def page_exists(self, title: str) -> bool:
        pages = self._pages(self._query({"titles": title}))
        if not pages:
            return False
        page = pages[0]
        return not page.get("missing", False) and not page.get("invalid", False)

    def image_repository(self, file_title: str) -> Optional[str]:
        pages = self._pages(self._query({"titles": file_title, "prop": "imageinfo"}))
        if not pages:
            return None
        return pages[0].get("imagerepository") or None

    def site_info(self) -> Dict[str, str]:
        """Wiki id (`enwiki`) and content language of the wiki."""
        payload = self._query({"meta": "siteinfo", "siprop": "general"})
        general = (payload.get("query") or {}).get("general") or {}
        return {"wiki": general.get("wikiid", ""), "language": general.get("lang", "")}


@dataclass(frozen=True)
class StubWikiPageService:
    """Deterministic in-memory wiki for tests."""

    existing_pages: FrozenSet[str] = frozenset()
    repositories: Dict[str, str] = field(default_factory=dict)

    def page_exists(self, title: str) -> bool:
        return title in self.existing_pages

    def image_repository(self, file_title: str) -> Optional[str]:
        return self.repositories.get(file_title)
