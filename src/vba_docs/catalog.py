from __future__ import annotations

import logging
import time
from typing import Any

import requests

from .cache import ResponseCache
from .config import SEARCH_API_VERSION, CatalogConfig
from .content import assemble_document
from .http_client import ACCEPT_HTML, FetchError, HttpClient
from .models import (
    CodeExample,
    Difficulty,
    LibraryRecord,
    OfficeApplication,
    SearchOutcome,
    VBACategory,
    coerce_number,
)
from .urls import build_url, library_slug, sanitize_query

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    pass


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class CatalogClient:
    """Client for the VBA library catalog and its documentation host.

    Every operation makes at most one upstream request and converts failures
    at its own boundary: searches carry an error message, documentation
    fetches return None and example fetches return an empty list.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        *,
        session: requests.Session | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self.cfg = config or CatalogConfig()
        self.http = HttpClient(
            session or requests.Session(),
            timeout_s=self.cfg.timeout_s,
            api_key=self.cfg.api_key,
        )
        self.cache = cache if cache is not None else ResponseCache(
            self.cfg.cache_ttl_s
        )

    def _cap_limit(self, limit: int | None) -> int | None:
        if not limit or limit <= 0:
            return None
        return min(limit, self.cfg.max_results)

    def _get_json(self, url: str) -> Any:
        cached = self.cache.read_cached(url)
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            return cached

        res = self.http.get(url)
        if not res.ok:
            raise CatalogError(f"VBA API error: {res.status_code} {res.reason}")
        payload = res.json()
        self.cache.write_cached(url, payload)
        return payload

    def search_libraries(
        self,
        query: str,
        *,
        office_app: OfficeApplication | str | None = None,
        category: VBACategory | str | None = None,
        api_version: str | None = None,
        limit: int | None = None,
    ) -> SearchOutcome:
        started = time.monotonic()
        url = build_url(
            self.cfg.api_base_url,
            "search",
            params={
                "q": sanitize_query(query),
                "api-version": SEARCH_API_VERSION,
                "app": office_app,
                "category": category,
                "version": api_version,
                "limit": self._cap_limit(limit),
            },
        )

        try:
            payload = self._get_json(url)
            if not isinstance(payload, dict):
                raise CatalogError("VBA API returned an unexpected payload")
            results = tuple(
                LibraryRecord.from_payload(item)
                for item in payload.get("results") or []
                if isinstance(item, dict)
            )
            total_count = int(coerce_number(payload.get("totalCount"), 0))
            total_count = total_count or len(results)
            suggestions = tuple(str(s) for s in payload.get("suggestions") or ())
        except (CatalogError, FetchError, ValueError, TypeError) as e:
            logger.error("VBA library search failed: %s", e)
            return SearchOutcome(
                results=(),
                total_count=0,
                search_time_ms=_elapsed_ms(started),
                error=f"Failed to search VBA libraries: {e}",
            )

        return SearchOutcome(
            results=results,
            total_count=total_count,
            search_time_ms=_elapsed_ms(started),
            suggestions=suggestions,
        )

    def fetch_documentation(
        self,
        library_id: str,
        *,
        topic: str | None = None,
        office_app: OfficeApplication | str | None = None,
        difficulty: Difficulty | str | None = None,
        tokens: int | None = None,
    ) -> str | None:
        url = build_url(
            self.cfg.docs_base_url,
            library_slug(library_id),
            params={
                "topic": topic,
                "app": office_app,
                "difficulty": difficulty,
                "tokens": tokens or None,
            },
        )

        markup = self.cache.read_cached(url)
        if markup is None:
            try:
                res = self.http.get(url, accept=ACCEPT_HTML, authorize=False)
            except FetchError as e:
                logger.error("VBA documentation fetch failed: %s", e)
                return None
            if not res.ok:
                logger.warning(
                    "VBA documentation not found for %s: %s",
                    library_id,
                    res.status_code,
                )
                return None
            markup = res.text()
            self.cache.write_cached(url, markup)

        return assemble_document(markup, tokens)

    def fetch_code_examples(
        self,
        library_id: str,
        *,
        difficulty: Difficulty | str | None = None,
        category: VBACategory | str | None = None,
        limit: int | None = None,
    ) -> list[CodeExample]:
        url = build_url(
            self.cfg.api_base_url,
            "examples",
            library_slug(library_id),
            params={
                "difficulty": difficulty,
                "category": category,
                "limit": self._cap_limit(limit),
            },
        )

        try:
            payload = self._get_json(url)
            items = payload.get("examples") if isinstance(payload, dict) else None
            return [
                CodeExample.from_payload(item)
                for item in items or []
                if isinstance(item, dict)
            ]
        except (CatalogError, FetchError, ValueError, TypeError) as e:
            logger.warning("VBA code examples unavailable for %s: %s", library_id, e)
            return []
