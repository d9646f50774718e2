"""Model catalog: static candidate list or free models discovered upstream.

The discovered catalog is held in a ``CatalogCache`` constructed once at
process start and injected into the provider. It is refreshed at most once per
validity window; when a refresh fails the last good catalog is served stale,
and only when nothing was ever cached does the hardcoded fallback list apply.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import httpx

from ..config import (
    CATALOG_MAX_MODELS,
    CATALOG_RETRY_SECONDS,
    CATALOG_TIMEOUT_SECONDS,
    CATALOG_TTL_SECONDS,
    FALLBACK_MODELS,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
)
from ..errors import CatalogFetchError
from ..logger import logger

SOURCE_UPSTREAM = "upstream"
SOURCE_CACHE = "cache"
SOURCE_STALE = "stale"
SOURCE_FALLBACK = "fallback"
SOURCE_STATIC = "static"


@dataclass(frozen=True)
class Catalog:
    models: Tuple[str, ...]
    fetched_at: float
    source: str = SOURCE_UPSTREAM

    @property
    def cached(self) -> bool:
        """True when served from memory without touching the network."""
        return self.source in (SOURCE_CACHE, SOURCE_STATIC)

    def with_source(self, source: str) -> "Catalog":
        return Catalog(self.models, self.fetched_at, source)


class CatalogCache:
    """Process-wide holder of the last good catalog.

    The stored value is an immutable ``Catalog`` replaced by one assignment,
    so readers never see a partially built list. A failed refresh opens a
    retry window during which no new fetch is attempted.
    """

    def __init__(
        self,
        ttl_seconds: float = CATALOG_TTL_SECONDS,
        retry_seconds: float = CATALOG_RETRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.retry_seconds = retry_seconds
        self.clock = clock
        self._catalog: Optional[Catalog] = None
        self._retry_after: Optional[float] = None

    @property
    def catalog(self) -> Optional[Catalog]:
        return self._catalog

    def is_fresh(self) -> bool:
        catalog = self._catalog
        return catalog is not None and self.clock() - catalog.fetched_at < self.ttl_seconds

    def in_backoff(self) -> bool:
        return self._retry_after is not None and self.clock() < self._retry_after

    def mark_failed(self) -> None:
        self._retry_after = self.clock() + self.retry_seconds

    def store(self, models: Sequence[str]) -> Catalog:
        catalog = Catalog(tuple(models), self.clock(), SOURCE_UPSTREAM)
        self._catalog = catalog
        self._retry_after = None
        return catalog


def _is_zero(value: Any) -> bool:
    try:
        return float(value) == 0
    except (TypeError, ValueError):
        return False


def select_free_models(entries: Iterable[Any], limit: int = CATALOG_MAX_MODELS) -> List[str]:
    """Ids of entries priced at exactly zero for both prompt and completion."""
    free: List[str] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        model_id = entry.get("id")
        pricing = entry.get("pricing") or {}
        if not model_id or not isinstance(pricing, dict):
            continue
        if _is_zero(pricing.get("prompt")) and _is_zero(pricing.get("completion")) and model_id not in free:
            free.append(model_id)
        if len(free) >= limit:
            break
    return free


class StaticCatalogProvider:
    def __init__(self, models: Sequence[str]):
        if not models:
            raise ValueError("Static catalog needs at least one model")
        self._catalog = Catalog(tuple(models), time.monotonic(), SOURCE_STATIC)

    async def get_candidates(self) -> Catalog:
        return self._catalog

    async def refresh(self) -> Catalog:
        return self._catalog


class ModelCatalogProvider:
    def __init__(
        self,
        cache: CatalogCache,
        base_url: str = OPENROUTER_BASE_URL,
        api_key: str = OPENROUTER_API_KEY,
        max_models: int = CATALOG_MAX_MODELS,
        fallback_models: Sequence[str] = FALLBACK_MODELS,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not fallback_models:
            raise ValueError("Fallback model list must not be empty")
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.max_models = max_models
        self.fallback_models = tuple(fallback_models)
        self.timeout = timeout
        self._transport = transport
        self._refresh_lock = asyncio.Lock()

    async def fetch_free_models(self) -> List[str]:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(f"{self.base_url}/models", headers=headers)
                r.raise_for_status()
                payload = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CatalogFetchError(f"Catalog fetch failed: {str(exc) or type(exc).__name__}") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise CatalogFetchError("Catalog response has no 'data' list")
        return select_free_models(data, self.max_models)

    async def get_candidates(self) -> Catalog:
        if self.cache.is_fresh():
            return self.cache.catalog.with_source(SOURCE_CACHE)
        if self.cache.in_backoff():
            return self._fallback()
        async with self._refresh_lock:
            # Another request may have refreshed, or failed to, while we waited.
            if self.cache.is_fresh():
                return self.cache.catalog.with_source(SOURCE_CACHE)
            if self.cache.in_backoff():
                return self._fallback()
            return await self._refresh_locked()

    async def refresh(self) -> Catalog:
        async with self._refresh_lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> Catalog:
        try:
            models = await self.fetch_free_models()
        except CatalogFetchError as exc:
            logger.warning("{}", exc.message)
            self.cache.mark_failed()
            return self._fallback()

        if not models:
            logger.warning("Catalog returned no free models")
            self.cache.mark_failed()
            return self._fallback()

        catalog = self.cache.store(models)
        logger.info("Catalog refreshed: {} free models", len(catalog.models))
        return catalog

    def _fallback(self) -> Catalog:
        stale = self.cache.catalog
        if stale is not None and stale.models:
            logger.warning("Serving stale catalog of {} models", len(stale.models))
            return stale.with_source(SOURCE_STALE)
        logger.warning("Using built-in fallback model list")
        return Catalog(self.fallback_models, self.cache.clock(), SOURCE_FALLBACK)
