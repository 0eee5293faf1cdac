from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .cache import ResultCache
from .config import Settings, get_settings
from .dedupe import dedupe
from .fanout import ProviderResult, combine, fan_out, provider_counts
from .models import AggregateResult, Query
from .providers import build_providers
from .providers.base import FlightProvider
from .ranking import rank

logger = logging.getLogger(__name__)


class FlightAggregator:
    """Query -> fan-out -> dedupe -> rank -> cache.

    Concurrent identical queries that miss the cache are each computed
    independently; there is no in-flight coalescing.
    """

    def __init__(
        self,
        providers: Sequence[FlightProvider],
        cache: Optional[ResultCache] = None,
        *,
        max_workers: Optional[int] = None,
    ) -> None:
        self.providers = list(providers)
        self.cache = cache if cache is not None else ResultCache()
        self.max_workers = max_workers

    def aggregate(self, query: Query) -> AggregateResult:
        """Return ranked, deduplicated offers for *query*.

        Raises :class:`~skyscout.models.InvalidQueryError` for an unusable
        query. Provider failures only shrink the result.
        """
        query.validate()
        key = query.fingerprint()

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit: %s", key)
            return AggregateResult(offers=cached, served_from_cache=True)

        logger.info(
            "Cache miss, searching %d providers: %s", len(self.providers), key
        )
        results = self.search_providers(query)
        offers = rank(dedupe(combine(results)))
        self.cache.put(key, offers)

        counts = provider_counts(results)
        logger.info("Found %d unique flights (sources: %s)", len(offers), counts)
        return AggregateResult(
            offers=offers, served_from_cache=False, provider_counts=counts
        )

    def search_providers(self, query: Query) -> List[ProviderResult]:
        return fan_out(self.providers, query, max_workers=self.max_workers)

    def status(self) -> dict:
        return {
            "providers": [provider.name for provider in self.providers],
            "cache": self.cache.stats(),
        }


def build_aggregator(settings: Optional[Settings] = None) -> FlightAggregator:
    """Wire providers and cache from *settings* (environment by default)."""
    settings = settings or get_settings()
    return FlightAggregator(
        build_providers(settings),
        ResultCache(ttl_s=settings.cache_ttl_s),
        max_workers=settings.max_workers,
    )


__all__ = ["FlightAggregator", "build_aggregator"]
