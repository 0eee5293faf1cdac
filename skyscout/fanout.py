from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .models import Offer, Query
from .providers.base import FlightProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderResult:
    """Outcome of one adapter call; ``error`` is set on a soft failure."""

    name: str
    offers: List[Offer] = field(default_factory=list)
    error: Optional[str] = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def run_provider(provider: FlightProvider, query: Query) -> ProviderResult:
    """Call ``provider.search`` and turn any escaped exception into a result."""
    started = time.perf_counter()
    try:
        offers = provider.search(query)
    except Exception as exc:
        logger.exception("Provider %s raised unexpectedly", provider.name)
        return ProviderResult(
            provider.name, [], repr(exc), time.perf_counter() - started
        )
    elapsed = time.perf_counter() - started
    logger.info(
        "Provider %s returned %d offers in %.2fs", provider.name, len(offers), elapsed
    )
    return ProviderResult(provider.name, list(offers), None, elapsed)


def fan_out(
    providers: Sequence[FlightProvider],
    query: Query,
    *,
    max_workers: Optional[int] = None,
) -> List[ProviderResult]:
    """Search all *providers* concurrently; results follow provider order.

    Every task is awaited. Bounding the wall time is the job of each
    adapter's own request timeout.
    """
    if not providers:
        return []
    workers = max_workers or len(providers)
    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="provider"
    ) as executor:
        futures = [
            executor.submit(run_provider, provider, query) for provider in providers
        ]
        return [future.result() for future in futures]


def combine(results: Sequence[ProviderResult]) -> List[Offer]:
    """Concatenate offers in provider order."""
    combined: List[Offer] = []
    for result in results:
        combined.extend(result.offers)
    return combined


def provider_counts(results: Sequence[ProviderResult]) -> Dict[str, int]:
    return {result.name: len(result.offers) for result in results}


__all__ = [
    "ProviderResult",
    "combine",
    "fan_out",
    "provider_counts",
    "run_provider",
]
