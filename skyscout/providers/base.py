from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

import requests

from ..models import Offer, Query
from ..token_manager import TokenError

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """Upstream answered with something other than a usable JSON payload."""


# Errors an adapter absorbs into an empty result.
SOFT_ERRORS = (
    requests.RequestException,
    ProviderError,
    TokenError,
    KeyError,
    TypeError,
    ValueError,
    IndexError,
    AttributeError,
)


def parse_price(raw: Any) -> Decimal:
    """Coerce an upstream price to ``Decimal``; missing or unparsable is 0."""
    if raw is None or isinstance(raw, bool):
        return Decimal("0")
    if isinstance(raw, str):
        raw = raw.replace("$", "").replace(",", "").strip()
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        return Decimal("0")
    if not price.is_finite():
        return Decimal("0")
    return price


def format_minutes(total: Any) -> str:
    """``95`` -> ``"1h 35m"``."""
    minutes = int(total)
    return f"{minutes // 60}h {minutes % 60}m"


def format_seconds(total: Any) -> str:
    seconds = int(total)
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def absolute_url(url: Any, fallback: str) -> str:
    if isinstance(url, str):
        url = url.strip()
        if url.startswith("//"):
            return f"https:{url}"
        if url.startswith(("http://", "https://")):
            return url
    return fallback


def first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def stops_from_segments(segments: Any) -> int:
    """``len(segments) - 1``, never below zero."""
    return max(len(segments) - 1, 0)


class FlightProvider(ABC):
    """One upstream flight search source.

    Subclasses implement :meth:`fetch` (request + raw record list) and
    :meth:`to_offer` (record mapping). :meth:`search` never raises.
    """

    name: str = ""
    source: str = ""
    site_url: str = ""
    timeout: float = 15
    max_offers: int = 10

    def search(self, query: Query) -> List[Offer]:
        try:
            records = self.fetch(query)
        except SOFT_ERRORS as exc:
            logger.warning("%s search failed: %s", self.source, exc)
            return []
        if not isinstance(records, list):
            logger.warning(
                "%s returned %s instead of a list",
                self.source,
                type(records).__name__,
            )
            return []
        return list(self.map_records(records[: self.max_offers]))

    def map_records(self, records: Iterable[Any]) -> Iterable[Offer]:
        for item in records:
            try:
                offer = self.to_offer(item)
            except (KeyError, TypeError, ValueError, IndexError, AttributeError) as exc:
                logger.debug("%s: skipping malformed record: %r", self.source, exc)
                continue
            if offer is not None:
                yield offer

    @abstractmethod
    def fetch(self, query: Query) -> list:
        """Issue the upstream request and return its raw records."""

    @abstractmethod
    def to_offer(self, item: dict) -> Optional[Offer]:
        """Map one upstream record onto :class:`Offer`."""

    def get_json(
        self,
        url: str,
        *,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        resp = requests.get(url, params=clean, headers=headers, timeout=self.timeout)
        if not 200 <= resp.status_code < 300:
            raise ProviderError(f"HTTP {resp.status_code} – {resp.text[:120]}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError("response body is not JSON") from exc

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


__all__ = [
    "FlightProvider",
    "ProviderError",
    "SOFT_ERRORS",
    "absolute_url",
    "first",
    "format_minutes",
    "format_seconds",
    "parse_price",
    "stops_from_segments",
]
