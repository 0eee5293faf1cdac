"""Cross-provider duplicate removal.

Two offers are considered the same when ``(airline, price, stops)`` match.
This is approximate: distinct itineraries that share all three values collapse
into one. Providers expose no common flight identifier (flight numbers, times)
to build a finer key from.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Set, Tuple

from .models import Offer

OfferKey = Tuple[str, Decimal, int]


def offer_key(offer: Offer) -> OfferKey:
    return (offer.airline, offer.price, offer.stops)


def dedupe(offers: Iterable[Offer]) -> List[Offer]:
    """Keep the first offer per key, in input order."""
    seen: Set[OfferKey] = set()
    unique: List[Offer] = []
    for offer in offers:
        key = offer_key(offer)
        if key in seen:
            continue
        seen.add(key)
        unique.append(offer)
    return unique


__all__ = ["OfferKey", "dedupe", "offer_key"]
