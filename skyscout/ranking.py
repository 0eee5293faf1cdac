from __future__ import annotations

from typing import Iterable, List

from .models import Offer


def rank(offers: Iterable[Offer]) -> List[Offer]:
    """Sort by price ascending; equal prices keep their input order."""
    return sorted(offers, key=lambda off: off.price)


__all__ = ["rank"]
