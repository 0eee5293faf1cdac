"""Data models used throughout the project."""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional


class InvalidQueryError(ValueError):
    """The search query is missing required fields or is malformed."""


@dataclass(frozen=True, slots=True)
class Query:
    origin: str
    destination: str
    depart_date: str
    return_date: Optional[str] = None
    passengers: int = 1

    @property
    def is_round_trip(self) -> bool:
        return bool(self.return_date)

    def validate(self) -> "Query":
        """Raise :class:`InvalidQueryError` unless the query can be searched."""
        missing = [
            name
            for name in ("origin", "destination", "depart_date")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise InvalidQueryError(f"Missing required fields: {', '.join(missing)}")

        try:
            depart = dt.date.fromisoformat(self.depart_date)
        except ValueError:
            raise InvalidQueryError(
                f"depart_date must be YYYY-MM-DD, got {self.depart_date!r}"
            ) from None

        if self.return_date:
            try:
                ret = dt.date.fromisoformat(self.return_date)
            except ValueError:
                raise InvalidQueryError(
                    f"return_date must be YYYY-MM-DD, got {self.return_date!r}"
                ) from None
            if ret < depart:
                raise InvalidQueryError("return_date is before depart_date")

        if isinstance(self.passengers, bool) or not isinstance(self.passengers, int):
            raise InvalidQueryError("passengers must be an integer")
        if self.passengers < 1:
            raise InvalidQueryError("passengers must be at least 1")
        return self

    def fingerprint(self) -> str:
        """Cache key built from all five fields.

        JSON-encoded, so separators inside a field cannot collide and a
        ``None`` return date (``null``) differs from ``""``.
        """
        return json.dumps(
            [
                self.origin,
                self.destination,
                self.depart_date,
                self.return_date,
                self.passengers,
            ]
        )


@dataclass(frozen=True, slots=True)
class Offer:
    source: str
    price: Decimal
    airline: str
    stops: int
    duration: str
    booking_url: str
    currency: str = "USD"

    def __post_init__(self) -> None:
        for name in ("source", "airline", "duration", "booking_url", "currency"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"offer {name} must be a string")
        if not self.source:
            raise ValueError("offer source must be non-empty")
        if not isinstance(self.price, Decimal):
            raise ValueError("offer price must be a Decimal")
        if isinstance(self.stops, bool) or not isinstance(self.stops, int):
            raise ValueError("offer stops must be an integer")
        if self.price < 0:
            raise ValueError(f"negative price: {self.price}")
        if self.stops < 0:
            raise ValueError(f"negative stop count: {self.stops}")

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "price": float(self.price),
            "currency": self.currency,
            "airline": self.airline,
            "stops": self.stops,
            "duration": self.duration,
            "bookingUrl": self.booking_url,
        }


@dataclass(slots=True)
class Token:
    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(slots=True)
class AggregateResult:
    offers: List[Offer]
    served_from_cache: bool
    provider_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "results": [off.to_dict() for off in self.offers],
            "cached": self.served_from_cache,
            "sources": dict(self.provider_counts),
        }


__all__ = [
    "AggregateResult",
    "InvalidQueryError",
    "Offer",
    "Query",
    "Token",
]
