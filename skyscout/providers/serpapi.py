from __future__ import annotations

from typing import Optional

from ..models import Offer, Query
from .base import (
    FlightProvider,
    ProviderError,
    first,
    format_minutes,
    parse_price,
    stops_from_segments,
)


class SerpApiProvider(FlightProvider):
    """SerpAPI flight engines (``google_flights``, ``booking_flights``).

    Reads ``best_flights``; each entry lists its segments under ``flights``
    and reports ``total_duration`` in minutes. SerpAPI exposes no deep link,
    so every offer points at the engine's public site.
    """

    base_url = "https://serpapi.com/search"
    timeout = 10

    def __init__(
        self,
        api_key: str,
        *,
        engine: str,
        name: str,
        source: str,
        site_url: str,
        currency: str = "USD",
    ) -> None:
        self.api_key = api_key
        self.engine = engine
        self.name = name
        self.source = source
        self.site_url = site_url
        self.currency = currency

    @classmethod
    def google(cls, api_key: str) -> "SerpApiProvider":
        return cls(
            api_key,
            engine="google_flights",
            name="serpapi_google",
            source="Google Flights (Serp)",
            site_url="https://www.google.com/travel/flights",
        )

    @classmethod
    def booking(cls, api_key: str) -> "SerpApiProvider":
        return cls(
            api_key,
            engine="booking_flights",
            name="serpapi_booking",
            source="Booking.com",
            site_url="https://www.booking.com/flights",
        )

    def fetch(self, query: Query) -> list:
        data = self.get_json(
            self.base_url,
            params={
                "engine": self.engine,
                "departure_id": query.origin,
                "arrival_id": query.destination,
                "outbound_date": query.depart_date,
                "return_date": query.return_date or None,
                # google_flights defaults to round trip; 2 = one way
                "type": None if query.is_round_trip else 2,
                "adults": query.passengers,
                "currency": self.currency,
                "api_key": self.api_key,
            },
        )
        if not isinstance(data, dict):
            raise ProviderError("payload is not an object")
        if data.get("error"):
            raise ProviderError(f"API error: {data['error']}")
        return data.get("best_flights") or []

    def to_offer(self, item: dict) -> Optional[Offer]:
        segments = item.get("flights") or []
        carrier = first(segments) or {}
        duration = item.get("total_duration")
        return Offer(
            source=self.source,
            price=parse_price(item.get("price")),
            currency=self.currency,
            airline=carrier.get("airline") or "Multiple",
            stops=stops_from_segments(segments),
            duration=format_minutes(duration) if duration is not None else "N/A",
            booking_url=self.site_url,
        )


__all__ = ["SerpApiProvider"]
