from __future__ import annotations

from typing import Any, Optional

from ..models import Offer, Query
from .base import (
    FlightProvider,
    ProviderError,
    absolute_url,
    format_minutes,
    parse_price,
)


def _duration(raw: Any) -> str:
    if isinstance(raw, bool):
        return "N/A"
    if isinstance(raw, (int, float)):
        return format_minutes(raw)
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return "N/A"


class GoogleFlightsProvider(FlightProvider):
    """Google Flights results from the RapidAPI ``google-flights2`` host."""

    name = "google_flights"
    source = "Google Flights"
    site_url = "https://www.google.com/travel/flights"
    host = "google-flights2.p.rapidapi.com"

    def __init__(
        self, api_key: str, currency: str = "USD", travel_class: str = "ECONOMY"
    ) -> None:
        self.api_key = api_key
        self.currency = currency
        self.travel_class = travel_class

    def fetch(self, query: Query) -> list:
        data = self.get_json(
            f"https://{self.host}/api/v1/searchFlights",
            headers={"x-rapidapi-host": self.host, "x-rapidapi-key": self.api_key},
            params={
                "departure_id": query.origin,
                "arrival_id": query.destination,
                "outbound_date": query.depart_date,
                "return_date": query.return_date or None,
                "adults": query.passengers,
                "travel_class": self.travel_class,
                "currency": self.currency,
                "search_type": "best",
            },
        )
        if not isinstance(data, dict):
            raise ProviderError("payload is not an object")
        inner = data.get("data") or {}
        return inner.get("flights") or []

    def to_offer(self, item: dict) -> Optional[Offer]:
        price = item.get("price")
        if isinstance(price, dict):
            price = price.get("value", price.get("total"))
        return Offer(
            source=self.source,
            price=parse_price(price),
            currency=self.currency,
            airline=item.get("airline") or item.get("airline_name") or "Multiple",
            stops=int(item.get("stops") or 0),
            duration=_duration(item.get("duration", item.get("total_duration"))),
            booking_url=absolute_url(
                item.get("booking_url") or item.get("url"), self.site_url
            ),
        )


__all__ = ["GoogleFlightsProvider"]
