from __future__ import annotations

import datetime as dt
from typing import Optional

from ..models import Offer, Query
from .base import (
    FlightProvider,
    ProviderError,
    absolute_url,
    first,
    format_seconds,
    parse_price,
    stops_from_segments,
)


def kiwi_date(iso: Optional[str]) -> Optional[str]:
    """``2025-12-15`` -> ``15/12/2025`` (Tequila's date format)."""
    if not iso:
        return None
    return dt.date.fromisoformat(iso).strftime("%d/%m/%Y")


class KiwiProvider(FlightProvider):
    """Kiwi.com Tequila ``/v2/search``; durations arrive in seconds."""

    name = "kiwi"
    source = "Kiwi.com"
    site_url = "https://www.kiwi.com"
    max_offers = 5

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.tequila.kiwi.com",
        currency: str = "USD",
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.currency = currency

    def fetch(self, query: Query) -> list:
        depart = kiwi_date(query.depart_date)
        ret = kiwi_date(query.return_date)
        data = self.get_json(
            f"{self.base_url}/v2/search",
            headers={"apikey": self.api_key},
            params={
                "fly_from": query.origin,
                "fly_to": query.destination,
                "date_from": depart,
                "date_to": depart,
                "return_from": ret,
                "return_to": ret,
                "adults": query.passengers,
                "curr": self.currency,
                "limit": self.max_offers,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ProviderError("payload has no 'data' list")
        return data["data"]

    def to_offer(self, item: dict) -> Optional[Offer]:
        return Offer(
            source=self.source,
            price=parse_price(item.get("price")),
            currency=self.currency,
            airline=first(item["airlines"]) or "Multiple",
            stops=stops_from_segments(item["route"]),
            duration=format_seconds(item["duration"]["total"]),
            booking_url=absolute_url(item.get("deep_link"), self.site_url),
        )


__all__ = ["KiwiProvider", "kiwi_date"]
