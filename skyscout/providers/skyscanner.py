from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import requests

from ..models import Offer, Query
from .base import (
    FlightProvider,
    ProviderError,
    absolute_url,
    first,
    format_minutes,
    parse_price,
)

logger = logging.getLogger(__name__)


def _carrier_name(carrier: Any) -> Optional[str]:
    if isinstance(carrier, dict):
        carrier = carrier.get("name") or carrier.get("alternateId")
    if isinstance(carrier, str):
        return carrier
    return None


class SkyscannerProvider(FlightProvider):
    """Skyscanner data through the RapidAPI ``blue-scraper`` host.

    Searching takes two steps: each airport code is first resolved to a
    Skyscanner ``skyId`` via ``search-location``; if either lookup fails the
    price query is not sent. Both lookups run in parallel, so a search takes
    at most two request timeouts. Durations arrive in minutes.
    """

    name = "skyscanner"
    source = "Skyscanner"
    site_url = "https://www.skyscanner.com"
    host = "blue-scraper.p.rapidapi.com"

    def __init__(self, api_key: str, currency: str = "USD") -> None:
        self.api_key = api_key
        self.currency = currency

    @property
    def headers(self) -> dict:
        return {"x-rapidapi-host": self.host, "x-rapidapi-key": self.api_key}

    def resolve_sky_id(self, location: str) -> Optional[str]:
        """Return the first ``skyId`` matching *location* or ``None``."""
        try:
            data = self.get_json(
                f"https://{self.host}/1.0/flights/search-location",
                headers=self.headers,
                params={"query": location},
            )
        except (ProviderError, requests.RequestException) as exc:
            logger.warning("Failed to get skyId for %s: %s", location, exc)
            return None
        if isinstance(data, dict):
            data = data.get("data")
        match = first(data)
        if not isinstance(match, dict):
            return None
        return match.get("skyId") or None

    def fetch(self, query: Query) -> list:
        with ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="skyid"
        ) as executor:
            origin_id, destination_id = executor.map(
                self.resolve_sky_id, (query.origin, query.destination)
            )
        if not origin_id or not destination_id:
            raise ProviderError(
                f"could not resolve skyIds for {query.origin}/{query.destination}"
            )

        endpoint = "search-roundtrip" if query.is_round_trip else "search-oneway"
        data = self.get_json(
            f"https://{self.host}/1.0/flights/{endpoint}",
            headers=self.headers,
            params={
                "originSkyId": origin_id,
                "destinationSkyId": destination_id,
                "departureDate": query.depart_date,
                "returnDate": query.return_date or None,
                "adults": query.passengers,
                "currency": self.currency,
            },
        )
        if not isinstance(data, dict):
            raise ProviderError("payload is not an object")
        inner = data.get("data")
        if isinstance(inner, dict) and "flights" in inner:
            return inner["flights"] or []
        return data.get("flights") or []

    def to_offer(self, item: dict) -> Optional[Offer]:
        # Newer responses nest carrier/stops/duration under the first leg.
        leg = first(item.get("legs")) or item
        price = item.get("price")
        if isinstance(price, dict):
            price = price.get("amount", price.get("raw"))

        carriers = leg.get("carriers") or item.get("carriers")
        if isinstance(carriers, dict):
            carriers = carriers.get("marketing")
        airline = _carrier_name(first(carriers)) or "Multiple"

        duration = leg.get("duration", leg.get("durationInMinutes"))
        return Offer(
            source=self.source,
            price=parse_price(price),
            currency=self.currency,
            airline=airline,
            stops=int(leg.get("stops") or leg.get("stopCount") or 0),
            duration=format_minutes(duration) if duration is not None else "N/A",
            booking_url=absolute_url(item.get("deeplink"), self.site_url),
        )


__all__ = ["SkyscannerProvider"]
