from __future__ import annotations

from typing import Optional

from ..models import Offer, Query
from ..token_manager import TokenManager
from .base import (
    FlightProvider,
    ProviderError,
    first,
    parse_price,
    stops_from_segments,
)


class AmadeusProvider(FlightProvider):
    """Amadeus Self-Service ``/v2/shopping/flight-offers``.

    Authenticates with a bearer token from :class:`TokenManager`. Durations are
    passed through as the ISO-8601 strings Amadeus reports (``PT5H30M``).
    """

    name = "amadeus"
    source = "Amadeus"
    site_url = "https://www.amadeus.com"
    timeout = 10
    max_offers = 15

    def __init__(
        self,
        token_manager: TokenManager,
        base_url: str = "https://test.api.amadeus.com",
        currency: str = "USD",
    ) -> None:
        self.token_manager = token_manager
        self.base_url = base_url.rstrip("/")
        self.currency = currency

    def fetch(self, query: Query) -> list:
        token = self.token_manager.get_token()
        data = self.get_json(
            f"{self.base_url}/v2/shopping/flight-offers",
            headers={"Authorization": f"Bearer {token.access_token}"},
            params={
                "originLocationCode": query.origin,
                "destinationLocationCode": query.destination,
                "departureDate": query.depart_date,
                "returnDate": query.return_date or None,
                "adults": query.passengers,
                "max": self.max_offers,
                "currencyCode": self.currency,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ProviderError("payload has no 'data' list")
        return data["data"]

    def to_offer(self, item: dict) -> Optional[Offer]:
        price = item["price"]
        carriers = item["validatingAirlineCodes"]
        itinerary = item["itineraries"][0]
        return Offer(
            source=self.source,
            price=parse_price(price.get("total")),
            currency=price.get("currency") or self.currency,
            airline=first(carriers) or "Multiple",
            stops=stops_from_segments(itinerary["segments"]),
            duration=itinerary.get("duration") or "N/A",
            booking_url=self.site_url,
        )


__all__ = ["AmadeusProvider"]
