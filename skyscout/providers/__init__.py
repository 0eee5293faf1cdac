from __future__ import annotations

import logging
from typing import List

from ..config import Settings
from ..token_manager import TokenManager
from .amadeus import AmadeusProvider
from .base import FlightProvider, ProviderError
from .google_flights import GoogleFlightsProvider
from .kiwi import KiwiProvider
from .serpapi import SerpApiProvider
from .skyscanner import SkyscannerProvider

logger = logging.getLogger(__name__)

ALIASES = {
    "amadeus": "amadeus",
    "kiwi": "kiwi",
    "kiwi.com": "kiwi",
    "tequila": "kiwi",
    "skyscanner": "skyscanner",
    "blue-scraper": "skyscanner",
    "google_flights": "google_flights",
    "google-flights": "google_flights",
    "googlev2": "google_flights",
    "serpapi_google": "serpapi_google",
    "serp": "serpapi_google",
    "serpapi_booking": "serpapi_booking",
    "booking": "serpapi_booking",
}


def canonical_name(raw: str) -> str:
    """Map a configured provider name onto its canonical form."""
    name = str(raw).strip().lower()
    if name not in ALIASES:
        raise ValueError(f"Unknown flights provider: {raw}")
    return ALIASES[name]


def missing_credentials(name: str, settings: Settings) -> List[str]:
    """Env variables *name* needs that are empty in *settings*."""
    required = {
        "amadeus": {
            "AMADEUS_CLIENT_ID": settings.amadeus_client_id,
            "AMADEUS_CLIENT_SECRET": settings.amadeus_client_secret,
        },
        "kiwi": {"KIWI_API_KEY": settings.kiwi_api_key},
        "skyscanner": {"RAPIDAPI_KEY": settings.rapidapi_key},
        "google_flights": {"RAPIDAPI_KEY": settings.rapidapi_key},
        "serpapi_google": {"SERPAPI_KEY": settings.serpapi_key},
        "serpapi_booking": {"SERPAPI_KEY": settings.serpapi_key},
    }[name]
    return [env for env, value in required.items() if not value]


def build_provider(
    name: str, settings: Settings, token_manager: TokenManager | None = None
) -> FlightProvider:
    if name == "amadeus":
        if token_manager is None:
            token_manager = build_token_manager(settings)
        return AmadeusProvider(token_manager, base_url=settings.amadeus_base_url)
    if name == "kiwi":
        return KiwiProvider(settings.kiwi_api_key)
    if name == "skyscanner":
        return SkyscannerProvider(settings.rapidapi_key)
    if name == "google_flights":
        return GoogleFlightsProvider(settings.rapidapi_key)
    if name == "serpapi_google":
        return SerpApiProvider.google(settings.serpapi_key)
    if name == "serpapi_booking":
        return SerpApiProvider.booking(settings.serpapi_key)
    raise ValueError(f"Unknown flights provider: {name}")


def build_token_manager(settings: Settings) -> TokenManager:
    return TokenManager(
        f"{settings.amadeus_base_url}/v1/security/oauth2/token",
        settings.amadeus_client_id,
        settings.amadeus_client_secret,
        safety_margin_s=settings.token_safety_margin_s,
    )


def build_providers(settings: Settings) -> List[FlightProvider]:
    """Instantiate configured providers in configuration order.

    Providers without credentials are skipped; duplicates keep their first
    position.
    """
    providers: List[FlightProvider] = []
    seen = set()
    for raw in settings.providers:
        name = canonical_name(raw)
        if name in seen:
            continue
        seen.add(name)

        missing = missing_credentials(name, settings)
        if missing:
            logger.warning(
                "Skipping provider %s: missing %s", name, ", ".join(missing)
            )
            continue
        providers.append(build_provider(name, settings))
    return providers


__all__ = [
    "ALIASES",
    "AmadeusProvider",
    "FlightProvider",
    "GoogleFlightsProvider",
    "KiwiProvider",
    "ProviderError",
    "SerpApiProvider",
    "SkyscannerProvider",
    "build_provider",
    "build_providers",
    "build_token_manager",
    "canonical_name",
    "missing_credentials",
]
