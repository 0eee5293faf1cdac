from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

load_dotenv()

DEFAULT_PROVIDERS = [
    "amadeus",
    "kiwi",
    "skyscanner",
    "google_flights",
    "serpapi_google",
    "serpapi_booking",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    amadeus_client_id: str = Field("", alias="AMADEUS_CLIENT_ID")
    amadeus_client_secret: str = Field("", alias="AMADEUS_CLIENT_SECRET")
    amadeus_base_url: str = Field(
        "https://test.api.amadeus.com", alias="AMADEUS_BASE_URL"
    )
    kiwi_api_key: str = Field("", alias="KIWI_API_KEY")
    rapidapi_key: str = Field("", alias="RAPIDAPI_KEY")
    serpapi_key: str = Field("", alias="SERPAPI_KEY")

    providers: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_PROVIDERS), alias="PROVIDERS"
    )
    cache_ttl_s: int = Field(3600, alias="CACHE_TTL_S")
    token_safety_margin_s: int = Field(60, alias="TOKEN_SAFETY_MARGIN_S")
    max_workers: Optional[int] = Field(None, alias="MAX_WORKERS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("amadeus_base_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("providers", mode="before")
    @classmethod
    def _split_providers(cls, v):
        if isinstance(v, str):
            return [p.strip().lower() for p in v.split(",") if p.strip()]
        return v

    @field_validator("cache_ttl_s")
    @classmethod
    def _ttl_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("CACHE_TTL_S must be greater than 0")
        return v

    @field_validator("token_safety_margin_s")
    @classmethod
    def _margin_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("TOKEN_SAFETY_MARGIN_S must not be negative")
        return v

    @field_validator("max_workers")
    @classmethod
    def _workers_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("MAX_WORKERS must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["DEFAULT_PROVIDERS", "Settings", "get_settings"]
