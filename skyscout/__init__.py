"""SkyScout – concurrent flight-price aggregation across upstream providers."""

from .engine import FlightAggregator, build_aggregator
from .models import AggregateResult, InvalidQueryError, Offer, Query

__version__ = "2.0.0"

__all__ = [
    "AggregateResult",
    "FlightAggregator",
    "InvalidQueryError",
    "Offer",
    "Query",
    "build_aggregator",
]
