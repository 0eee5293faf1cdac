import threading
import time
from decimal import Decimal

import pytest

from skyscout.cache import ResultCache
from skyscout.engine import FlightAggregator, build_aggregator
from skyscout.fanout import combine, fan_out, provider_counts
from skyscout.models import InvalidQueryError, Offer, Query

QUERY = Query(
    origin="JFK",
    destination="LAX",
    depart_date="2025-12-15",
    return_date="",
    passengers=1,
)


class StubProvider:
    def __init__(self, name, prices=(), *, exc=None, delay=0.0, airline=None):
        self.name = name
        self.source = name.upper()
        self.prices = list(prices)
        self.exc = exc
        self.delay = delay
        self.airline = airline or name
        self.calls = 0
        self._lock = threading.Lock()

    def search(self, query):
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return [
            Offer(self.source, Decimal(p), self.airline, 0, "1h 0m", f"https://{self.name}")
            for p in self.prices
        ]


def test_partial_failure_keeps_other_providers():
    providers = [
        StubProvider("a", exc=RuntimeError("connection reset")),
        StubProvider("b", ["100", "200", "300"]),
        StubProvider("c"),
        StubProvider("d", ["150", "250"]),
    ]
    results = fan_out(providers, QUERY)

    assert provider_counts(results) == {"a": 0, "b": 3, "c": 0, "d": 2}
    assert len(combine(results)) == 5
    assert results[0].error is not None
    assert results[2].ok

    result = FlightAggregator(providers).aggregate(QUERY)
    assert len(result.offers) == 5
    assert result.provider_counts == {"a": 0, "b": 3, "c": 0, "d": 2}


def test_combined_order_follows_configuration_not_completion():
    slow = StubProvider("slow", ["10"], delay=0.2)
    fast = StubProvider("fast", ["20"])
    results = fan_out([slow, fast], QUERY)
    assert [o.source for o in combine(results)] == ["SLOW", "FAST"]


def test_providers_run_concurrently():
    providers = [StubProvider(f"p{i}", ["100"], delay=0.3) for i in range(4)]
    started = time.perf_counter()
    fan_out(providers, QUERY)
    assert time.perf_counter() - started < 1.0


def test_end_to_end_ranking_and_cache():
    a = StubProvider("a", ["300"])
    b = StubProvider("b", ["250"])
    aggregator = FlightAggregator([a, b], ResultCache(ttl_s=3600))

    first = aggregator.aggregate(QUERY)
    assert [o.price for o in first.offers] == [Decimal("250"), Decimal("300")]
    assert first.served_from_cache is False
    assert first.provider_counts == {"a": 1, "b": 1}

    second = aggregator.aggregate(QUERY)
    assert second.served_from_cache is True
    assert second.offers == first.offers
    assert (a.calls, b.calls) == (1, 1)


def test_return_date_variants_are_cached_independently():
    a = StubProvider("a", ["300"])
    aggregator = FlightAggregator([a])

    aggregator.aggregate(QUERY)
    round_trip = aggregator.aggregate(
        Query("JFK", "LAX", "2025-12-15", "2025-12-22", 1)
    )
    assert round_trip.served_from_cache is False
    assert a.calls == 2
    assert len(aggregator.cache) == 2


def test_duplicates_across_providers_are_removed():
    a = StubProvider("a", ["199"], airline="AA")
    b = StubProvider("b", ["199", "210"], airline="AA")
    result = FlightAggregator([a, b]).aggregate(QUERY)
    assert [(o.source, o.price) for o in result.offers] == [
        ("A", Decimal("199")),
        ("B", Decimal("210")),
    ]


def test_all_providers_failing_returns_empty_list():
    providers = [StubProvider("a", exc=ValueError("bad")), StubProvider("b")]
    result = FlightAggregator(providers).aggregate(QUERY)
    assert result.offers == []
    assert result.served_from_cache is False
    assert result.provider_counts == {"a": 0, "b": 0}


def test_invalid_query_is_rejected_before_fan_out():
    a = StubProvider("a", ["100"])
    with pytest.raises(InvalidQueryError):
        FlightAggregator([a]).aggregate(Query("JFK", "", "2025-12-15"))
    assert a.calls == 0


def test_no_providers():
    result = FlightAggregator([]).aggregate(QUERY)
    assert result.offers == []
    assert result.provider_counts == {}


def test_build_aggregator_from_settings(monkeypatch):
    from skyscout.config import Settings

    monkeypatch.setenv("KIWI_API_KEY", "k")
    monkeypatch.setenv("PROVIDERS", "kiwi,amadeus")
    monkeypatch.setenv("CACHE_TTL_S", "120")
    monkeypatch.delenv("AMADEUS_CLIENT_ID", raising=False)
    monkeypatch.delenv("AMADEUS_CLIENT_SECRET", raising=False)

    aggregator = build_aggregator(Settings())
    assert [p.name for p in aggregator.providers] == ["kiwi"]
    assert aggregator.cache.ttl_s == 120
    assert aggregator.status()["cache"] == {"keys": 0, "hits": 0, "misses": 0}
