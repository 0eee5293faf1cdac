import json
from decimal import Decimal

import pytest
from click.testing import CliRunner

from skyscout import cli as cli_module
from skyscout.config import get_settings
from skyscout.engine import FlightAggregator
from skyscout.models import Offer


class StubProvider:
    def __init__(self, name, price):
        self.name = name
        self.price = price

    def search(self, query):
        return [
            Offer(self.name, Decimal(self.price), "AA", 0, "PT5H", "https://x")
        ]


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setenv("PROVIDERS", "amadeus,kiwi")
    monkeypatch.setattr(cli_module, "configure_logging", lambda *a, **k: None)
    aggregator = FlightAggregator([StubProvider("a", "300"), StubProvider("b", "250")])
    monkeypatch.setattr(cli_module, "build_aggregator", lambda settings: aggregator)
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


def test_search_json(runner):
    result = runner.invoke(
        cli_module.cli, ["search", "jfk", "lax", "2025-12-15", "--json"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert [r["price"] for r in data["results"]] == [250.0, 300.0]
    assert data["cached"] is False
    assert data["sources"] == {"a": 1, "b": 1}


def test_search_table_then_cache(runner):
    args = ["search", "JFK", "LAX", "2025-12-15"]
    first = runner.invoke(cli_module.cli, args)
    second = runner.invoke(cli_module.cli, args)
    assert "2 offers (a=1, b=1)" in first.output
    assert "served from cache" in second.output


def test_search_invalid_query(runner):
    result = runner.invoke(cli_module.cli, ["search", "JFK", "LAX", "15.12.2025"])
    assert result.exit_code == 2
    assert "depart_date" in result.output


def test_search_unknown_provider(runner):
    result = runner.invoke(
        cli_module.cli, ["search", "JFK", "LAX", "2025-12-15", "--provider", "expedia"]
    )
    assert result.exit_code == 2


def test_providers_command(runner, monkeypatch):
    monkeypatch.setenv("KIWI_API_KEY", "k")
    monkeypatch.delenv("AMADEUS_CLIENT_ID", raising=False)
    monkeypatch.delenv("AMADEUS_CLIENT_SECRET", raising=False)
    result = runner.invoke(cli_module.cli, ["providers"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].startswith("amadeus") and "missing AMADEUS_CLIENT_ID" in lines[0]
    assert lines[1].startswith("kiwi") and lines[1].endswith("ok")
