from decimal import Decimal

from skyscout.dedupe import dedupe, offer_key
from skyscout.models import Offer
from skyscout.ranking import rank


def offer(source, price, airline="AA", stops=0, url="https://x"):
    return Offer(source, Decimal(price), airline, stops, "5h 0m", url)


def test_dedupe_keeps_first_occurrence():
    offers = [
        offer("Amadeus", "300", url="https://amadeus"),
        offer("Kiwi.com", "300.00", url="https://kiwi"),
        offer("Kiwi.com", "300", stops=1),
        offer("Skyscanner", "300", airline="DL"),
    ]
    unique = dedupe(offers)

    assert [o.booking_url for o in unique][0] == "https://amadeus"
    assert len(unique) == 3
    assert len({offer_key(o) for o in unique}) == len(unique)


def test_dedupe_collapses_distinct_itineraries_with_same_key():
    # Different sources and links, same (airline, price, stops): one survives.
    a = offer("Amadeus", "199", url="https://a")
    b = offer("Booking.com", "199", url="https://b")
    assert dedupe([a, b]) == [a]


def test_rank_is_non_decreasing_and_stable():
    offers = [
        offer("A", "300"),
        offer("B", "250", airline="DL"),
        offer("C", "300", airline="UA"),
        offer("D", "0", airline="Multiple"),
        offer("E", "250", airline="B6"),
    ]
    ranked = rank(offers)

    prices = [o.price for o in ranked]
    assert prices == sorted(prices)
    assert [o.source for o in ranked] == ["D", "B", "E", "A", "C"]


def test_rank_empty():
    assert rank([]) == []
    assert dedupe([]) == []
