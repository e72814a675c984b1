import pytest
from backend.tourbot.retrieval.flights import (
    ONE_WAY,
    ROUND_TRIP,
    FlightEstimateTable,
    normalize_trip_type,
)

RECORDS = [
    {
        "routeCode": "SGN-DAD",
        "from": "TP. Hồ Chí Minh",
        "to": "Đà Nẵng",
        "currency": "VND",
        "oneWayLow": 900000,
        "oneWayHigh": "1900000",
        "roundTripLow": 1700000,
        "roundTripHigh": 3500000,
        "note": "Giá tăng dịp hè.",
    },
    {"from": "Nowhere", "to": "Somewhere"},
    {"routeCode": "SGN-DAD", "from": "duplicate", "to": "ignored"},
]


@pytest.fixture
def table():
    return FlightEstimateTable.from_records(RECORDS)


def test_records_without_route_are_skipped(table):
    assert len(table) == 2


def test_find_is_case_insensitive_and_bidirectional(table):
    assert table.find("sgn", "dad").route_code == "SGN-DAD"
    assert table.find("DAD", "SGN").route_code == "SGN-DAD"
    assert table.find(" Sgn ", "Dad").origin_name == "TP. Hồ Chí Minh"


def test_first_duplicate_route_wins(table):
    assert table.find("SGN", "DAD").origin_name == "TP. Hồ Chí Minh"


def test_unknown_or_missing_route(table):
    assert table.find("HAN", "PQC") is None
    assert table.find(None, "DAD") is None
    assert table.find("SGN", "") is None
    assert FlightEstimateTable().find("SGN", "DAD") is None


def test_quote_selects_band_by_trip_type(table):
    one_way = table.quote("SGN", "DAD", "oneway")
    assert one_way.trip_type == ONE_WAY
    assert (one_way.low, one_way.high) == (900000.0, 1900000.0)

    round_trip = table.quote("sgn", "dad")
    assert round_trip.trip_type == ROUND_TRIP
    assert (round_trip.low, round_trip.high) == (1700000.0, 3500000.0)
    assert round_trip.origin_code == "SGN"
    assert round_trip.currency == "VND"
    assert table.quote("SGN", "HUI") is None


@pytest.mark.parametrize(
    "value, expected",
    [("oneway", ONE_WAY), ("ONEWAY", ONE_WAY), ("roundtrip", ROUND_TRIP), (None, ROUND_TRIP), ("x", ROUND_TRIP)],
)
def test_normalize_trip_type(value, expected):
    assert normalize_trip_type(value) == expected
