import pytest
from backend.tourbot.retrieval.normalize import (
    destination_text,
    food_text,
    normalize_text,
    place_text,
    search_key,
    strip_non_alnum,
    tokenize,
    tour_destinations_of,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Đà Nẵng", "da nang"),
        ("Cần Thơ", "can tho"),
        ("PHÚ QUỐC", "phu quoc"),
        ("Bún cá Châu Đốc", "bun ca chau doc"),
        ("already plain", "already plain"),
    ],
)
def test_normalize_folds_vietnamese_accents(raw, expected):
    assert normalize_text(raw) == expected


@pytest.mark.parametrize("value", [None, ""])
def test_normalize_empty_input(value):
    assert normalize_text(value) == ""


@pytest.mark.parametrize(
    "value",
    ["Đà Nẵng", "TP. Hồ Chí Minh", "món ăn ở An Giang!", "Ăn gì ở Huế?", "  Ðồng Tháp  ", "x"],
)
def test_normalize_is_idempotent(value):
    once = normalize_text(value)
    assert normalize_text(once) == once


def test_strip_and_tokenize():
    assert strip_non_alnum("tp. ho chi minh") == "tphochiminh"
    assert tokenize("lich trinh 3n2d, da nang!") == ["lich", "trinh", "3n2d", "da", "nang"]


def test_search_text_joins_scalar_and_list_fields():
    record = {
        "city": "Đà Nẵng",
        "name": "Biển Mỹ Khê",
        "country": "Việt Nam",
        "tags": ["biển", None, "gia đình"],
        "lat": 16.05,
    }
    assert destination_text(record) == "Đà Nẵng Biển Mỹ Khê Việt Nam biển gia đình"

    food = {"city": "Huế", "dishName": "Bún bò", "restaurant": None}
    assert food_text(food) == "Huế Bún bò"


def test_tour_destinations_accepts_list_or_string():
    assert tour_destinations_of({"destinations": ["Cần Thơ", "An Giang"]}) == "Cần Thơ An Giang"
    assert tour_destinations_of({"destinations": "Đà Nẵng"}) == "Đà Nẵng"
    assert tour_destinations_of({}) == ""


def test_search_key_collapses_punctuation():
    assert search_key("TP. Hồ Chí Minh,  Việt Nam") == "tp ho chi minh viet nam"
    assert search_key(None) == ""


def test_place_text_uses_city_and_name_only():
    record = {"city": "Đà Nẵng", "name": "Bà Nà Hills", "country": "Việt Nam", "tags": ["núi"]}
    assert place_text(record) == "Đà Nẵng Bà Nà Hills"
