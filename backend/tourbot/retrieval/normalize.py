from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TOKEN = re.compile(r"[a-z0-9]+")


def normalize_text(value: str | None) -> str:
    """Fold Vietnamese text to a comparable ascii-lowercase key.

    Accents are decomposed and their combining marks dropped. The stroked
    d (đ/Đ) has no decomposition, so it is mapped to a plain d by hand.
    """
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "d")


def strip_non_alnum(value: str) -> str:
    return _NON_ALNUM.sub("", value)


def tokenize(value: str) -> list[str]:
    return _TOKEN.findall(value)


def search_key(value: str | None) -> str:
    """Fold text and collapse it to single-space separated words."""
    return " ".join(tokenize(normalize_text(value)))


def _to_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def join_fields(record: Mapping[str, Any], fields: Iterable[str]) -> str:
    """Concatenate scalar and list fields of a record into one text blob."""
    parts: list[str] = []
    for name in fields:
        for item in _to_list(record.get(name)):
            if item is None or item == "":
                continue
            parts.append(str(item))
    return " ".join(parts).strip()


# ---------- per-corpus searchable text ----------

DESTINATION_FIELDS = ("city", "name", "country", "tags")
FOOD_FIELDS = ("city", "country", "dishName", "restaurant", "tags")
TOUR_FIELDS = ("title", "destinations", "style", "target")
POLICY_FIELDS = ("category", "title", "keywords")
TIP_FIELDS = ("topic", "title", "tags")
PLACE_FIELDS = ("city", "name")


def destination_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, DESTINATION_FIELDS)


def food_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, FOOD_FIELDS)


def tour_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, TOUR_FIELDS)


def policy_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, POLICY_FIELDS)


def tip_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, TIP_FIELDS)


def place_text(record: Mapping[str, Any]) -> str:
    return join_fields(record, PLACE_FIELDS)


def city_of(record: Mapping[str, Any]) -> str:
    return str(record.get("city") or "")


def tour_destinations_of(record: Mapping[str, Any]) -> str:
    return " ".join(str(d) for d in _to_list(record.get("destinations")) if d)
