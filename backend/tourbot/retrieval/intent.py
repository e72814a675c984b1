from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .normalize import normalize_text
from .types import Intent

KEYWORD_WEIGHT = 2

# Keywords are matched as substrings of the accent-folded text.
FOOD_KEYWORDS: tuple[str, ...] = (
    "an gi",
    "an gi o",
    "an gi tai",
    "do an",
    "do an ngon",
    "mon an",
    "mon gi",
    "quan an",
    "quan ngon",
    "quan nhau",
    "quan hai san",
    "an uong",
    "nha hang",
    "buffet",
    "bbq",
    "lau nuong",
    "an sang",
    "an trua",
    "an toi",
    "food",
    "street food",
    "dac san",
    "dac san gi",
    "quan ca phe",
    "cafe",
    "ca phe",
)

PLACE_KEYWORDS: tuple[str, ...] = (
    "di dau",
    "di choi",
    "di du lich",
    "lich trinh",
    "itinerary",
    "tour",
    "combo",
    "goi tour",
    "lich trinh 3n2d",
    "lich trinh 4n3d",
    "lich trinh 2n1d",
    "check in",
    "tham quan",
    "choi gi",
    "o dau",
    "o khach san nao",
    "khach san",
    "hotel",
    "homestay",
    "resort",
    "luu tru",
    "cho o",
    "dia diem",
    "diem den",
    "diem tham quan",
    "cho vui choi",
    "lich trinh tham quan",
    "sap xep lich trinh",
    "goi y lich trinh",
)

TIPS_KEYWORDS: tuple[str, ...] = (
    "meo",
    "meo du lich",
    "kinh nghiem",
    "tip",
    "tips",
    "luu y",
    "chu y",
    "nen di thang may",
    "gia re nhat",
    "thoi diem nao",
    "thang nao",
    "mua nao",
    "thoi tiet",
    "thoi tiet o",
    "co mua khong",
    "mua nao dep",
    "phuong tien",
    "di chuyen bang gi",
    "di bang gi",
    "gia ve",
    "gia ve may bay",
    "bay thang nao re",
    "hanh ly",
    "ky gui",
    "mang gi khi di",
    "can chuan bi gi",
    "doi tra",
    "huy tour",
    "huy ve",
    "bao gom gi",
    "an toan",
    "bao hiem du lich",
    "tui tien",
)


@dataclass(frozen=True)
class Boost:
    intent: Intent
    pattern: re.Pattern[str]
    bonus: int


# Unambiguous cues that should outweigh a single generic keyword hit.
BOOSTS: tuple[Boost, ...] = (
    Boost(Intent.FOOD, re.compile(r"an gi o "), 3),
    Boost(Intent.FOOD, re.compile(r"goi y quan"), 2),
    Boost(Intent.FOOD, re.compile(r"quan nao"), 2),
    Boost(Intent.PLACE, re.compile(r"di dau|sap xep lich"), 3),
    Boost(Intent.PLACE, re.compile(r"lich trinh"), 3),
    Boost(Intent.PLACE, re.compile(r"tour "), 3),
)

DEFAULT_KEYWORDS: Mapping[Intent, Sequence[str]] = {
    Intent.FOOD: FOOD_KEYWORDS,
    Intent.PLACE: PLACE_KEYWORDS,
    Intent.TIPS: TIPS_KEYWORDS,
}


class IntentClassifier:
    def __init__(
        self,
        keywords: Mapping[Intent, Sequence[str]] | None = None,
        boosts: Sequence[Boost] = BOOSTS,
    ) -> None:
        self.keywords = dict(keywords or DEFAULT_KEYWORDS)
        self.boosts = tuple(boosts)

    def scores(self, text: str | None) -> dict[Intent, int]:
        query = normalize_text(text)
        totals = {intent: 0 for intent in self.keywords}
        if not query:
            return totals
        for intent, needles in self.keywords.items():
            totals[intent] = KEYWORD_WEIGHT * sum(1 for needle in needles if needle in query)
        for boost in self.boosts:
            if boost.intent in totals and boost.pattern.search(query):
                totals[boost.intent] += boost.bonus
        return totals

    def classify(self, text: str | None) -> Intent:
        totals = self.scores(text)
        best = max(totals.values(), default=0)
        if best <= 0:
            return Intent.OTHER
        winners = [intent for intent, score in totals.items() if score == best]
        if len(winners) == 1:
            return winners[0]
        return Intent.MIXED


_default_classifier = IntentClassifier()


def classify_intent(text: str | None) -> Intent:
    return _default_classifier.classify(text)
