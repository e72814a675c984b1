import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Packaged seed data and no generator credentials for every test
os.environ["DATA_DIR"] = str(ROOT / "backend" / "tourbot" / "data")
os.environ.pop("LLM_API_KEY", None)

from backend.tourbot.retrieval import (  # noqa: E402
    ContextAssembler,
    InMemorySessionRepository,
    TravelChatEngine,
    build_corpora,
)

DESTINATIONS = [
    {
        "id": "d-an-giang",
        "city": "An Giang",
        "country": "Việt Nam",
        "name": "Miếu Bà Chúa Xứ",
        "tags": ["tâm linh"],
        "lat": 10.7058,
        "lng": 105.1167,
    },
    {
        "id": "d-my-khe",
        "city": "Đà Nẵng",
        "country": "Việt Nam",
        "name": "Biển Mỹ Khê",
        "tags": ["biển"],
        "lat": 16.0544,
        "lng": 108.2022,
    },
    {
        "id": "d-cai-rang",
        "city": "Cần Thơ",
        "country": "Việt Nam",
        "name": "Chợ nổi Cái Răng",
        "tags": ["chợ nổi"],
    },
    {
        "id": "d-ba-na",
        "city": "Đà Nẵng",
        "country": "Việt Nam",
        "name": "Bà Nà Hills",
        "tags": ["núi"],
    },
]

FOODS = [
    {
        "id": "f-mi-quang",
        "city": "Đà Nẵng",
        "country": "Việt Nam",
        "dishName": "Mì Quảng",
        "restaurant": "Bà Mua",
        "tags": ["mì"],
    },
    {
        "id": "f-bun-ca",
        "city": "An Giang",
        "country": "Việt Nam",
        "dishName": "Bún cá Châu Đốc",
        "restaurant": "Cô Ba",
        "tags": ["bún"],
    },
    {
        "id": "f-lau-mam",
        "city": "An Giang",
        "country": "Việt Nam",
        "dishName": "Lẩu mắm",
        "restaurant": "Dạ Lý",
        "tags": ["lẩu"],
    },
    {
        "id": "f-bun-cha",
        "city": "Hà Nội",
        "country": "Việt Nam",
        "dishName": "Bún chả",
        "restaurant": "Hương Liên",
        "tags": ["bún"],
    },
]

TOURS = [
    {
        "id": "t-mien-tay",
        "title": "Miền Tây sông nước 3N2Đ",
        "destinations": ["Cần Thơ", "An Giang"],
        "style": "khám phá",
        "target": "gia đình",
    },
    {
        "id": "t-da-nang",
        "title": "Đà Nẵng - Hội An 4N3Đ",
        "destinations": ["Đà Nẵng", "Quảng Nam"],
        "style": "nghỉ dưỡng",
        "target": "cặp đôi",
    },
]

POLICIES = [
    {"id": "p-cancel", "category": "hủy đổi", "title": "Hủy tour", "keywords": ["hoàn tiền"]},
]

TIPS = [
    {"id": "tip-luggage", "topic": "hành lý", "title": "Hành lý gọn nhẹ", "tags": ["ký gửi"]},
]

FLIGHTS = [
    {
        "routeCode": "SGN-DAD",
        "from": "TP. Hồ Chí Minh",
        "to": "Đà Nẵng",
        "currency": "VND",
        "oneWayLow": 900000,
        "oneWayHigh": 1900000,
        "roundTripLow": 1700000,
        "roundTripHigh": 3500000,
        "note": "Giá tăng dịp hè.",
    },
]


class FakeGenerator:
    """Records prompts and answers with a canned reply or error."""

    def __init__(self, reply: str = "Xin chào từ mình!", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.configured = True

    async def generate(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def corpora():
    return build_corpora(
        destinations=DESTINATIONS,
        foods=FOODS,
        tours=TOURS,
        policies=POLICIES,
        tips=TIPS,
        flights=FLIGHTS,
    )


@pytest.fixture
def assembler(corpora):
    return ContextAssembler(corpora)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def engine(assembler, generator):
    return TravelChatEngine(assembler, generator, sessions=InMemorySessionRepository())
