from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from .normalize import normalize_text, search_key, tokenize
from .types import HardTypo, Location

# Aliases shorter than this (after normalization) match too much free text.
MIN_ALIAS_LENGTH = 3


class LocationDirectory(Protocol):
    """Anything that can map normalized text to its best matching place."""

    def best_alias_match(self, normalized_query: str) -> Location | None: ...


def _loc(id: str, name: str, *aliases: str) -> Location:
    return Location(id=id, canonical_name=name, aliases=tuple(aliases))


# 63 provinces and centrally-run cities of Vietnam.
VIETNAM_LOCATIONS: tuple[Location, ...] = (
    # centrally-run cities
    _loc("ha-noi", "Hà Nội", "hanoi", "tp ha noi", "thanh pho ha noi", "hn"),
    _loc(
        "ho-chi-minh",
        "TP. Hồ Chí Minh",
        "ho chi minh",
        "ho chi minh city",
        "tp hcm",
        "tphcm",
        "hcm",
        "sai gon",
        "saigon",
        "thanh pho ho chi minh",
    ),
    _loc("hai-phong", "Hải Phòng", "hai phong", "thanh pho hai phong"),
    _loc("da-nang", "Đà Nẵng", "da nang", "danang", "thanh pho da nang"),
    _loc("can-tho", "Cần Thơ", "can tho", "thanh pho can tho", "tay do"),
    # northern mountains
    _loc("ha-giang", "Hà Giang", "ha giang"),
    _loc("cao-bang", "Cao Bằng", "cao bang"),
    _loc("lao-cai", "Lào Cai", "lao cai", "sapa", "sa pa"),
    _loc("dien-bien", "Điện Biên", "dien bien"),
    _loc("lai-chau", "Lai Châu", "lai chau"),
    _loc("son-la", "Sơn La", "son la", "moc chau"),
    _loc("yen-bai", "Yên Bái", "yen bai", "mu cang chai"),
    _loc("tuyen-quang", "Tuyên Quang", "tuyen quang"),
    _loc("bac-kan", "Bắc Kạn", "bac kan"),
    _loc("thai-nguyen", "Thái Nguyên", "thai nguyen"),
    _loc("lang-son", "Lạng Sơn", "lang son", "mau son"),
    _loc("phu-tho", "Phú Thọ", "phu tho", "den hung"),
    _loc("vinh-phuc", "Vĩnh Phúc", "vinh phuc", "tam dao"),
    _loc("quang-ninh", "Quảng Ninh", "quang ninh", "ha long"),
    _loc("bac-giang", "Bắc Giang", "bac giang"),
    _loc("bac-ninh", "Bắc Ninh", "bac ninh", "quan ho"),
    # red river delta
    _loc("hai-duong", "Hải Dương", "hai duong"),
    _loc("hung-yen", "Hưng Yên", "hung yen", "pho hien"),
    _loc("hoa-binh", "Hòa Bình", "hoa binh"),
    _loc("ha-nam", "Hà Nam", "ha nam", "tam chuc"),
    _loc("thai-binh", "Thái Bình", "thai binh"),
    _loc("nam-dinh", "Nam Định", "nam dinh"),
    _loc("ninh-binh", "Ninh Bình", "ninh binh", "trang an"),
    # north central coast
    _loc("thanh-hoa", "Thanh Hóa", "thanh hoa", "sam son"),
    _loc("nghe-an", "Nghệ An", "nghe an", "vinh"),
    _loc("ha-tinh", "Hà Tĩnh", "ha tinh"),
    _loc("quang-binh", "Quảng Bình", "quang binh", "phong nha"),
    _loc("quang-tri", "Quảng Trị", "quang tri"),
    _loc("thua-thien-hue", "Thừa Thiên Huế", "thua thien hue", "hue", "co do hue"),
    # south central coast
    _loc("quang-nam", "Quảng Nam", "quang nam", "hoi an"),
    _loc("quang-ngai", "Quảng Ngãi", "quang ngai", "ly son"),
    _loc("binh-dinh", "Bình Định", "binh dinh", "quy nhon"),
    _loc("phu-yen", "Phú Yên", "phu yen", "tuy hoa"),
    _loc("khanh-hoa", "Khánh Hòa", "khanh hoa", "nha trang"),
    _loc("ninh-thuan", "Ninh Thuận", "ninh thuan", "phan rang"),
    _loc("binh-thuan", "Bình Thuận", "binh thuan", "phan thiet", "mui ne"),
    # central highlands
    _loc("kon-tum", "Kon Tum", "kon tum"),
    _loc("gia-lai", "Gia Lai", "gia lai", "pleiku"),
    _loc("dak-lak", "Đắk Lắk", "dak lak", "buon ma thuot"),
    _loc("dak-nong", "Đắk Nông", "dak nong"),
    _loc("lam-dong", "Lâm Đồng", "lam dong", "da lat", "dalat"),
    # south east
    _loc("ba-ria-vung-tau", "Bà Rịa – Vũng Tàu", "ba ria vung tau", "vung tau", "ba ria"),
    _loc("binh-duong", "Bình Dương", "binh duong"),
    _loc("binh-phuoc", "Bình Phước", "binh phuoc"),
    _loc("dong-nai", "Đồng Nai", "dong nai", "bien hoa"),
    _loc("tay-ninh", "Tây Ninh", "tay ninh"),
    _loc("long-an", "Long An", "long an"),
    # mekong delta
    _loc("tien-giang", "Tiền Giang", "tien giang", "my tho"),
    _loc("ben-tre", "Bến Tre", "ben tre", "xu dua"),
    _loc("tra-vinh", "Trà Vinh", "tra vinh"),
    _loc("vinh-long", "Vĩnh Long", "vinh long"),
    _loc("dong-thap", "Đồng Tháp", "dong thap", "sa dec"),
    _loc("an-giang", "An Giang", "an giang", "chau doc", "long xuyen"),
    _loc("kien-giang", "Kiên Giang", "kien giang", "phu quoc", "rach gia"),
    _loc("hau-giang", "Hậu Giang", "hau giang", "vi thanh"),
    _loc("soc-trang", "Sóc Trăng", "soc trang"),
    _loc("bac-lieu", "Bạc Liêu", "bac lieu"),
    _loc("ca-mau", "Cà Mau", "ca mau", "dat mui", "mui ca mau"),
)

# Misspellings too far from any alias for substring matching. Order is priority.
HARD_TYPOS: tuple[HardTypo, ...] = (
    HardTypo(canonical_name="Cần Thơ", patterns=("can thor", "can tho2")),
)


class CanonicalLocationTable:
    """Ordered, read-only table of known places.

    Each entry's aliases are normalized once at construction. Lookups
    pick the longest alias found in the query as whole words; equal
    lengths keep the entry that appears first in the table.
    """

    def __init__(self, locations: Iterable[Location] = VIETNAM_LOCATIONS) -> None:
        self.locations: tuple[Location, ...] = tuple(locations)
        self._aliases: tuple[tuple[Location, tuple[str, ...]], ...] = tuple(
            (loc, self._normalized_aliases(loc)) for loc in self.locations
        )

    @staticmethod
    def _normalized_aliases(location: Location) -> tuple[str, ...]:
        seen: list[str] = []
        for alias in location.candidate_names:
            norm = search_key(alias)
            if len(norm) < MIN_ALIAS_LENGTH or norm in seen:
                continue
            seen.append(norm)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.locations)

    def best_alias_match(self, normalized_query: str) -> Location | None:
        words = " ".join(tokenize(normalized_query))
        if not words:
            return None
        padded = f" {words} "
        best: Location | None = None
        best_len = 0
        for location, aliases in self._aliases:
            for alias in aliases:
                if len(alias) > best_len and f" {alias} " in padded:
                    best = location
                    best_len = len(alias)
        return best

    def find_by_name(self, name: str | None) -> Location | None:
        if not name:
            return None
        target = normalize_text(name)
        for location in self.locations:
            if normalize_text(location.canonical_name) == target:
                return location
        return None


def match_hard_typo(normalized_query: str, table: Sequence[HardTypo] = HARD_TYPOS) -> str | None:
    if not normalized_query:
        return None
    for entry in table:
        if any(pattern in normalized_query for pattern in entry.patterns):
            return entry.canonical_name
    return None
