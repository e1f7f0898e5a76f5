"""Zodiac (burj) mapping for Abjad totals and the classical 12-sign table."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class BurjInfo:
    index: int
    name: str
    arabic: str
    transliteration: str
    symbol: str
    planet: str
    day: str
    modality: str
    temperament: str
    element: str
    spiritual_quality: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BurjCalculation:
    burj: int
    name: str


_BURUJ_TABLE: tuple[BurjInfo, ...] = (
    BurjInfo(1, "Aries", "الحمل", "Al-Ḥamal", "♈", "Mars", "Tuesday",
             "Cardinal", "Hot & Dry (Choleric)", "fire",
             "Initiative, courage, pioneering spirit"),
    BurjInfo(2, "Taurus", "الثور", "Al-Thawr", "♉", "Venus", "Friday",
             "Fixed", "Cold & Dry (Melancholic)", "earth",
             "Stability, patience, material manifestation"),
    BurjInfo(3, "Gemini", "الجوزاء", "Al-Jawzāʾ", "♊", "Mercury", "Wednesday",
             "Mutable", "Hot & Wet (Sanguine)", "air",
             "Communication, adaptability, intellectual exploration"),
    BurjInfo(4, "Cancer", "السرطان", "Al-Saraṭān", "♋", "Moon", "Monday",
             "Cardinal", "Cold & Wet (Phlegmatic)", "water",
             "Nurturing, emotional depth, spiritual protection"),
    BurjInfo(5, "Leo", "الأسد", "Al-Asad", "♌", "Sun", "Sunday",
             "Fixed", "Hot & Dry (Choleric)", "fire",
             "Nobility, generosity, divine radiance"),
    BurjInfo(6, "Virgo", "العذراء", "Al-Sunbulah", "♍", "Mercury", "Wednesday",
             "Mutable", "Cold & Dry (Melancholic)", "earth",
             "Purity, service, refinement of character"),
    BurjInfo(7, "Libra", "الميزان", "Al-Mīzān", "♎", "Venus", "Friday",
             "Cardinal", "Hot & Wet (Sanguine)", "air",
             "Balance, justice, harmonious relationships"),
    BurjInfo(8, "Scorpio", "العقرب", "Al-ʿAqrab", "♏", "Mars", "Tuesday",
             "Fixed", "Cold & Wet (Phlegmatic)", "water",
             "Transformation, depth, spiritual regeneration"),
    BurjInfo(9, "Sagittarius", "القوس", "Al-Qaws", "♐", "Jupiter", "Thursday",
             "Mutable", "Hot & Dry (Choleric)", "fire",
             "Wisdom, expansion, higher knowledge"),
    BurjInfo(10, "Capricorn", "الجدي", "Al-Jadī", "♑", "Saturn", "Saturday",
             "Cardinal", "Cold & Dry (Melancholic)", "earth",
             "Mastery, responsibility, endurance"),
    BurjInfo(11, "Aquarius", "الدلو", "Al-Dalw", "♒", "Saturn", "Saturday",
             "Fixed", "Hot & Wet (Sanguine)", "air",
             "Innovation, humanitarianism, spiritual awakening"),
    BurjInfo(12, "Pisces", "الحوت", "Al-Ḥūt", "♓", "Jupiter", "Thursday",
             "Mutable", "Cold & Wet (Phlegmatic)", "water",
             "Compassion, mysticism, universal love"),
)

BURUJ: Mapping[int, BurjInfo] = MappingProxyType({b.index: b for b in _BURUJ_TABLE})


def burj_index(kabir: int) -> int:
    # Python's modulo is never negative, so this stays in 1..12 for kabir <= 0.
    return ((kabir - 1) % 12) + 1


def get_burj(index: int) -> BurjInfo:
    """Metadata for a 1-12 index; raises KeyError outside that range."""
    return BURUJ[index]


def calculate_burj(kabir: int) -> BurjCalculation:
    index = burj_index(kabir)
    return BurjCalculation(burj=index, name=BURUJ[index].name)
