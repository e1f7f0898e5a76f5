"""Nearest-match searches over sacred numbers, Divine Names and the Qur'an."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, Mapping

from .abjad_engine import DEFAULT_SYSTEM, AbjadSystem
from .reference_data import (
    SURAH_COUNT,
    DivineName,
    get_surah,
    load_divine_names,
    quran_link,
)

SACRED_NUMBERS: Mapping[int, str] = MappingProxyType({
    7: "Seven heavens, seven days of creation",
    12: "Twelve Imams, twelve months",
    19: "Numerical miracle of the Quran",
    70: "Surah Yā-Sīn (يس)",
    99: "Asmāʾ al-Ḥusnā (Beautiful Names)",
    114: "Surahs in the Quran",
    313: "Companions at Badr",
    786: "Bismillah value (short form)",
})

SIGNIFICANT_DIVISORS: tuple[int, ...] = (7, 19, 99)

MatchKind = Literal["exact", "approximate"]


# ── Sacred numbers ──────────────────────────────────────────────────

@dataclass(frozen=True)
class SacredResonance:
    nearest: int
    distance: int
    delta: int
    is_exact: bool
    description: str
    factors: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nearest": self.nearest,
            "distance": self.distance,
            "delta": self.delta,
            "is_exact": self.is_exact,
            "description": self.description,
            "factors": list(self.factors),
        }


def nearest_sacred(kabir: int) -> SacredResonance:
    """Closest sacred number; on equal distance the earlier table entry wins."""
    # min() returns the first minimal candidate in table order.
    best = min(SACRED_NUMBERS, key=lambda candidate: abs(candidate - kabir))
    factors = tuple(d for d in SIGNIFICANT_DIVISORS if kabir != 0 and kabir % d == 0)
    return SacredResonance(
        nearest=best,
        distance=abs(best - kabir),
        delta=kabir - best,
        is_exact=best == kabir,
        description=SACRED_NUMBERS[best],
        factors=factors,
    )


# ── Divine Names ────────────────────────────────────────────────────

@dataclass(frozen=True)
class DivineNameMatch:
    name: DivineName
    value: int
    distance: int
    match: MatchKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.name.number,
            "arabic": self.name.arabic,
            "transliteration": self.name.transliteration,
            "meaning": self.name.meaning,
            "abjad_value": self.value,
            "distance": self.distance,
            "match": self.match,
        }


def find_divine_names_by_value(
    kabir: int,
    tolerance: int = 0,
    system: AbjadSystem = DEFAULT_SYSTEM,
) -> list[DivineName]:
    return [n for n in load_divine_names() if abs(n.value(system) - kabir) <= tolerance]


def nearest_divine_names(
    kabir: int,
    limit: int = 3,
    system: AbjadSystem = DEFAULT_SYSTEM,
) -> list[DivineNameMatch]:
    ranked = sorted(load_divine_names(), key=lambda n: (abs(n.value(system) - kabir), n.number))
    matches: list[DivineNameMatch] = []
    for name in ranked[:max(limit, 0)]:
        distance = abs(name.value(system) - kabir)
        matches.append(
            DivineNameMatch(
                name=name,
                value=name.value(system),
                distance=distance,
                match="exact" if distance == 0 else "approximate",
            )
        )
    return matches


# ── Qur'an verse resonance ──────────────────────────────────────────

@dataclass(frozen=True)
class QuranReference:
    surah_number: int
    surah_name: str
    surah_arabic: str
    ayah_number: int
    link: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "surah_number": self.surah_number,
            "surah_name": self.surah_name,
            "surah_arabic": self.surah_arabic,
            "ayah_number": self.ayah_number,
            "link": self.link,
        }


def quran_resonance(kabir: int) -> QuranReference | None:
    """Map a total onto a verse: surah = kabir mod 114, ayah = kabir mod ayah count.

    A zero remainder wraps to the last surah / last ayah. Non-positive totals
    have no verse.
    """
    if kabir <= 0:
        return None
    surah_number = kabir % SURAH_COUNT or SURAH_COUNT
    surah = get_surah(surah_number)
    if surah is None:
        return None
    ayah_number = kabir % surah.total_ayahs or surah.total_ayahs
    return QuranReference(
        surah_number=surah.number,
        surah_name=surah.transliteration,
        surah_arabic=surah.arabic,
        ayah_number=ayah_number,
        link=quran_link(surah.number, ayah_number),
    )
