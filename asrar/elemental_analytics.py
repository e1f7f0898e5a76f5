"""Letter-frequency and elemental balance analytics over normalized Arabic text."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from .abjad_engine import (
    DEFAULT_SYSTEM,
    ELEMENTS,
    AbjadSystem,
    Element,
    element_of_letter,
    get_value_map,
)

IDEAL_PERCENT = 25.0
BALANCE_SCALE = 2.3


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


@dataclass(frozen=True)
class LetterFrequency:
    letter: str
    count: int
    value: int
    element: Element

    def to_dict(self) -> dict[str, Any]:
        return {
            "letter": self.letter,
            "count": self.count,
            "value": self.value,
            "element": self.element,
        }


@dataclass(frozen=True)
class ElementalAnalytics:
    letter_freq: tuple[LetterFrequency, ...]
    element_counts: Mapping[Element, int]
    element_percents: Mapping[Element, int]
    total_letters: int
    dominant_element: Element
    weak_element: Element | None
    balance_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "letter_freq": [f.to_dict() for f in self.letter_freq],
            "element_counts": dict(self.element_counts),
            "element_percents": dict(self.element_percents),
            "total_letters": self.total_letters,
            "dominant_element": self.dominant_element,
            "weak_element": self.weak_element,
            "balance_score": self.balance_score,
        }


# ── Aggregate helpers ───────────────────────────────────────────────

def element_percentages(counts: Mapping[Element, int]) -> dict[Element, int]:
    total = sum(counts.get(e, 0) for e in ELEMENTS)
    if total == 0:
        return {e: 0 for e in ELEMENTS}
    return {e: _round_half_up(counts.get(e, 0) / total * 100) for e in ELEMENTS}


def dominant_element(percents: Mapping[Element, int]) -> Element:
    """Highest share; ties resolve fire > water > air > earth."""
    # max() keeps the first maximal item, and ELEMENTS is in priority order.
    return max(ELEMENTS, key=lambda e: percents.get(e, 0))


def weak_element(percents: Mapping[Element, int]) -> Element | None:
    for element in ELEMENTS:
        if percents.get(element, 0) == 0:
            return element
    return None


def balance_score(percents: Mapping[Element, int]) -> int:
    """100 for a perfect 25/25/25/25 split, near 0 for a single element.

    Uses the population standard deviation of the four shares around 25.
    """
    variance = sum((percents.get(e, 0) - IDEAL_PERCENT) ** 2 for e in ELEMENTS) / len(ELEMENTS)
    std_dev = math.sqrt(variance)
    return max(0, min(100, _round_half_up(100 - std_dev * BALANCE_SCALE)))


# ── Main entry point ────────────────────────────────────────────────

def compute_analytics(normalized: str, system: AbjadSystem = DEFAULT_SYSTEM) -> ElementalAnalytics:
    value_map = get_value_map(system)

    counts: dict[str, int] = {}
    for ch in normalized:
        if element_of_letter(ch) is None or ch not in value_map:
            continue
        counts[ch] = counts.get(ch, 0) + 1

    # dicts keep first-appearance order, so sorted() breaks count ties by it.
    letter_freq = tuple(
        LetterFrequency(letter=ch, count=n, value=value_map[ch], element=element_of_letter(ch))
        for ch, n in sorted(counts.items(), key=lambda item: -item[1])
    )

    element_counts: dict[Element, int] = {e: 0 for e in ELEMENTS}
    for freq in letter_freq:
        element_counts[freq.element] += freq.count
    total = sum(element_counts.values())

    percents = element_percentages(element_counts)
    return ElementalAnalytics(
        letter_freq=letter_freq,
        element_counts=element_counts,
        element_percents=percents,
        total_letters=total,
        dominant_element=dominant_element(percents),
        weak_element=weak_element(percents),
        balance_score=balance_score(percents) if total else 0,
    )
