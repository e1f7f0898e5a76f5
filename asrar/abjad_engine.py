"""Abjad letter values, elemental classification and the core numeric cascade.

Pure Python, no I/O. Every function is total: unmapped characters are skipped
and degenerate totals (0, negative) still produce a fully populated result.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Literal, Mapping

from .buruj import calculate_burj

AbjadSystem = Literal["maghribi", "mashriqi"]
Element = Literal["fire", "water", "air", "earth"]

# Canonical order; also the tie-break priority for dominant/weak element.
ELEMENTS: tuple[Element, ...] = ("fire", "water", "air", "earth")

DEFAULT_SYSTEM: AbjadSystem = "maghribi"


# ── Letter-to-value tables ──────────────────────────────────────────

# The 22 letters shared by both conventions.
_SHARED_VALUES: dict[str, int] = {
    "ا": 1, "ب": 2, "ج": 3, "د": 4, "ه": 5, "و": 6, "ز": 7, "ح": 8, "ط": 9,
    "ي": 10, "ك": 20, "ل": 30, "م": 40, "ن": 50, "ع": 70, "ف": 80,
    "ق": 100, "ر": 200, "ت": 400, "ث": 500, "خ": 600, "ذ": 700,
    "ة": 5,  # ta marbuta counts as ha
}

# Eastern order (abjad hawwaz): ... س=60 ... ص=90 ... ش=300 ... ض=800 ظ=900 غ=1000
MASHRIQI_VALUES: Mapping[str, int] = MappingProxyType({
    **_SHARED_VALUES,
    "س": 60, "ص": 90, "ش": 300, "ض": 800, "ظ": 900, "غ": 1000,
})

# Western order: ... ص=60 ... ض=90 ... س=300 ... ظ=800 غ=900 ش=1000
MAGHRIBI_VALUES: Mapping[str, int] = MappingProxyType({
    **_SHARED_VALUES,
    "ص": 60, "ض": 90, "س": 300, "ظ": 800, "غ": 900, "ش": 1000,
})

_VALUE_MAPS: Mapping[str, Mapping[str, int]] = MappingProxyType({
    "maghribi": MAGHRIBI_VALUES,
    "mashriqi": MASHRIQI_VALUES,
})


def get_value_map(system: AbjadSystem = DEFAULT_SYSTEM) -> Mapping[str, int]:
    try:
        return _VALUE_MAPS[system]
    except KeyError:
        raise ValueError(f"Unknown abjad system: {system!r}") from None


# ── Elemental classification ────────────────────────────────────────

# Seven letters per element; ة follows ه.
LETTER_ELEMENTS: Mapping[str, Element] = MappingProxyType({
    **dict.fromkeys("اهطمفشذة", "fire"),
    **dict.fromkeys("بوينضظغ", "air"),
    **dict.fromkeys("جزكسقثخ", "water"),
    **dict.fromkeys("دحلعرصت", "earth"),
})

# Hadath: remainder of the grand total mod 4.
HADAD_ELEMENTS: Mapping[int, Element] = MappingProxyType({
    0: "water",
    1: "fire",
    2: "earth",
    3: "air",
})


def element_of_letter(letter: str) -> Element | None:
    return LETTER_ELEMENTS.get(letter)


def hadad_to_element(remainder: int) -> Element:
    return HADAD_ELEMENTS[remainder % 4]


# ── Core reduction logic ────────────────────────────────────────────

def calculate_kabir(normalized: str, value_map: Mapping[str, int]) -> int:
    """Grand total: plain sum of letter values, unmapped characters count 0."""
    return sum(value_map.get(ch, 0) for ch in normalized)


def digital_root(n: int) -> int:
    """Saghir: 0 for 0, otherwise 1-9 with multiples of 9 reported as 9."""
    if n == 0:
        return 0
    return 1 + (abs(n) - 1) % 9


def hadad_remainder(n: int) -> int:
    return n % 4


# ── Result dataclass ────────────────────────────────────────────────

@dataclass(frozen=True)
class CoreResults:
    kabir: int
    saghir: int
    hadad_mod4: int
    element: Element
    burj: int
    burj_name: str
    sirr: int
    wusta: int
    kamal: int
    bast: int

    def to_dict(self) -> dict[str, int | str]:
        return asdict(self)


def compute_core(
    normalized: str,
    value_map: AbjadSystem | Mapping[str, int] = DEFAULT_SYSTEM,
) -> CoreResults:
    """Run the whole numeric cascade on already normalized text."""
    if isinstance(value_map, str):
        value_map = get_value_map(value_map)
    kabir = calculate_kabir(normalized, value_map)
    saghir = digital_root(kabir)
    remainder = hadad_remainder(kabir)
    burj = calculate_burj(kabir)
    return CoreResults(
        kabir=kabir,
        saghir=saghir,
        hadad_mod4=remainder,
        element=hadad_to_element(remainder),
        burj=burj.burj,
        burj_name=burj.name,
        sirr=abs(kabir - saghir),
        wusta=(kabir + saghir) // 2,
        kamal=kabir + saghir,
        bast=kabir * saghir,
    )
