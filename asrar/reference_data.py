"""Bundled read-only reference tables: the 99 Divine Names and Surah metadata."""
from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
DIVINE_NAMES_PATH = ASSETS_DIR / "divine_names.json"
SURAHS_PATH = ASSETS_DIR / "surahs.json"

QURAN_COM_BASE_URL = "https://quran.com"

SURAH_COUNT = 114
DIVINE_NAME_COUNT = 99


@dataclass(frozen=True)
class DivineName:
    number: int
    arabic: str
    transliteration: str
    meaning: str
    values: Mapping[str, int]

    def value(self, system: str) -> int:
        return self.values[system]

    def to_dict(self, system: str | None = None) -> dict[str, Any]:
        data: dict[str, Any] = {
            "number": self.number,
            "arabic": self.arabic,
            "transliteration": self.transliteration,
            "meaning": self.meaning,
            "values": dict(self.values),
        }
        if system is not None:
            data["abjad_value"] = self.values[system]
        return data


@dataclass(frozen=True)
class Surah:
    number: int
    arabic: str
    transliteration: str
    english: str
    total_ayahs: int
    revelation_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "arabic": self.arabic,
            "transliteration": self.transliteration,
            "english": self.english,
            "total_ayahs": self.total_ayahs,
            "revelation_type": self.revelation_type,
        }


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


# ── Divine Names ────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def load_divine_names() -> tuple[DivineName, ...]:
    data = _read_json(DIVINE_NAMES_PATH)
    if not isinstance(data, list) or len(data) != DIVINE_NAME_COUNT:
        raise RuntimeError("divine_names.json is invalid")
    return tuple(
        DivineName(
            number=int(item["number"]),
            arabic=item["arabic"],
            transliteration=item["transliteration"],
            meaning=item["meaning"],
            values=MappingProxyType({k: int(v) for k, v in item["values"].items()}),
        )
        for item in data
    )


@lru_cache(maxsize=1)
def _divine_names_by_number() -> Mapping[int, DivineName]:
    return MappingProxyType({name.number: name for name in load_divine_names()})


def get_divine_name(number: int) -> DivineName | None:
    return _divine_names_by_number().get(number)


# ── Surahs ──────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def load_surahs() -> tuple[Surah, ...]:
    data = _read_json(SURAHS_PATH)
    if not isinstance(data, list) or len(data) != SURAH_COUNT:
        raise RuntimeError("surahs.json is invalid")
    return tuple(
        Surah(
            number=int(item["number"]),
            arabic=item["arabic"],
            transliteration=item["transliteration"],
            english=item["english"],
            total_ayahs=int(item["total_ayahs"]),
            revelation_type=item["revelation_type"],
        )
        for item in data
    )


def get_surah(number: int) -> Surah | None:
    if 1 <= number <= SURAH_COUNT:
        return load_surahs()[number - 1]
    return None


def validate_ayah(surah_number: int, ayah_number: int) -> bool:
    surah = get_surah(surah_number)
    return surah is not None and 1 <= ayah_number <= surah.total_ayahs


def quran_link(surah_number: int, ayah_number: int | None = None) -> str:
    if ayah_number is None:
        return f"{QURAN_COM_BASE_URL}/{surah_number}"
    return f"{QURAN_COM_BASE_URL}/{surah_number}/{ayah_number}"
