"""Arabic text normalization for Abjad calculations. Pure functions, no I/O."""
from __future__ import annotations

import re
import unicodedata
from typing import Literal

# ── Character classes ───────────────────────────────────────────────

# Harakat and tanwin, Quranic annotation signs, Uthmani marks, tatweel.
# U+060C (Arabic comma) is left to the punctuation pass.
_MARKS_RE = re.compile(
    "[\u064B-\u065F\u0610-\u061A\u06D6-\u06ED"
    "\u0600-\u0603\u0606-\u060B\u060D-\u060F\u0640]"
)
_DAGGER_ALEF = "\u0670"
_LAM_ALEF_RE = re.compile("[\uFEF5-\uFEFC]")
_INVISIBLE_RE = re.compile("[\u200B-\u200F\uFEFF]")
_WHITESPACE_RE = re.compile(r"\s+")

_ARABIC_RE = re.compile("[\u0600-\u06FF]")
_LATIN_RE = re.compile("[A-Za-z]")

# Hamza-bearing alif forms, alif maqsura and Persian letter shapes.
_LETTER_VARIANTS = str.maketrans({
    "أ": "ا",
    "إ": "ا",
    "آ": "ا",
    "ٱ": "ا",
    "ى": "ي",
    "ی": "ي",  # Persian yeh
    "ک": "ك",  # Persian keheh
})

# Extra folding for Divine Name lookup only. Applied to the raw text, before
# the standard pass drops hamza seats.
_DHIKR_VARIANTS = str.maketrans({
    "ة": "ه",
    "ؤ": "و",
    "ئ": "ي",
})

BASE_LETTERS: frozenset[str] = frozenset("ابجدهوزحطيكلمنسعفصقرشتثخذضظغ")
# Base letters plus ta marbuta, the only letters that survive ``normalize``.
CANONICAL_LETTERS: frozenset[str] = BASE_LETTERS | {"ة"}

_YA_PREFIX = "يا"
_AL_PREFIX = "ال"
ALLAH = "الله"

Language = Literal["arabic", "latin", "mixed"]


# ── Standard normalization ──────────────────────────────────────────

def _is_punctuation(ch: str) -> bool:
    # Unicode categories P*, S* and N* cover ASCII and Arabic punctuation, symbols and digits.
    return unicodedata.category(ch)[0] in "PSN"


def _keep_char(ch: str, keep_punctuation: bool) -> bool:
    if ch in CANONICAL_LETTERS or ch.isspace():
        return True
    return keep_punctuation and _is_punctuation(ch)


def normalize(
    text: str | None,
    *,
    remove_vowels: bool = True,
    ignore_punctuation: bool = True,
    ignore_spaces: bool = True,
) -> str:
    """Canonicalize Arabic text so that letter values can be looked up directly.

    Diacritics, Quranic marks and tatweel are always removed. ``remove_vowels``
    only controls the superscript alif: dropped when true, written out as a
    full alif when false. Only canonical Arabic letters survive: hamza
    (ء ؤ ئ), Latin letters and other scripts are dropped, so spellings that
    differ only in the hamza seat compare equal.
    """
    if not text:
        return ""
    result = unicodedata.normalize("NFC", text)
    result = _LAM_ALEF_RE.sub("لا", result)
    result = _INVISIBLE_RE.sub("", result)
    result = _MARKS_RE.sub("", result)
    result = result.replace(_DAGGER_ALEF, "" if remove_vowels else "ا")
    result = result.translate(_LETTER_VARIANTS)
    keep_punctuation = not ignore_punctuation
    result = "".join(ch for ch in result if _keep_char(ch, keep_punctuation))
    if ignore_spaces:
        return _WHITESPACE_RE.sub("", result)
    return _WHITESPACE_RE.sub(" ", result).strip()


# ── Strict variant for Divine Names ─────────────────────────────────

def _strip_prefix(text: str) -> str:
    if text.startswith(_YA_PREFIX) and len(text) > len(_YA_PREFIX):
        return text[len(_YA_PREFIX):]
    # At least two letters must remain, so الإله reads as اله rather than ه.
    if text != ALLAH and text.startswith(_AL_PREFIX) and len(text) > len(_AL_PREFIX) + 1:
        return text[len(_AL_PREFIX):]
    return text


def normalize_dhikr(text: str | None) -> str:
    """Strict normalization used to match a recited Divine Name against the table.

    Folds ة, ؤ and ئ, keeps only the 28 base letters, then drops leading
    vocative ``يا`` and article ``ال`` prefixes until none is left
    (``الله`` stays intact). The result is a fixed point: normalizing it
    again returns it unchanged.
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFC", text).translate(_DHIKR_VARIANTS)
    result = "".join(ch for ch in normalize(folded) if ch in BASE_LETTERS)
    while True:
        stripped = _strip_prefix(result)
        if stripped == result:
            return result
        result = stripped


# ── Script detection ────────────────────────────────────────────────

def contains_arabic(text: str) -> bool:
    return bool(_ARABIC_RE.search(text or ""))


def contains_latin(text: str) -> bool:
    return bool(_LATIN_RE.search(text or ""))


def detect_language(raw: str) -> Language:
    """Classify raw input by script; text with neither script counts as latin."""
    has_arabic = contains_arabic(raw)
    has_latin = contains_latin(raw)
    if has_arabic and has_latin:
        return "mixed"
    if has_arabic:
        return "arabic"
    return "latin"
