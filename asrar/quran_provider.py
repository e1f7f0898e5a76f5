"""Verse-text provider: Al-Quran Cloud API with a local placeholder fallback."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import settings
from .normalization import normalize
from .reference_data import get_surah

logger = logging.getLogger("asrar.quran")

BASMALAH_NORMALIZED = normalize("بسم الله الرحمن الرحيم")

# At-Tawbah opens without the Basmala; in Al-Fatiha it is the first verse itself.
_SURAHS_WITHOUT_BASMALAH_HEADER = frozenset({1, 9})
# An-Naml 27:30 quotes the Basmala inside the verse.
_BASMALAH_INSIDE_VERSE = (27, 30)

# Shared async HTTP client for the verse-text API
_quran_client: httpx.AsyncClient | None = None


def _get_quran_client() -> httpx.AsyncClient:
    global _quran_client
    if _quran_client is None or _quran_client.is_closed:
        _quran_client = httpx.AsyncClient(timeout=settings.quran_api_timeout_seconds)
    return _quran_client


# ── Basmala handling ────────────────────────────────────────────────

def should_strip_basmalah(surah_number: int, ayah_number: int) -> bool:
    if (surah_number, ayah_number) == _BASMALAH_INSIDE_VERSE:
        return False
    return ayah_number == 1 and surah_number not in _SURAHS_WITHOUT_BASMALAH_HEADER


def starts_with_basmalah(text: str) -> bool:
    return normalize(text).startswith(BASMALAH_NORMALIZED)


def strip_leading_basmalah(text: str) -> str:
    """Remove a leading Basmala, keeping the rest of the verse exactly as written.

    Walks the input text counting normalized letters, so vowel marks and
    Uthmani signs inside the Basmala do not shift the cut point.
    """
    if not text or not starts_with_basmalah(text):
        return text
    target = len(BASMALAH_NORMALIZED)
    consumed = 0
    cut = len(text)
    for index, ch in enumerate(text):
        consumed += len(normalize(ch))
        if consumed >= target:
            cut = index + 1
            break
    # Trailing marks of the last letter and the separating space go with it.
    while cut < len(text) and not normalize(text[cut]):
        cut += 1
    return text[cut:].strip()


# ── Provider ────────────────────────────────────────────────────────

def placeholder_ayah_text(surah_number: int, ayah_number: int) -> str:
    surah = get_surah(surah_number)
    surah_name = surah.arabic if surah else f"سورة {surah_number}"
    return f"الآية {ayah_number} من {surah_name}"


def _extract_ayah_text(payload: Any) -> str | None:
    if not isinstance(payload, dict) or payload.get("code") != 200:
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    text = data.get("text")
    if isinstance(text, str) and text.strip():
        return text.strip()
    return None


async def fetch_ayah_text(surah_number: int, ayah_number: int) -> str:
    """Arabic text of one verse. Never raises: failures yield a placeholder string."""
    base_url = settings.quran_api_base_url.rstrip("/")
    url = f"{base_url}/ayah/{surah_number}:{ayah_number}/{settings.quran_text_edition}"
    client = _get_quran_client()
    try:
        response = await client.get(url)
        response.raise_for_status()
        text = _extract_ayah_text(response.json())
        if text:
            return text
        logger.warning("Quran API empty response | surah=%s | ayah=%s", surah_number, ayah_number)
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code if exc.response is not None else -1
        logger.warning(
            "Quran API HTTP error | status=%s | surah=%s | ayah=%s", status, surah_number, ayah_number
        )
    except Exception as exc:
        logger.warning(
            "Quran API request failed | surah=%s | ayah=%s | err=%s", surah_number, ayah_number, exc
        )
    return placeholder_ayah_text(surah_number, ayah_number)


async def fetch_ayah_text_for_calculation(surah_number: int, ayah_number: int) -> str:
    text = await fetch_ayah_text(surah_number, ayah_number)
    if should_strip_basmalah(surah_number, ayah_number):
        return strip_leading_basmalah(text)
    return text
