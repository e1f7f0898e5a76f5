"""Calculation orchestrator: resolve input, normalize, compute, route to one insight adapter."""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from . import insight_adapters
from .abjad_engine import CoreResults, compute_core, get_value_map
from .elemental_analytics import ElementalAnalytics, compute_analytics
from .normalization import detect_language, normalize, normalize_dhikr
from .quran_provider import (
    fetch_ayah_text_for_calculation,
    should_strip_basmalah,
    strip_leading_basmalah,
)
from .reference_data import get_divine_name, get_surah
from .schemas import (
    DhikrRequest,
    EnhancedCalculationResult,
    GeneralRequest,
    InputMetadata,
    LineageRequest,
    NameRequest,
    PhraseRequest,
    QuranRequest,
)

logger = logging.getLogger("asrar.calculator")

AyahFetcher = Callable[[int, int], Awaitable[str]]

DHIKR_PREFIX_NOTE = "Calculated without ال/يا prefixes"
DHIKR_EXTRACTION_WARNING = "Could not extract Divine Name from input"


class EmptySourceTextError(ValueError):
    """No usable text could be resolved from the request."""

    code = "EMPTY_SOURCE_TEXT"

    def __init__(self, request_type: str):
        self.request_type = request_type
        super().__init__(f"{self.code}: no source text for {request_type} calculation")


@dataclass
class ResolvedSource:
    raw: str
    source_meta: dict[str, Any] = field(default_factory=dict)
    divine_name_arabic: str | None = None


def _first_text(*candidates: str | None) -> str:
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate
    return ""


# ── Input resolution ────────────────────────────────────────────────

async def _resolve_quran(request: QuranRequest, fetch_ayah_text: AyahFetcher) -> ResolvedSource:
    surah, ayah = request.surah_number, request.ayah_number
    meta: dict[str, Any] = {"surah_number": surah, "ayah_number": ayah}
    if surah is not None:
        found = get_surah(surah)
        meta["surah_name"] = found.transliteration if found else None

    text = _first_text(request.pasted_ayah_text, request.arabic_input)
    if text:
        if surah is not None and ayah is not None and should_strip_basmalah(surah, ayah):
            text = strip_leading_basmalah(text)
    elif surah is not None and ayah is not None:
        try:
            text = await fetch_ayah_text(surah, ayah)
        except Exception:
            logger.exception("Ayah fetch failed | surah=%s | ayah=%s", surah, ayah)
            text = ""
    meta["ayah_text"] = text or None
    return ResolvedSource(raw=text, source_meta=meta)


def _resolve_dhikr(request: DhikrRequest) -> ResolvedSource:
    if request.divine_name_id is not None:
        name = get_divine_name(request.divine_name_id)
        if name is not None:
            return ResolvedSource(
                raw=name.arabic,
                source_meta={
                    "divine_name_number": name.number,
                    "divine_name": name.transliteration,
                    "divine_name_arabic": name.arabic,
                },
                divine_name_arabic=name.arabic,
            )
    text = _first_text(request.arabic_input, request.dhikr_text)
    return ResolvedSource(raw=text, divine_name_arabic=text or None)


async def resolve_source_text(request: Any, fetch_ayah_text: AyahFetcher) -> ResolvedSource:
    if isinstance(request, LineageRequest):
        your_name = (request.your_name or "").strip()
        mother_name = (request.mother_name or "").strip()
        father_name = (request.father_name or "").strip()
        meta = {"your_name": your_name, "mother_name": mother_name}
        if father_name:
            meta["father_name"] = father_name
        return ResolvedSource(raw=f"{your_name} {mother_name}", source_meta=meta)
    if isinstance(request, QuranRequest):
        return await _resolve_quran(request, fetch_ayah_text)
    if isinstance(request, DhikrRequest):
        return _resolve_dhikr(request)
    if isinstance(request, (NameRequest, PhraseRequest, GeneralRequest)):
        return ResolvedSource(raw=_first_text(request.arabic_input, request.latin_input))
    raise TypeError(f"Unsupported calculation request: {type(request).__name__}")


# ── Routing ─────────────────────────────────────────────────────────

def _route_insights(
    request: Any,
    core: CoreResults,
    analytics: ElementalAnalytics,
    normalized: str,
    source: ResolvedSource,
    normalize_options: dict[str, bool],
) -> dict[str, Any]:
    system = request.system
    if isinstance(request, NameRequest):
        return {"name_insights": insight_adapters.compute_name_insights(core, analytics, system)}
    if isinstance(request, LineageRequest):
        value_map = get_value_map(system)
        meta = source.source_meta

        def _name_core(text: str) -> CoreResults:
            return compute_core(normalize(text, **normalize_options), value_map)

        father = meta.get("father_name")
        return {
            "lineage_insights": insight_adapters.compute_lineage_insights(
                your_core=_name_core(meta["your_name"]),
                mother_core=_name_core(meta["mother_name"]),
                combined_core=core,
                father_core=_name_core(father) if father else None,
            )
        }
    if isinstance(request, PhraseRequest):
        return {"phrase_insights": insight_adapters.compute_phrase_insights(core, analytics, normalized)}
    if isinstance(request, QuranRequest):
        return {
            "quran_insights": insight_adapters.compute_quran_insights(
                core,
                ayah_text=source.raw,
                surah_number=request.surah_number,
                ayah_number=request.ayah_number,
            )
        }
    if isinstance(request, DhikrRequest):
        return {
            "dhikr_insights": insight_adapters.compute_dhikr_insights(
                core, source.divine_name_arabic, system
            )
        }
    return {"general_insights": insight_adapters.compute_general_insights(core, analytics)}


# ── Main entry point ────────────────────────────────────────────────

async def calculate(
    request: Any,
    *,
    fetch_ayah_text: AyahFetcher | None = None,
) -> EnhancedCalculationResult:
    """Run one calculation end to end. Raises EmptySourceTextError when there is no text.

    The only awaited step is the verse fetch for Qur'an references without pasted text.
    The result is returned, never persisted here.
    """
    source = await resolve_source_text(request, fetch_ayah_text or fetch_ayah_text_for_calculation)
    if not source.raw.strip():
        raise EmptySourceTextError(request.type)

    normalize_options = {
        "remove_vowels": request.remove_vowels,
        "ignore_punctuation": request.ignore_punctuation,
        "ignore_spaces": request.ignore_spaces,
    }
    standard = normalize(source.raw, **normalize_options)
    normalized = standard
    calculated_from = calculation_note = warning = None

    if isinstance(request, DhikrRequest):
        strict = normalize_dhikr(source.raw)
        if strict:
            normalized = strict
            if strict != standard:
                calculation_note = DHIKR_PREFIX_NOTE
        else:
            warning = DHIKR_EXTRACTION_WARNING
        calculated_from = normalized

    core = compute_core(normalized, request.system)
    analytics = compute_analytics(normalized, request.system)
    language = detect_language(source.raw)

    logger.info(
        "CALC_INPUT | type=%s | system=%s | lang=%s | normalized_len=%s | kabir=%s",
        request.type,
        request.system,
        language,
        len(normalized),
        core.kabir,
    )

    return EnhancedCalculationResult(
        id=uuid.uuid4().hex,
        timestamp=int(time.time() * 1000),
        type=request.type,
        system=request.system,
        input=InputMetadata(
            raw=source.raw,
            normalized=normalized,
            language_detected=language,
            calculated_from=calculated_from,
            calculation_note=calculation_note,
            warning=warning,
            source_meta=source.source_meta,
        ),
        core=core.to_dict(),
        analytics=analytics.to_dict(),
        **_route_insights(request, core, analytics, normalized, source, normalize_options),
    )
