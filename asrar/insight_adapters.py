"""Type-specific insight read-outs built from core numbers and analytics.

Each adapter is a pure function returning a plain dict; the result schema in
``schemas`` validates its shape. No new numeric algorithms live here, only
combinations of the core, analytics, burj and resonance results.
"""
from __future__ import annotations

from typing import Any

from .abjad_engine import DEFAULT_SYSTEM, AbjadSystem, CoreResults, Element, hadad_to_element
from .elemental_analytics import ElementalAnalytics
from .normalization import CANONICAL_LETTERS, normalize_dhikr
from .reference_data import get_surah, load_divine_names, quran_link
from .resonance import find_divine_names_by_value, nearest_sacred, quran_resonance

NAME_ARCHETYPES: dict[int, str] = {
    1: "The Pioneer",
    2: "The Harmonizer",
    3: "The Creator",
    4: "The Builder",
    5: "The Explorer",
    6: "The Nurturer",
    7: "The Seeker",
    8: "The Achiever",
    9: "The Sage",
}
DEFAULT_ARCHETYPE = "The Traveler"

ELEMENT_GUIDANCE: dict[Element, str] = {
    "fire": "Channel drive into purposeful action; temper haste with patience.",
    "water": "Trust intuition and mercy; guard against being carried by moods.",
    "air": "Seek knowledge and clear speech; ground ideas in practice.",
    "earth": "Build steadily and keep commitments; stay open to change.",
}

ELEMENT_BEST_TIME: dict[Element, str] = {
    "fire": "Dawn and sunrise (Fajr time) - when fire energy is strongest",
    "water": "Night and before sleep (Isha time) - when water energy flows",
    "air": "Morning and afternoon (Dhuhr to Asr) - when air circulates",
    "earth": "Maghrib and grounding moments - when earth stabilizes",
}

ELEMENT_POWER_DAY: dict[Element, str] = {
    "fire": "Tuesday (Mars) and Sunday (Sun)",
    "water": "Monday (Moon) and Friday (Venus)",
    "air": "Wednesday (Mercury)",
    "earth": "Thursday (Jupiter) and Saturday (Saturn)",
}

NAME_MATCH_TOLERANCE = 50
NAME_MATCH_LIMIT = 3
PHRASE_SACRED_WINDOW = 10
DHIKR_NEAR_WINDOW = 10
MAX_VALUE_BASED_COUNT = 313
TRADITIONAL_DHIKR_COUNTS = [33, 99, 100]


# ── Name ────────────────────────────────────────────────────────────

def compute_name_insights(
    core: CoreResults,
    analytics: ElementalAnalytics,
    system: AbjadSystem = DEFAULT_SYSTEM,
) -> dict[str, Any]:
    matches = sorted(
        find_divine_names_by_value(core.kabir, tolerance=NAME_MATCH_TOLERANCE, system=system),
        key=lambda n: (abs(n.value(system) - core.kabir), n.number),
    )[:NAME_MATCH_LIMIT]

    counts = [33, 99]
    if core.saghir:
        counts.append(core.saghir)
    if 0 < core.kabir <= 1000 and core.kabir != core.saghir:
        counts.append(core.kabir)

    verse = quran_resonance(core.kabir)
    return {
        "archetype_title": NAME_ARCHETYPES.get(core.saghir, DEFAULT_ARCHETYPE),
        "spiritual_guidance": ELEMENT_GUIDANCE[core.element],
        "dominant_letter_element": analytics.dominant_element,
        "divine_name_connection": [
            {
                "number": n.number,
                "name": n.transliteration,
                "arabic": n.arabic,
                "value": n.value(system),
                "distance": abs(n.value(system) - core.kabir),
            }
            for n in matches
        ],
        "recommended_dhikr_count": counts,
        "best_time_window": ELEMENT_BEST_TIME[core.element],
        "power_day": ELEMENT_POWER_DAY[core.element],
        "quran_resonance": verse.to_dict() if verse else None,
    }


# ── Lineage ─────────────────────────────────────────────────────────

_SUPPORT, _NEUTRAL, _TENSION = "support", "neutral", "tension"

_ELEMENT_INTERACTIONS: dict[frozenset[str], tuple[str, str]] = {
    frozenset({"fire"}): (_SUPPORT, "Double fire creates powerful transformation energy"),
    frozenset({"fire", "air"}): (_SUPPORT, "Fire and air amplify each other - inspiration flows"),
    frozenset({"fire", "water"}): (_TENSION, "Fire and water create dynamic tension - balance needed"),
    frozenset({"fire", "earth"}): (_NEUTRAL, "Fire warms earth - grounded passion"),
    frozenset({"water"}): (_SUPPORT, "Double water deepens intuition and emotional wisdom"),
    frozenset({"water", "air"}): (_NEUTRAL, "Water and air create mist - gentle flow"),
    frozenset({"water", "earth"}): (_SUPPORT, "Water nourishes earth - fertile growth"),
    frozenset({"air"}): (_SUPPORT, "Double air enhances communication and clarity"),
    frozenset({"air", "earth"}): (_NEUTRAL, "Air over earth - ideas meet reality"),
    frozenset({"earth"}): (_SUPPORT, "Double earth provides strong foundation and stability"),
}


def element_interaction(first: Element, second: Element) -> tuple[str, str]:
    return _ELEMENT_INTERACTIONS.get(
        frozenset({first, second}), (_NEUTRAL, "Balanced elemental interaction")
    )


def compute_lineage_insights(
    your_core: CoreResults,
    mother_core: CoreResults,
    combined_core: CoreResults,
    father_core: CoreResults | None = None,
) -> dict[str, Any]:
    """Your name against your mother's; the father's name is reported, not summed."""
    harmony, description = element_interaction(your_core.element, mother_core.element)
    best_time = ELEMENT_BEST_TIME[combined_core.element]
    if combined_core.saghir:
        dhikr_step = f"Practice dhikr {combined_core.saghir} or 99 times"
    else:
        dhikr_step = "Practice dhikr 99 times"
    return {
        "your_name_value": your_core.kabir,
        "mother_name_value": mother_core.kabir,
        "father_name_value": father_core.kabir if father_core else None,
        "your_element": your_core.element,
        "mother_element": mother_core.element,
        "combined_total": combined_core.kabir,
        "combined_element": combined_core.element,
        "combined_saghir": combined_core.saghir,
        "family_pattern": {
            "harmony": harmony,
            "element_interaction": description,
        },
        "key_takeaways": [
            f"Your lineage number is {combined_core.kabir}, rooted in {combined_core.element} energy",
            f"Elemental relationship: {description}",
            f"Combined spiritual root (Ṣaghīr): {combined_core.saghir}",
        ],
        "practice_plan": {
            "do_list": [
                dhikr_step,
                f"Reflect on family patterns during {best_time}",
                "Honor maternal lineage through duʿā and gratitude",
            ],
            "avoid_list": [
                "Neglecting family spiritual connection",
                "Ignoring ancestral wisdom",
            ],
            "best_time": best_time,
        },
    }


# ── Phrase ──────────────────────────────────────────────────────────

def center_letter(normalized: str) -> str:
    letters = [ch for ch in normalized if ch in CANONICAL_LETTERS]
    if not letters:
        return ""
    return letters[len(letters) // 2]


def compute_phrase_insights(
    core: CoreResults,
    analytics: ElementalAnalytics,
    normalized: str,
) -> dict[str, Any]:
    repeated = [f for f in analytics.letter_freq if f.count > 1][:3]
    sacred = nearest_sacred(core.kabir)
    return {
        "theme_detection": {
            "dominant_element": analytics.dominant_element,
            "repeated_letters": [{"letter": f.letter, "count": f.count} for f in repeated],
            "sacred_number_near": sacred.nearest if sacred.distance <= PHRASE_SACRED_WINDOW else None,
        },
        "structure_insights": {
            "top_repeated_letters": [f.to_dict() for f in repeated],
            "center_letter": center_letter(normalized),
            "center_significance": "The center represents the heart of the message",
        },
        "reflection_prompts": [
            "What feeling does this phrase evoke in your heart?",
            "How does this phrase connect to your current spiritual journey?",
            "What action or change does this phrase inspire in you?",
        ],
    }


# ── Qur'an ──────────────────────────────────────────────────────────

def compute_quran_insights(
    core: CoreResults,
    ayah_text: str | None = None,
    surah_number: int | None = None,
    ayah_number: int | None = None,
) -> dict[str, Any]:
    sacred = nearest_sacred(core.kabir)
    if sacred.is_exact:
        description = f"Perfect match: this verse's Kabīr ({core.kabir}) is a sacred number"
    else:
        description = (
            f"Verse Kabīr is {core.kabir}, nearest sacred number is "
            f"{sacred.nearest} (distance: {sacred.distance})"
        )
    surah = get_surah(surah_number) if surah_number else None
    return {
        "surah_name": surah.transliteration if surah else None,
        "surah_arabic": surah.arabic if surah else None,
        "ayah_number": ayah_number,
        "arabic_text": ayah_text,
        "resonance_link": {
            "dominant_element": core.element,
            "sacred_number": sacred.nearest,
            "distance": sacred.distance,
            "kabir": core.kabir,
            "is_calculated": True,
            "meaning": sacred.description,
            "description": description,
        },
        "reflection_block": {
            "prompt": (
                "Read this ayah slowly, with presence. What word or phrase stands out "
                "to you? Write 1-2 words that resonate."
            ),
        },
        "quran_com_link": quran_link(surah_number, ayah_number) if surah and ayah_number else None,
    }


# ── Dhikr ───────────────────────────────────────────────────────────

def _lookup_selected_name(
    divine_name_arabic: str | None,
    core: CoreResults,
    system: AbjadSystem,
) -> dict[str, Any] | None:
    if not divine_name_arabic:
        return None
    wanted = normalize_dhikr(divine_name_arabic)
    name = next((n for n in load_divine_names() if normalize_dhikr(n.arabic) == wanted), None)

    value = name.value(system) if name else core.kabir
    distance = abs(value - core.kabir)
    if distance == 0:
        strength = "exact"
    elif distance <= DHIKR_NEAR_WINDOW:
        strength = "near"
    else:
        strength = "distant"
    return {
        "number": name.number if name else None,
        "arabic": name.arabic if name else divine_name_arabic,
        "transliteration": name.transliteration if name else "",
        "meaning": name.meaning if name else "",
        "abjad_value": value,
        "match_strength": strength,
    }


def compute_dhikr_insights(
    core: CoreResults,
    divine_name_arabic: str | None = None,
    system: AbjadSystem = DEFAULT_SYSTEM,
) -> dict[str, Any]:
    return {
        "selected_divine_name": _lookup_selected_name(divine_name_arabic, core, system),
        "suggested_counts": {
            "value_based": core.saghir if 1 <= core.saghir <= MAX_VALUE_BASED_COUNT else None,
            "traditional": list(TRADITIONAL_DHIKR_COUNTS),
        },
        "timing": {
            "power_day": ELEMENT_POWER_DAY[core.element],
            "after_salah": ["After Fajr", "After Maghrib", "Before sleep"],
        },
        "practice_guidance": {
            "preparation": ["Make wuḍūʾ", "Face the qibla", "Begin with ṣalawāt on the Prophet ﷺ"],
            "adab": ["With presence and humility", "Count on fingers or tasbīḥ", "End with duʿāʾ"],
        },
    }


# ── General ─────────────────────────────────────────────────────────

def compute_general_insights(core: CoreResults, analytics: ElementalAnalytics) -> dict[str, Any]:
    sacred = nearest_sacred(core.kabir)
    dominant = analytics.dominant_element
    return {
        "letter_frequency_chart": [f.to_dict() for f in analytics.letter_freq],
        "elemental_balance": {
            "composition": dict(analytics.element_percents),
            "balance_score": analytics.balance_score,
            "advice": f"Your dominant element is {dominant}. {ELEMENT_GUIDANCE[dominant]}",
        },
        "sacred_resonance": {
            "nearest": sacred.nearest,
            "meaning": sacred.description,
            "distance": sacred.distance,
            "factors": list(sacred.factors),
        },
        "advanced_methods": {
            "wusta": {"value": core.wusta, "element": hadad_to_element(core.wusta)},
            "kamal": {"value": core.kamal, "element": hadad_to_element(core.kamal)},
            "bast": {"value": core.bast, "element": hadad_to_element(core.bast)},
            "sirr": {"value": core.sirr, "element": hadad_to_element(core.sirr)},
        },
    }
