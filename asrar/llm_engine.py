"""Reflection texts for finished calculations, generated through OpenRouter.

The numbers are computed before this module is involved; the model only turns
them into a short contemplative reading. Every failure path returns None so
the worker can fall back to static text.
"""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

import httpx

from .config import settings
from .insight_adapters import DEFAULT_ARCHETYPE, ELEMENT_GUIDANCE, NAME_ARCHETYPES

logger = logging.getLogger("asrar.llm")

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

REFLECTION_KEYS = ("summary", "element_reflection", "number_reflection", "practice")
MIN_REFLECTION_KEYS = 3

INSTRUCTION_PREFIX = (
    "You are a knowledgeable guide to ʿIlm al-Ḥurūf (the science of letters) and Abjad numerology. "
    "Write in plain English, without markdown, without disclaimers, without mentioning AI. "
    "Treat the numbers as contemplative symbols, never as predictions."
)

# Shared async HTTP client for OpenRouter
_openrouter_client: httpx.AsyncClient | None = None


def _get_openrouter_client() -> httpx.AsyncClient:
    global _openrouter_client
    if _openrouter_client is None or _openrouter_client.is_closed:
        _openrouter_client = httpx.AsyncClient(timeout=settings.openrouter_timeout_seconds)
    return _openrouter_client


def _sanitize_user_input(text: str, max_length: int = 500) -> str:
    """Strip control characters and cap length before the text reaches a prompt."""
    return _CONTROL_CHARS_RE.sub("", text)[:max_length]


def _configured_models() -> list[str]:
    # OPENROUTER_MODEL may hold a comma-separated fallback chain.
    raw = (settings.openrouter_model or "").replace("\n", ",")
    return [model.strip() for model in raw.split(",") if model.strip()]


def llm_provider_label() -> str | None:
    models = _configured_models()
    return f"{settings.llm_provider}:{models[0]}" if models else None


# ── OpenRouter transport ────────────────────────────────────────────

def _extract_openrouter_text_response(data: Any) -> str | None:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, list):
        # Some providers return content parts instead of a plain string.
        content = "\n".join(
            part["text"].strip()
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"].strip()
        )
    if isinstance(content, str) and content.strip():
        return content.strip()
    return None


async def _chat_completion(model: str, prompt: str, temperature: float, max_tokens: int) -> str | None:
    url = f"{settings.openrouter_base_url.rstrip('/')}/chat/completions"
    payload = {
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": {"type": "json_object"},
        "messages": [
            {"role": "system", "content": INSTRUCTION_PREFIX},
            {"role": "user", "content": prompt},
        ],
    }
    headers = {"Authorization": f"Bearer {settings.openrouter_api_key}"}
    try:
        response = await _get_openrouter_client().post(url, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.TimeoutException:
        logger.warning("OpenRouter timeout | model=%s | timeout=%.0fs", model, settings.openrouter_timeout_seconds)
        return None
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "OpenRouter HTTP error | status=%s | model=%s | body=%s",
            exc.response.status_code,
            model,
            exc.response.text[:300],
        )
        return None
    except httpx.HTTPError as exc:
        logger.warning("OpenRouter request failed | model=%s | err=%s", model, exc)
        return None

    text = _extract_openrouter_text_response(response.json())
    if not text:
        logger.warning("OpenRouter empty response | model=%s", model)
    return text


async def _request_llm_text_async(prompt: str, temperature: float, max_tokens: int) -> str | None:
    """First non-empty answer along the configured model chain."""
    provider = settings.llm_provider.lower().strip()
    if provider != "openrouter":
        logger.warning("Unsupported llm_provider=%s, reflection disabled", provider)
        return None
    if not settings.openrouter_api_key:
        logger.error("OpenRouter API key not configured")
        return None
    models = _configured_models()
    if not models:
        logger.error("OpenRouter model is not configured")
        return None

    started_at = time.monotonic()
    for model in models:
        text = await _chat_completion(model, prompt, temperature, max_tokens)
        if text:
            logger.info("LLM success | model=%s | time=%.2fs", model, time.monotonic() - started_at)
            return text
    logger.error("LLM FAILED | models=%s | time=%.2fs", ",".join(models), time.monotonic() - started_at)
    return None


def _extract_json_dict(text: str) -> dict[str, Any] | None:
    """Parse a JSON object out of a model answer, tolerating code fences and chatter."""
    if not text:
        return None
    stripped = text.strip()
    candidates = [stripped, _CODE_FENCE_RE.sub("", stripped)]
    match = _JSON_OBJECT_RE.search(stripped)
    if match:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(payload, dict):
            return payload
    return None


# ── Reflection ──────────────────────────────────────────────────────

def reflection_context(result: dict[str, Any]) -> dict[str, Any]:
    """Stable numeric inputs for the narrative service, taken from a result record.

    The same record always yields the same context.
    """
    core = result.get("core") or {}
    analytics = result.get("analytics") or {}
    raw = (result.get("input") or {}).get("raw") or ""
    return {
        "type": result.get("type"),
        "system": result.get("system"),
        "kabir": core.get("kabir"),
        "saghir": core.get("saghir"),
        "element": core.get("element"),
        "burj": core.get("burj"),
        "burj_name": core.get("burj_name"),
        "dominant_element": analytics.get("dominant_element"),
        "balance_score": analytics.get("balance_score"),
        "text_preview": _sanitize_user_input(raw, max_length=200),
    }


def fallback_reflection(context: dict[str, Any]) -> dict[str, str]:
    element = context.get("element") or "water"
    saghir = context.get("saghir") or 0
    archetype = NAME_ARCHETYPES.get(saghir, DEFAULT_ARCHETYPE)
    return {
        "summary": (
            f"The total {context.get('kabir')} reduces to {saghir}, the number of {archetype}, "
            f"under the sign of {context.get('burj_name')}."
        ),
        "element_reflection": ELEMENT_GUIDANCE.get(element, ELEMENT_GUIDANCE["water"]),
        "number_reflection": f"Sit with the number {saghir} and notice where it already appears in your days.",
        "practice": "Choose one Divine Name that speaks to you and repeat it 33 times after Fajr.",
    }


async def interpret_reflection_async(context: dict[str, Any]) -> dict[str, str] | None:
    """Short reflective reading of a calculation.

    Returns a dict with keys summary, element_reflection, number_reflection, practice,
    or None if the LLM call fails (caller uses the static fallback).
    """
    prompt = (
        "Return STRICTLY a JSON object with 4 keys: "
        "summary, element_reflection, number_reflection, practice.\n"
        "Each value is 2-3 sentences. No extra keys, no surrounding text.\n\n"
        f"Calculation type: {context.get('type')}\n"
        f"Abjad system: {context.get('system')}\n"
        f"Text: {context.get('text_preview')}\n"
        f"Kabir (grand total): {context.get('kabir')}\n"
        f"Saghir (digital root): {context.get('saghir')}\n"
        f"Element (total mod 4): {context.get('element')}\n"
        f"Burj: {context.get('burj')} ({context.get('burj_name')})\n"
        f"Dominant letter element: {context.get('dominant_element')}\n"
        f"Elemental balance score: {context.get('balance_score')}/100\n"
    )

    raw = await _request_llm_text_async(prompt=prompt, temperature=0.55, max_tokens=520)
    if not raw:
        return None

    payload = _extract_json_dict(raw)
    if not payload:
        return None

    result: dict[str, str] = {}
    for key in REFLECTION_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            result[key] = value.strip()

    return result if len(result) >= MIN_REFLECTION_KEYS else None
