"""Reflection context, fallback and LLM response parsing."""
import asyncio
import json
from unittest.mock import AsyncMock

from asrar import llm_engine
from asrar.calculator_engine import calculate
from asrar.config import settings
from asrar.llm_engine import (
    REFLECTION_KEYS,
    _extract_json_dict,
    _extract_openrouter_text_response,
    _sanitize_user_input,
    fallback_reflection,
    interpret_reflection_async,
    reflection_context,
)
from asrar.schemas import parse_calculation_request


def _record():
    request = parse_calculation_request({"type": "name", "arabic_input": "محمد"})
    return asyncio.run(calculate(request)).model_dump(mode="json")


def test_reflection_context_fields():
    context = reflection_context(_record())
    assert context == {
        "type": "name",
        "system": "maghribi",
        "kabir": 92,
        "saghir": 2,
        "element": "water",
        "burj": 8,
        "burj_name": "Scorpio",
        "dominant_element": "fire",
        "balance_score": 43,
        "text_preview": "محمد",
    }


def test_reflection_context_is_deterministic():
    record = _record()
    assert reflection_context(record) == reflection_context(json.loads(json.dumps(record)))


def test_sanitize_user_input():
    assert _sanitize_user_input("a\x00b\x1fc", max_length=2) == "ab"


def test_fallback_reflection_has_all_keys():
    reflection = fallback_reflection(reflection_context(_record()))
    assert set(reflection) == set(REFLECTION_KEYS)
    assert "The Harmonizer" in reflection["summary"]


def test_extract_json_dict_variants():
    assert _extract_json_dict('{"a": 1}') == {"a": 1}
    assert _extract_json_dict('```json\n{"a": 1}\n```') == {"a": 1}
    assert _extract_json_dict('Sure! {"a": 1} hope it helps') == {"a": 1}
    assert _extract_json_dict("no json") is None


def test_extract_openrouter_text_response():
    assert _extract_openrouter_text_response({"choices": [{"message": {"content": " hi "}}]}) == "hi"
    assert _extract_openrouter_text_response({"choices": []}) is None


def test_interpret_reflection_parses_llm_json(monkeypatch):
    payload = {key: f"{key} text" for key in REFLECTION_KEYS}
    monkeypatch.setattr(llm_engine, "_request_llm_text_async", AsyncMock(return_value=json.dumps(payload)))
    assert asyncio.run(interpret_reflection_async({"kabir": 92})) == payload


def test_interpret_reflection_rejects_sparse_answer(monkeypatch):
    monkeypatch.setattr(
        llm_engine, "_request_llm_text_async", AsyncMock(return_value='{"summary": "only one"}')
    )
    assert asyncio.run(interpret_reflection_async({"kabir": 92})) is None


def test_interpret_reflection_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openrouter_api_key", None)
    assert asyncio.run(interpret_reflection_async({"kabir": 92})) is None
