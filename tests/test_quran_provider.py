"""Verse-text provider: Basmala handling and the HTTP fallback chain."""
import asyncio

import httpx
import pytest

from asrar import quran_provider
from asrar.quran_provider import (
    fetch_ayah_text,
    fetch_ayah_text_for_calculation,
    placeholder_ayah_text,
    should_strip_basmalah,
    starts_with_basmalah,
    strip_leading_basmalah,
)

BASMALAH_UTHMANI = "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ"


def _install_client(monkeypatch, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(quran_provider, "_quran_client", client)
    return client


# ── Basmala ──────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "surah, ayah, expected",
    [(2, 1, True), (2, 2, False), (1, 1, False), (9, 1, False), (27, 30, False), (27, 1, True)],
)
def test_should_strip_basmalah(surah, ayah, expected):
    assert should_strip_basmalah(surah, ayah) is expected


def test_starts_with_basmalah_ignores_marks():
    assert starts_with_basmalah(f"{BASMALAH_UTHMANI} الٓمٓ")
    assert not starts_with_basmalah("الْحَمْدُ لِلَّهِ")


def test_strip_leading_basmalah_keeps_verse_as_written():
    assert strip_leading_basmalah(f"{BASMALAH_UTHMANI} الٓمٓ") == "الٓمٓ"
    assert strip_leading_basmalah("بسم الله الرحمن الرحيم قل هو الله أحد") == "قل هو الله أحد"


def test_strip_leading_basmalah_noop():
    assert strip_leading_basmalah("قل هو الله أحد") == "قل هو الله أحد"
    assert strip_leading_basmalah("") == ""


def test_placeholder_text():
    assert placeholder_ayah_text(2, 5) == "الآية 5 من سُورَةُ البَقَرَةِ"


# ── fetch ────────────────────────────────────────────────────────────

def test_fetch_success(monkeypatch):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"code": 200, "data": {"text": " قُلْ هُوَ ٱللَّهُ أَحَدٌ "}})

    _install_client(monkeypatch, handler)
    text = asyncio.run(fetch_ayah_text(112, 1))
    assert text == "قُلْ هُوَ ٱللَّهُ أَحَدٌ"
    assert seen[0].endswith("/ayah/112:1/quran-uthmani")


def test_fetch_http_error_falls_back(monkeypatch):
    _install_client(monkeypatch, lambda request: httpx.Response(503))
    assert asyncio.run(fetch_ayah_text(2, 5)) == placeholder_ayah_text(2, 5)


def test_fetch_bad_payload_falls_back(monkeypatch):
    _install_client(monkeypatch, lambda request: httpx.Response(200, json={"code": 404, "data": "x"}))
    assert asyncio.run(fetch_ayah_text(2, 5)) == placeholder_ayah_text(2, 5)


def test_fetch_network_error_falls_back(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    _install_client(monkeypatch, handler)
    assert asyncio.run(fetch_ayah_text(2, 5)) == placeholder_ayah_text(2, 5)


def test_fetch_for_calculation_strips_basmalah(monkeypatch):
    _install_client(
        monkeypatch,
        lambda request: httpx.Response(200, json={"code": 200, "data": {"text": f"{BASMALAH_UTHMANI} الٓمٓ"}}),
    )
    assert asyncio.run(fetch_ayah_text_for_calculation(2, 1)) == "الٓمٓ"


def test_fetch_for_calculation_keeps_fatiha_opening(monkeypatch):
    _install_client(
        monkeypatch,
        lambda request: httpx.Response(200, json={"code": 200, "data": {"text": BASMALAH_UTHMANI}}),
    )
    assert asyncio.run(fetch_ayah_text_for_calculation(1, 1)) == BASMALAH_UTHMANI
