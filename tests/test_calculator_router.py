"""Integration tests for the /v1/calculator router."""
import json
import logging
from unittest.mock import AsyncMock, MagicMock

from asrar.main import app

HEADERS = {"X-Device-ID": "device-12345"}
NAME_PAYLOAD = {"type": "name", "arabicInput": "محمد"}


def _mock_pool(job_id="job-123"):
    mock_job = MagicMock()
    mock_job.job_id = job_id
    mock_pool = MagicMock()
    mock_pool.enqueue_job = AsyncMock(return_value=mock_job)
    for command in ("lpush", "ltrim", "expire", "lrange", "lrem", "delete"):
        setattr(mock_pool, command, AsyncMock())
    return mock_pool


# ── calculate ────────────────────────────────────────────────────────

def test_calculate_returns_done_without_arq(client):
    resp = client.post("/v1/calculator/calculate", json=NAME_PAYLOAD)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "done"
    assert data["task_id"] is None
    result = data["result"]
    assert result["type"] == "name"
    assert result["core"]["kabir"] == 92
    assert result["name_insights"]["archetype_title"] == "The Harmonizer"
    assert result["general_insights"] is None


def test_calculate_every_type(client):
    payloads = [
        {"type": "name", "arabic_input": "علي"},
        {"type": "lineage", "your_name": "محمد", "mother_name": "فاطمة"},
        {"type": "phrase", "arabic_input": "سبحان الله"},
        {"type": "quran", "pasted_ayah_text": "قل هو الله أحد"},
        {"type": "dhikr", "divine_name_id": 30},
        {"type": "general", "arabic_input": "بسم الله الرحمن الرحيم", "system": "mashriqi"},
    ]
    for payload in payloads:
        resp = client.post("/v1/calculator/calculate", json=payload)
        assert resp.status_code == 200, payload
        result = resp.json()["result"]
        insight_key = f"{payload['type']}_insights"
        populated = [k for k in result if k.endswith("_insights") and result[k] is not None]
        assert populated == [insight_key]


def test_calculate_bismillah_mashriqi(client):
    resp = client.post(
        "/v1/calculator/calculate",
        json={"type": "general", "arabic_input": "بِسْمِ اللَّهِ الرَّحْمَٰنِ الرَّحِيمِ", "system": "mashriqi"},
    )
    assert resp.json()["result"]["core"]["kabir"] == 786


def test_calculate_empty_text_returns_422_code(client):
    resp = client.post("/v1/calculator/calculate", json={"type": "phrase", "arabic_input": ""})
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"code": "EMPTY_SOURCE_TEXT", "type": "phrase"}


def test_calculate_unknown_type_rejected(client):
    resp = client.post("/v1/calculator/calculate", json={"type": "tarot", "arabic_input": "محمد"})
    assert resp.status_code == 422


def test_calculate_invalid_ayah_rejected(client):
    resp = client.post(
        "/v1/calculator/calculate",
        json={"type": "quran", "surah_number": 1, "ayah_number": 99},
    )
    assert resp.status_code == 422


def test_calculate_invalid_device_id(client):
    resp = client.post("/v1/calculator/calculate", headers={"X-Device-ID": "bad id!"}, json=NAME_PAYLOAD)
    assert resp.status_code == 400


def test_calculate_with_arq_returns_pending_and_saves_history(client):
    mock_pool = _mock_pool("test-job-123")
    app.state.arq_pool = mock_pool
    try:
        resp = client.post("/v1/calculator/calculate", headers=HEADERS, json=NAME_PAYLOAD)
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "pending"
        assert data["task_id"] == "test-job-123"

        args, kwargs = mock_pool.enqueue_job.await_args
        assert args == ("task_generate_reflection",)
        assert kwargs["result_id"] == data["result"]["id"]
        assert kwargs["context"]["kabir"] == 92

        key, blob = mock_pool.lpush.await_args.args
        assert key == "calc_history:device-12345"
        assert json.loads(blob)["id"] == data["result"]["id"]
    finally:
        app.state.arq_pool = None


def test_calculate_without_device_skips_history(client):
    mock_pool = _mock_pool()
    app.state.arq_pool = mock_pool
    try:
        resp = client.post("/v1/calculator/calculate", json=NAME_PAYLOAD)
        assert resp.status_code == 200
        mock_pool.lpush.assert_not_awaited()
    finally:
        app.state.arq_pool = None


# ── history ──────────────────────────────────────────────────────────

def test_history_requires_device(client):
    assert client.get("/v1/calculator/history").status_code == 401
    assert client.delete("/v1/calculator/history").status_code == 401


def test_history_empty_without_redis(client):
    resp = client.get("/v1/calculator/history", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0}


def test_history_lists_stored_records(client):
    mock_pool = _mock_pool()
    mock_pool.lrange = AsyncMock(return_value=[json.dumps({"id": "b"}), json.dumps({"id": "a"})])
    app.state.arq_pool = mock_pool
    try:
        resp = client.get("/v1/calculator/history", headers=HEADERS)
        assert resp.json() == {"items": [{"id": "b"}, {"id": "a"}], "total": 2}
    finally:
        app.state.arq_pool = None


def test_delete_history_item(client):
    stored = json.dumps({"id": "abc"})
    mock_pool = _mock_pool()
    mock_pool.lrange = AsyncMock(return_value=[stored])
    mock_pool.lrem = AsyncMock(return_value=1)
    app.state.arq_pool = mock_pool
    try:
        resp = client.delete("/v1/calculator/history/abc", headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "removed": 1}
        mock_pool.lrem.assert_awaited_once_with("calc_history:device-12345", 0, stored)

        assert client.delete("/v1/calculator/history/missing", headers=HEADERS).status_code == 404
    finally:
        app.state.arq_pool = None


def test_clear_history(client):
    mock_pool = _mock_pool()
    mock_pool.delete = AsyncMock(return_value=1)
    app.state.arq_pool = mock_pool
    try:
        resp = client.delete("/v1/calculator/history", headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json()["removed"] == 1
    finally:
        app.state.arq_pool = None


def test_internal_api_key_enforced_when_configured(client, monkeypatch):
    from asrar.config import settings

    monkeypatch.setattr(settings, "internal_api_key", "secret")
    assert client.get("/v1/calculator/history", headers=HEADERS).status_code == 401
    resp = client.get("/v1/calculator/history", headers={**HEADERS, "X-Internal-API-Key": "secret"})
    assert resp.status_code == 200


def test_audit_log_records_request_type_not_user_text(client, caplog):
    with caplog.at_level(logging.INFO, logger="asrar.api"):
        resp = client.post("/v1/calculator/calculate", json=NAME_PAYLOAD)
    assert resp.status_code == 200
    audit = [r.getMessage() for r in caplog.records if r.name == "asrar.api"]
    assert any("/v1/calculator/calculate" in m and "type=name,system=-" in m for m in audit)
    assert not any("محمد" in m for m in audit)
