"""ARQ reflection task."""
import asyncio
import json
from unittest.mock import AsyncMock

from asrar import worker
from asrar.worker import ARQ_TASK_TTL, WorkerSettings, task_generate_reflection

CONTEXT = {"type": "name", "kabir": 92, "saghir": 2, "element": "water", "burj_name": "Scorpio"}


def _ctx():
    redis = AsyncMock()
    return {"job_id": "job-1", "redis": redis}, redis


def test_task_stores_llm_reflection(monkeypatch):
    reflection = {"summary": "s", "element_reflection": "e", "number_reflection": "n", "practice": "p"}
    monkeypatch.setattr(worker, "interpret_reflection_async", AsyncMock(return_value=reflection))
    ctx, redis = _ctx()

    result = asyncio.run(task_generate_reflection(ctx, result_id="r1", context=CONTEXT))

    assert result["source"] == "llm"
    assert result["reflection"] == reflection
    key, ttl, blob = redis.setex.await_args.args
    assert key == "arq_task:job-1"
    assert ttl == ARQ_TASK_TTL
    stored = json.loads(blob)
    assert stored["status"] == "done"
    assert stored["result"]["result_id"] == "r1"


def test_task_falls_back_when_llm_fails(monkeypatch):
    monkeypatch.setattr(worker, "interpret_reflection_async", AsyncMock(return_value=None))
    ctx, redis = _ctx()

    result = asyncio.run(task_generate_reflection(ctx, result_id="r2", context=CONTEXT))

    assert result["source"] == "fallback"
    assert set(result["reflection"]) == {"summary", "element_reflection", "number_reflection", "practice"}
    redis.setex.assert_awaited_once()


def test_worker_settings():
    assert task_generate_reflection in WorkerSettings.functions
    assert WorkerSettings.max_tries == 1
