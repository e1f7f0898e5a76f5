"""ARQ worker: reflection text generated outside the HTTP request cycle."""
from __future__ import annotations

import json
import logging
from typing import Any

from arq.connections import RedisSettings

from .config import settings
from .llm_engine import fallback_reflection, interpret_reflection_async, llm_provider_label

logger = logging.getLogger("asrar.worker")

ARQ_TASK_TTL = 600  # seconds; clients poll within this window


async def task_generate_reflection(
    ctx: dict[str, Any],
    *,
    result_id: str,
    context: dict[str, Any],
) -> dict[str, Any]:
    job_id: str = ctx["job_id"]
    redis = ctx["redis"]

    logger.info(
        "Worker: task_generate_reflection start | result_id=%s | job_id=%s | provider=%s",
        result_id,
        job_id,
        llm_provider_label(),
    )

    reflection = await interpret_reflection_async(context)
    if reflection:
        logger.info("Worker: reflection LLM success | result_id=%s | job_id=%s", result_id, job_id)
        source = "llm"
    else:
        logger.warning(
            "Worker: reflection LLM failed, using static fallback | result_id=%s | job_id=%s",
            result_id,
            job_id,
        )
        reflection = fallback_reflection(context)
        source = "fallback"

    result = {
        "result_id": result_id,
        "context": context,
        "reflection": reflection,
        "source": source,
    }

    task_key = f"arq_task:{job_id}"
    task_payload = json.dumps({"status": "done", "result": result}, ensure_ascii=False)
    await redis.setex(task_key, ARQ_TASK_TTL, task_payload)
    logger.info("Worker: task_generate_reflection done | result_id=%s | job_id=%s", result_id, job_id)
    return result


async def on_worker_startup(ctx: dict[str, Any]) -> None:
    logger.info("ARQ worker started")


async def on_worker_shutdown(ctx: dict[str, Any]) -> None:
    logger.info("ARQ worker shutting down")


class WorkerSettings:
    functions = [task_generate_reflection]
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    on_startup = on_worker_startup
    on_shutdown = on_worker_shutdown
    max_tries = 1  # LLM calls are expensive; don't retry automatically
    job_timeout = 120
