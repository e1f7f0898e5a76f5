"""Task status endpoint for ARQ background jobs."""
import json
import logging

from fastapi import APIRouter, HTTPException, Request

from .. import schemas
from ..limiter import limiter

router = APIRouter(prefix="/v1/tasks", tags=["tasks"])
logger = logging.getLogger("asrar.tasks")


@router.get("/{task_id}", response_model=schemas.TaskStatusResponse)
@limiter.limit("120/minute")
async def get_task_status(request: Request, task_id: str):
    """Poll the status of a background reflection task."""
    if not task_id or len(task_id) > 128:
        raise HTTPException(status_code=400, detail="Invalid task_id")

    pool = getattr(request.app.state, "arq_pool", None)
    if pool is None:
        raise HTTPException(status_code=503, detail="Task queue unavailable")

    task_key = f"arq_task:{task_id}"
    try:
        raw = await pool.get(task_key)
    except Exception as exc:
        logger.warning("Redis read failed for task_key=%s: %s", task_key, exc)
        raise HTTPException(status_code=503, detail="Task queue unavailable")

    if raw is None:
        return schemas.TaskStatusResponse(status="pending")

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return schemas.TaskStatusResponse(status="failed", error="Invalid task payload")

    return schemas.TaskStatusResponse(
        status=payload.get("status", "pending"),
        result=payload.get("result"),
        error=payload.get("error"),
    )
