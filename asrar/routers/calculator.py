import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from .. import schemas
from ..calculator_engine import EmptySourceTextError, calculate
from ..dependencies import DeviceContext, device_dep, optional_device_dep
from ..history import clear_history, delete_history_item, get_history, save_result_to_history
from ..limiter import limiter
from ..llm_engine import reflection_context

router = APIRouter(prefix="/v1/calculator", tags=["calculator"])
logger = logging.getLogger("asrar.calculator")


@router.post("/calculate", response_model=schemas.CalculateResponse)
@limiter.limit("30/minute")
async def calculate_abjad(
    request: Request,
    payload: Annotated[schemas.CalculationRequestUnion, Body(discriminator="type")],
    device: DeviceContext | None = Depends(optional_device_dep),
):
    """Run the Abjad calculation immediately, then enqueue an ARQ job for a reflection text.

    The result is stored in the device history when X-Device-ID is sent.
    Returns the result plus a task_id to poll when the queue is available.
    """
    device_id = device.device_id if device else None
    logger.info(
        "Calculator request | type=%s | system=%s | device_id=%s",
        payload.type,
        payload.system,
        device_id or "-",
    )

    try:
        result = await calculate(payload)
    except EmptySourceTextError as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": exc.code, "type": exc.request_type},
        )

    record = result.model_dump(mode="json")
    arq_pool = getattr(request.app.state, "arq_pool", None)
    if device_id is not None:
        await save_result_to_history(redis=arq_pool, device_id=device_id, result=record)

    if arq_pool is not None:
        job = await arq_pool.enqueue_job(
            "task_generate_reflection",
            result_id=result.id,
            context=reflection_context(record),
        )
        logger.info("Reflection enqueued | result_id=%s | job_id=%s", result.id, job.job_id)
        return schemas.CalculateResponse(result=result, status="pending", task_id=job.job_id)

    logger.warning("ARQ unavailable, calculation without reflection | result_id=%s", result.id)
    return schemas.CalculateResponse(result=result, status="done", task_id=None)


@router.get("/history", response_model=schemas.HistoryResponse)
@limiter.limit("60/minute")
async def list_history(request: Request, device: DeviceContext = Depends(device_dep)):
    items = await get_history(getattr(request.app.state, "arq_pool", None), device.device_id)
    return schemas.HistoryResponse(items=items, total=len(items))


@router.delete("/history/{result_id}", response_model=schemas.HistoryDeleteResponse)
@limiter.limit("30/minute")
async def delete_history_entry(
    request: Request,
    result_id: str,
    device: DeviceContext = Depends(device_dep),
):
    if not result_id or len(result_id) > 64:
        raise HTTPException(status_code=400, detail="Invalid result_id")
    removed = await delete_history_item(
        getattr(request.app.state, "arq_pool", None), device.device_id, result_id
    )
    if not removed:
        raise HTTPException(status_code=404, detail="History item not found")
    return schemas.HistoryDeleteResponse(removed=removed)


@router.delete("/history", response_model=schemas.HistoryDeleteResponse)
@limiter.limit("10/minute")
async def delete_all_history(request: Request, device: DeviceContext = Depends(device_dep)):
    removed = await clear_history(getattr(request.app.state, "arq_pool", None), device.device_id)
    logger.info("History cleared | device_id=%s | removed=%s", device.device_id, removed)
    return schemas.HistoryDeleteResponse(removed=removed)
