from contextlib import asynccontextmanager
import json
import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from arq import create_pool
from arq.connections import RedisSettings
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .limiter import limiter
from .routers import calculator, health, reference, tasks as tasks_router


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    force=True,
)
logger = logging.getLogger("asrar.api")


_AUDIT_BODY_LIMIT = 64 * 1024


def _request_summary(raw: bytes, content_type: str) -> str:
    """type/system of a calculation body; user text stays out of the access log."""
    if not raw:
        return "-"
    if "application/json" not in content_type:
        return f"<{len(raw)} bytes>"
    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return f"<invalid json; {len(raw)} bytes>"
    if not isinstance(body, dict):
        return f"<json {type(body).__name__}>"
    return f"type={body.get('type', '-')},system={body.get('system', '-')},bytes={len(raw)}"


class ApiAuditMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        request_id = request.headers.get("x-request-id") or uuid4().hex[:8]
        started_at = time.perf_counter()

        summary = "-"
        if request.method == "POST" and int(request.headers.get("content-length", 0) or 0) <= _AUDIT_BODY_LIMIT:
            summary = _request_summary(await request.body(), request.headers.get("content-type", ""))

        query = request.url.query
        full_path = f"{request.url.path}?{query}" if query else request.url.path
        device_id = request.headers.get("x-device-id") or "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "API %s %s | status=500 | device=%s | t=%.1fms | req=%s | req_id=%s",
                request.method,
                full_path,
                device_id,
                (time.perf_counter() - started_at) * 1000,
                summary,
                request_id,
            )
            raise

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "API %s %s | status=%s | device=%s | t=%.1fms | req=%s | resp_bytes=%s | req_id=%s",
            request.method,
            full_path,
            response.status_code,
            device_id,
            (time.perf_counter() - started_at) * 1000,
            summary,
            response.headers.get("content-length", "-"),
            request_id,
        )
        return response



logging.getLogger("uvicorn.access").disabled = True
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ARQ pool doubles as the Redis handle for history and task results.
    app.state.arq_pool = None
    if settings.enable_reflection_jobs:
        try:
            app.state.arq_pool = await create_pool(RedisSettings.from_dsn(settings.redis_url))
            logger.info("ARQ pool connected to %s", settings.redis_url)
        except Exception as exc:
            logger.warning("ARQ pool unavailable (Redis down?): %s | history and reflections disabled", exc)
    else:
        logger.info("Reflection jobs disabled, running without Redis")

    yield

    if getattr(app.state, "arq_pool", None) is not None:
        await app.state.arq_pool.close()


app = FastAPI(title="Asrar Abjad API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(ApiAuditMiddleware)

if settings.cors_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Device-ID", "X-Internal-API-Key"],
    )

app.include_router(health.router)
app.include_router(calculator.router)
app.include_router(reference.router)
app.include_router(tasks_router.router)
