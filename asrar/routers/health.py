from datetime import datetime, timezone

from fastapi import APIRouter, Request

from ..limiter import limiter
from ..reference_data import load_divine_names, load_surahs

router = APIRouter(tags=["health"])


@router.get("/health")
@limiter.limit("60/minute")
def health(request: Request):
    return {
        "ok": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "divine_names": len(load_divine_names()),
        "surahs": len(load_surahs()),
        "queue": getattr(request.app.state, "arq_pool", None) is not None,
    }
