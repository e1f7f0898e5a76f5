from dataclasses import dataclass
import hmac
import re

from fastapi import Header, HTTPException

from .config import settings

_DEVICE_ID_RE = re.compile(r"^[A-Za-z0-9_.:-]{8,128}$")


@dataclass
class DeviceContext:
    device_id: str


def _check_internal_key(x_internal_api_key: str | None) -> None:
    if not settings.internal_api_key:
        return
    if not x_internal_api_key or not hmac.compare_digest(x_internal_api_key, settings.internal_api_key):
        raise HTTPException(status_code=401, detail="Invalid X-Internal-API-Key")


def optional_device_dep(
    x_device_id: str | None = Header(default=None, alias="X-Device-ID"),
    x_internal_api_key: str | None = Header(default=None, alias="X-Internal-API-Key"),
) -> DeviceContext | None:
    """Device context when the client identifies itself; calculations work without one."""
    _check_internal_key(x_internal_api_key)
    if not x_device_id:
        return None
    if not _DEVICE_ID_RE.match(x_device_id):
        raise HTTPException(status_code=400, detail="Invalid X-Device-ID")
    return DeviceContext(device_id=x_device_id)


def device_dep(
    x_device_id: str | None = Header(default=None, alias="X-Device-ID"),
    x_internal_api_key: str | None = Header(default=None, alias="X-Internal-API-Key"),
) -> DeviceContext:
    device = optional_device_dep(x_device_id=x_device_id, x_internal_api_key=x_internal_api_key)
    if device is None:
        raise HTTPException(status_code=401, detail="X-Device-ID header is required")
    return device
