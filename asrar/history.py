"""Redis-backed per-device calculation history (newest first, capped)."""

from __future__ import annotations

import json
import logging
from typing import Any

from .config import settings

logger = logging.getLogger("asrar.history")


def _history_key(device_id: str) -> str:
    return f"calc_history:{device_id}"


def _decode(raw: bytes | str) -> dict[str, Any] | None:
    try:
        item = json.loads(raw.decode() if isinstance(raw, bytes) else raw)
    except (ValueError, UnicodeDecodeError):
        return None
    return item if isinstance(item, dict) else None


async def save_result_to_history(redis: Any, device_id: str, result: dict[str, Any]) -> None:
    """Prepend a result record and evict the oldest beyond ``history_max_items``.

    Key schema:
        calc_history:{device_id}  →  List of JSON blobs, index 0 = newest
    """
    if redis is None:
        return
    try:
        key = _history_key(device_id)
        blob = json.dumps(result, ensure_ascii=False)
        await redis.lpush(key, blob)
        await redis.ltrim(key, 0, settings.history_max_items - 1)
        await redis.expire(key, settings.history_ttl_seconds)
    except Exception:
        logger.exception("Failed to save calculation to history | device_id=%s | id=%s", device_id, result.get("id"))


async def get_history(redis: Any, device_id: str) -> list[dict[str, Any]]:
    """Return stored records newest first; [] on any Redis error."""
    if redis is None:
        return []
    try:
        raw_items = await redis.lrange(_history_key(device_id), 0, settings.history_max_items - 1)
    except Exception:
        logger.exception("Failed to read history | device_id=%s", device_id)
        return []
    items: list[dict[str, Any]] = []
    for raw in raw_items or []:
        item = _decode(raw)
        if item is not None:
            items.append(item)
    return items


async def delete_history_item(redis: Any, device_id: str, result_id: str) -> int:
    """Drop one record by id. Returns how many entries were removed."""
    if redis is None:
        return 0
    try:
        key = _history_key(device_id)
        raw_items = await redis.lrange(key, 0, -1)
        removed = 0
        for raw in raw_items or []:
            item = _decode(raw)
            if item is not None and item.get("id") == result_id:
                removed += await redis.lrem(key, 0, raw)
        return removed
    except Exception:
        logger.exception("Failed to delete history item | device_id=%s | id=%s", device_id, result_id)
        return 0


async def clear_history(redis: Any, device_id: str) -> int:
    if redis is None:
        return 0
    try:
        return int(await redis.delete(_history_key(device_id)))
    except Exception:
        logger.exception("Failed to clear history | device_id=%s", device_id)
        return 0
