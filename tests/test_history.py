"""Redis-backed device history, exercised against an in-memory fake."""
import asyncio
import json
from unittest.mock import AsyncMock

from asrar.config import settings
from asrar.history import clear_history, delete_history_item, get_history, save_result_to_history

DEVICE = "device-12345"


class FakeRedis:
    """The handful of list commands history uses, with redis-py semantics."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}
        self.ttl: dict[str, int] = {}

    async def lpush(self, key, value):
        self.lists.setdefault(key, []).insert(0, value)
        return len(self.lists[key])

    async def ltrim(self, key, start, end):
        self.lists[key] = self.lists.get(key, [])[start:end + 1]

    async def expire(self, key, seconds):
        self.ttl[key] = seconds

    async def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        return [v.encode() for v in (items[start:] if end == -1 else items[start:end + 1])]

    async def lrem(self, key, count, value):
        value = value.decode() if isinstance(value, bytes) else value
        before = len(self.lists.get(key, []))
        self.lists[key] = [v for v in self.lists.get(key, []) if v != value]
        return before - len(self.lists[key])

    async def delete(self, key):
        return 1 if self.lists.pop(key, None) is not None else 0


def test_save_and_read_newest_first():
    redis = FakeRedis()

    async def scenario():
        await save_result_to_history(redis, DEVICE, {"id": "a", "type": "name"})
        await save_result_to_history(redis, DEVICE, {"id": "b", "type": "phrase"})
        return await get_history(redis, DEVICE)

    items = asyncio.run(scenario())
    assert [item["id"] for item in items] == ["b", "a"]
    assert redis.ttl[f"calc_history:{DEVICE}"] == settings.history_ttl_seconds


def test_history_capped(monkeypatch):
    monkeypatch.setattr(settings, "history_max_items", 3)
    redis = FakeRedis()

    async def scenario():
        for i in range(5):
            await save_result_to_history(redis, DEVICE, {"id": str(i)})
        return await get_history(redis, DEVICE)

    assert [item["id"] for item in asyncio.run(scenario())] == ["4", "3", "2"]


def test_history_is_per_device():
    redis = FakeRedis()

    async def scenario():
        await save_result_to_history(redis, DEVICE, {"id": "a"})
        return await get_history(redis, "other-device-1")

    assert asyncio.run(scenario()) == []


def test_delete_item_and_clear():
    redis = FakeRedis()

    async def scenario():
        for rid in ("a", "b", "c"):
            await save_result_to_history(redis, DEVICE, {"id": rid})
        removed = await delete_history_item(redis, DEVICE, "b")
        missing = await delete_history_item(redis, DEVICE, "zzz")
        remaining = await get_history(redis, DEVICE)
        cleared = await clear_history(redis, DEVICE)
        return removed, missing, remaining, cleared, await get_history(redis, DEVICE)

    removed, missing, remaining, cleared, after = asyncio.run(scenario())
    assert removed == 1
    assert missing == 0
    assert [item["id"] for item in remaining] == ["c", "a"]
    assert cleared == 1
    assert after == []


def test_corrupt_entries_skipped():
    redis = FakeRedis()
    redis.lists[f"calc_history:{DEVICE}"] = ["not json", json.dumps({"id": "ok"}), json.dumps([1, 2])]
    assert asyncio.run(get_history(redis, DEVICE)) == [{"id": "ok"}]


def test_no_redis_is_noop():
    async def scenario():
        await save_result_to_history(None, DEVICE, {"id": "a"})
        return (
            await get_history(None, DEVICE),
            await delete_history_item(None, DEVICE, "a"),
            await clear_history(None, DEVICE),
        )

    assert asyncio.run(scenario()) == ([], 0, 0)


def test_redis_errors_are_swallowed():
    redis = AsyncMock()
    redis.lpush.side_effect = ConnectionError("down")
    redis.lrange.side_effect = ConnectionError("down")

    async def scenario():
        await save_result_to_history(redis, DEVICE, {"id": "a"})
        return await get_history(redis, DEVICE)

    assert asyncio.run(scenario()) == []
