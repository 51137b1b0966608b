from __future__ import annotations

import asyncio

from revalpro.services.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
    build_kv_store,
)


class _FakeRedis:
    """Just enough of redis.asyncio.Redis for the key-value adapter."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def incr(self, key: str) -> int:
        self.data[key] = str(int(self.data.get(key, "0")) + 1)
        return int(self.data[key])

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        prefix = match.rstrip("*")
        keys = sorted(k for k in self.data if k.startswith(prefix))
        # two pages to exercise the cursor loop
        if cursor == 0 and len(keys) > 1:
            return 1, keys[:1]
        return 0, keys[1:] if cursor == 1 else keys


def test_in_memory_store_basics() -> None:
    store = InMemoryKeyValueStore()
    asyncio.run(store.set("user:a:cpd:2", "x"))
    asyncio.run(store.set("user:a:cpd:1", "y"))
    asyncio.run(store.set("user:b:cpd:1", "z"))

    assert asyncio.run(store.get("user:a:cpd:1")) == "y"
    assert asyncio.run(store.keys("user:a:")) == ["user:a:cpd:1", "user:a:cpd:2"]
    asyncio.run(store.delete("user:a:cpd:1"))
    assert asyncio.run(store.get("user:a:cpd:1")) is None
    assert asyncio.run(store.incr("seq")) == 1
    assert asyncio.run(store.incr("seq")) == 2


def test_redis_store_prefixes_keys_and_pages_scan() -> None:
    fake = _FakeRedis()
    store = RedisKeyValueStore(fake)
    asyncio.run(store.set("user:a:cpd:1", "x"))
    asyncio.run(store.set("user:a:cpd:2", "y"))

    assert "revalpro:user:a:cpd:1" in fake.data
    assert asyncio.run(store.keys("user:a:")) == ["user:a:cpd:1", "user:a:cpd:2"]
    assert asyncio.run(store.incr("seq:a:cpd")) == 1


def test_build_kv_store_picks_backend() -> None:
    assert isinstance(build_kv_store(None), InMemoryKeyValueStore)
    assert isinstance(build_kv_store(_FakeRedis()), RedisKeyValueStore)
    assert isinstance(InMemoryKeyValueStore(), KeyValueStore)
