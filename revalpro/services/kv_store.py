"""Key-value persistence behind every stored collection.

Records, saved weekly-hours configurations and reminders are all JSON
strings under namespaced keys:

    user:{user_id}:{kind}:{id}     one record (id zero-padded)
    seq:{user_id}:{kind}           last id handed out for that kind
    reminders:{user_id}            scheduled reminders
    reminder_settings:{user_id}    reminder preferences

Callers depend on the KeyValueStore protocol only.  The in-memory
implementation backs tests and single-process development; the Redis
implementation is shared across API instances.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a value.  Returns None when the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def keys(self, prefix: str) -> list[str]:
        """All keys starting with ``prefix``, sorted."""
        ...

    async def incr(self, key: str) -> int:
        """Atomically increment an integer counter and return the new value."""
        ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and local development."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def keys(self, prefix: str) -> list[str]:
        return sorted(k for k in self._store if k.startswith(prefix))

    async def incr(self, key: str) -> int:
        value = int(self._store.get(key, "0")) + 1
        self._store[key] = str(value)
        return value


class RedisKeyValueStore:
    """Redis-backed store."""

    # Keeps revalidation data apart from anything else sharing the instance.
    _PREFIX = "revalpro:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(f"{self._PREFIX}{key}", value)

    async def delete(self, key: str) -> None:
        await self._redis.delete(f"{self._PREFIX}{key}")

    async def keys(self, prefix: str) -> list[str]:
        # SCAN, not KEYS: KEYS blocks the server for the whole keyspace.
        found: list[str] = []
        cursor = 0
        while True:
            cursor, batch = await self._redis.scan(
                cursor, match=f"{self._PREFIX}{prefix}*", count=100
            )
            found.extend(k[len(self._PREFIX) :] for k in batch)
            if cursor == 0:
                break
        return sorted(set(found))

    async def incr(self, key: str) -> int:
        return int(await self._redis.incr(f"{self._PREFIX}{key}"))


def build_kv_store(redis_client=None) -> KeyValueStore:
    if redis_client is not None:
        return RedisKeyValueStore(redis_client)
    return InMemoryKeyValueStore()
