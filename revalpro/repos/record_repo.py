"""Per-user record collections over a KeyValueStore.

Every record kind lives in its own collection with auto-incrementing
integer ids.  Values are stored as JSON and pass back through the
validating ``from_dict`` on every read, so a corrupt or hand-edited entry
is logged and skipped instead of reaching the progress aggregator.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any

from revalpro.core.metrics import RECORD_STORE_OPERATIONS, RECORDS_REJECTED
from revalpro.models.progress import RevalidationSummaryData
from revalpro.models.records import (
    RECORD_TYPES,
    Confirmation,
    CpdRecord,
    FeedbackRecord,
    HealthDeclaration,
    PracticeHoursRecord,
    RecordValidationError,
    ReflectiveAccount,
    ReflectiveDiscussion,
    UserProfile,
    decode_record,
)
from revalpro.models.weekly_hours import WeeklyHoursConfig
from revalpro.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

STORED_KINDS: tuple[str, ...] = (*RECORD_TYPES, WeeklyHoursConfig.kind)


def _decode(kind: str, data: Any) -> Any:
    if kind == WeeklyHoursConfig.kind:
        if not isinstance(data, dict):
            raise RecordValidationError(kind, "record must be an object")
        try:
            return WeeklyHoursConfig.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RecordValidationError(kind, f"malformed config ({e})") from None
    return decode_record(kind, data)


def _check_kind(kind: str) -> None:
    if kind not in STORED_KINDS:
        raise RecordValidationError(kind, "unknown record kind")


def _assign_ids(kind: str, records: list[Any]) -> list[Any]:
    """Keep positive integer ids; number the rest after the highest one."""
    seen: set[int] = set()
    for record in records:
        if _has_id(record):
            if record.id in seen:
                raise RecordValidationError(kind, f"duplicate id {record.id}")
            seen.add(record.id)

    next_id = max(seen, default=0) + 1
    assigned = []
    for record in records:
        if not _has_id(record):
            record = replace(record, id=next_id)
            next_id += 1
        assigned.append(record)
    return assigned


def _has_id(record: Any) -> bool:
    return isinstance(record.id, int) and not isinstance(record.id, bool) and record.id > 0


class RecordRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @staticmethod
    def _prefix(user_id: str, kind: str) -> str:
        return f"user:{user_id}:{kind}:"

    def _key(self, user_id: str, kind: str, record_id: int) -> str:
        return f"{self._prefix(user_id, kind)}{record_id:010d}"

    @staticmethod
    def _seq_key(user_id: str, kind: str) -> str:
        return f"seq:{user_id}:{kind}"

    async def _write(self, user_id: str, record: Any) -> None:
        await self._store.set(
            self._key(user_id, record.kind, record.id), json.dumps(record.to_dict())
        )

    async def _read(self, key: str, kind: str) -> Any | None:
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return _decode(kind, json.loads(raw))
        except (json.JSONDecodeError, RecordValidationError) as e:
            RECORDS_REJECTED.labels(kind=kind).inc()
            logger.warning(
                "Skipping corrupt stored record",
                extra={"record_kind": kind, "key": key, "error": str(e)},
            )
            return None

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def add(self, user_id: str, record: Any) -> Any:
        """Store a new record and return it with its assigned id."""
        _check_kind(record.kind)
        record_id = await self._store.incr(self._seq_key(user_id, record.kind))
        stored = replace(record, id=record_id)
        await self._write(user_id, stored)
        RECORD_STORE_OPERATIONS.labels(kind=record.kind, operation="add").inc()
        logger.debug(
            "Record added id=%d", record_id, extra={"record_kind": record.kind}
        )
        return stored

    async def get(self, user_id: str, kind: str, record_id: int) -> Any | None:
        _check_kind(kind)
        return await self._read(self._key(user_id, kind, record_id), kind)

    async def list(self, user_id: str, kind: str) -> list[Any]:
        """All valid records of ``kind`` in id order."""
        _check_kind(kind)
        records = []
        for key in await self._store.keys(self._prefix(user_id, kind)):
            record = await self._read(key, kind)
            if record is not None:
                records.append(record)
        RECORD_STORE_OPERATIONS.labels(kind=kind, operation="list").inc()
        return records

    async def update(self, user_id: str, record_id: int, record: Any) -> Any | None:
        """Replace an existing record.  Returns None when ``record_id`` is unknown."""
        _check_kind(record.kind)
        key = self._key(user_id, record.kind, record_id)
        if await self._store.get(key) is None:
            return None
        stored = replace(record, id=record_id)
        await self._write(user_id, stored)
        RECORD_STORE_OPERATIONS.labels(kind=record.kind, operation="update").inc()
        return stored

    async def remove(self, user_id: str, kind: str, record_id: int) -> bool:
        _check_kind(kind)
        key = self._key(user_id, kind, record_id)
        if await self._store.get(key) is None:
            return False
        await self._store.delete(key)
        RECORD_STORE_OPERATIONS.labels(kind=kind, operation="remove").inc()
        return True

    # ------------------------------------------------------------------
    # Singleton kinds (profile, declarations, discussion)
    # ------------------------------------------------------------------

    async def current(self, user_id: str, kind: str) -> Any | None:
        """First stored record of a kind that holds at most one per user."""
        records = await self.list(user_id, kind)
        return records[0] if records else None

    async def put_current(self, user_id: str, record: Any) -> Any:
        existing = await self.current(user_id, record.kind)
        if existing is None:
            return await self.add(user_id, record)
        return await self.update(user_id, existing.id, record)

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    async def export_all(self, user_id: str) -> dict[str, list[dict]]:
        return {
            kind: [r.to_dict() for r in await self.list(user_id, kind)]
            for kind in STORED_KINDS
        }

    async def import_all(self, user_id: str, data: dict[str, list[dict]]) -> dict[str, int]:
        """Replace every collection with ``data``.

        The whole payload is validated before anything is cleared, so a bad
        entry leaves the existing records untouched.  Stored ids are kept
        so practice-hours records still point at their weekly configs.
        """
        decoded: dict[str, list[Any]] = {}
        for kind, items in data.items():
            _check_kind(kind)
            if not isinstance(items, list):
                raise RecordValidationError(kind, "collection must be a list")
            try:
                decoded[kind] = _assign_ids(kind, [_decode(kind, item) for item in items])
            except RecordValidationError:
                RECORDS_REJECTED.labels(kind=kind).inc()
                raise

        await self.clear_all(user_id)

        counts: dict[str, int] = {}
        for kind, records in decoded.items():
            for record in records:
                await self._write(user_id, record)
            highest = max((r.id for r in records), default=0)
            await self._store.set(self._seq_key(user_id, kind), str(highest))
            counts[kind] = len(records)
            RECORD_STORE_OPERATIONS.labels(kind=kind, operation="import").inc()

        logger.info("Imported records for user=%s counts=%s", user_id, counts)
        return counts

    async def clear_all(self, user_id: str) -> None:
        for key in await self._store.keys(f"user:{user_id}:"):
            await self._store.delete(key)
        for kind in STORED_KINDS:
            await self._store.delete(self._seq_key(user_id, kind))
        logger.info("Cleared all records for user=%s", user_id)


async def load_summary_data(repo: RecordRepo, user_id: str) -> RevalidationSummaryData:
    """Collect everything the progress aggregator needs for one user."""
    profile: UserProfile | None = await repo.current(user_id, UserProfile.kind)
    practice: list[PracticeHoursRecord] = await repo.list(user_id, PracticeHoursRecord.kind)
    return RevalidationSummaryData(
        practice_hours=practice,
        cpd_records=await repo.list(user_id, CpdRecord.kind),
        feedback_records=await repo.list(user_id, FeedbackRecord.kind),
        reflective_accounts=await repo.list(user_id, ReflectiveAccount.kind),
        reflective_discussion=await repo.current(user_id, ReflectiveDiscussion.kind),
        health_declaration=await repo.current(user_id, HealthDeclaration.kind),
        confirmation=await repo.current(user_id, Confirmation.kind),
        expiry_date=profile.expiry_date if profile else None,
    )
