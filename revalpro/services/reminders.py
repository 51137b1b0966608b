"""Revalidation reminder scheduling.

Reminders are computed up front and stored per user; nothing fires on its
own.  Clients poll ``pending`` and mark reminders read once shown.

Deadline reminders, relative to the registration expiry date:

    6 months   revalidation   medium
    3 months   revalidation   medium
    60 days    deadline       high     NMC application window opens
    1 month    deadline       high

Only dates still in the future are scheduled.  Every schedule_* call is a
no-op while reminders are disabled in the user's settings.
"""

from __future__ import annotations

import calendar
import json
import logging
from dataclasses import replace
from datetime import UTC, date, datetime, time, timedelta
from uuid import uuid4

from revalpro.core.metrics import REMINDERS_SCHEDULED
from revalpro.models.reminder import (
    PRIORITY_ORDER,
    Priority,
    Reminder,
    ReminderSettings,
    ReminderType,
)
from revalpro.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

CLEAR_AFTER_DAYS = 30


def _shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the target month's last day."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def _at(day: date, hour: int = 0) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=UTC)


class ReminderService:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def _reminders_key(user_id: str) -> str:
        return f"reminders:{user_id}"

    @staticmethod
    def _settings_key(user_id: str) -> str:
        return f"reminder_settings:{user_id}"

    async def _load(self, user_id: str) -> list[Reminder]:
        raw = await self._store.get(self._reminders_key(user_id))
        if raw is None:
            return []
        return [Reminder.from_dict(r) for r in json.loads(raw)]

    async def _save(self, user_id: str, reminders: list[Reminder]) -> None:
        await self._store.set(
            self._reminders_key(user_id),
            json.dumps([r.to_dict() for r in reminders]),
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self, user_id: str) -> ReminderSettings:
        raw = await self._store.get(self._settings_key(user_id))
        if raw is None:
            return ReminderSettings()
        return ReminderSettings.from_dict(json.loads(raw))

    async def update_settings(self, user_id: str, **changes: bool) -> ReminderSettings:
        """Merge ``changes`` into the stored settings.  Unknown keys raise TypeError."""
        settings = replace(await self.get_settings(user_id), **changes)
        await self._store.set(self._settings_key(user_id), json.dumps(settings.to_dict()))
        logger.info("Reminder settings updated for user=%s %s", user_id, settings)
        return settings

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def _schedule(
        self,
        user_id: str,
        entries: list[tuple[str, str, ReminderType, Priority, datetime]],
    ) -> list[Reminder]:
        created = [
            Reminder(
                id=str(uuid4()),
                title=title,
                message=message,
                type=kind,
                priority=priority,
                scheduled_at=when,
            )
            for title, message, kind, priority, when in entries
        ]
        if created:
            await self._save(user_id, await self._load(user_id) + created)
        for reminder in created:
            REMINDERS_SCHEDULED.labels(type=reminder.type).inc()
        return created

    async def schedule_revalidation_reminders(
        self, user_id: str, expiry: date, now: datetime | None = None
    ) -> list[Reminder]:
        settings = await self.get_settings(user_id)
        if not settings.enabled or not settings.revalidation_reminders:
            return []
        now = now or datetime.now(UTC)

        candidates: list[tuple[str, str, ReminderType, Priority, datetime]] = [
            (
                "Revalidation Reminder - 6 Months",
                "Your NMC registration expires in 6 months. "
                "Start gathering your revalidation evidence now.",
                "revalidation",
                "medium",
                _at(_shift_months(expiry, -6)),
            ),
            (
                "Revalidation Reminder - 3 Months",
                "Your NMC registration expires in 3 months. "
                "Ensure you have all required evidence.",
                "revalidation",
                "medium",
                _at(_shift_months(expiry, -3)),
            ),
        ]
        if settings.deadline_alerts:
            candidates += [
                (
                    "NMC Application Window Open",
                    "You can now submit your revalidation application to the NMC.",
                    "deadline",
                    "high",
                    _at(expiry - timedelta(days=60)),
                ),
                (
                    "Urgent: Registration Expires Soon",
                    "Your NMC registration expires in 1 month. "
                    "Submit your revalidation now!",
                    "deadline",
                    "high",
                    _at(_shift_months(expiry, -1)),
                ),
            ]

        created = await self._schedule(
            user_id, [c for c in candidates if c[4] > now]
        )
        logger.info(
            "Scheduled %d revalidation reminders for user=%s expiry=%s",
            len(created),
            user_id,
            expiry,
        )
        return created

    async def schedule_weekly_progress_reminder(
        self, user_id: str, now: datetime | None = None
    ) -> Reminder | None:
        settings = await self.get_settings(user_id)
        if not settings.enabled or not settings.weekly_progress:
            return None
        now = now or datetime.now(UTC)
        created = await self._schedule(
            user_id,
            [
                (
                    "Weekly Progress Check",
                    "Take a moment to update your practice hours "
                    "and CPD activities for this week.",
                    "progress",
                    "low",
                    _at(now.date() + timedelta(days=7), 10),
                )
            ],
        )
        return created[0]

    async def schedule_cpd_reminder(
        self, user_id: str, now: datetime | None = None
    ) -> Reminder | None:
        if not (await self.get_settings(user_id)).enabled:
            return None
        now = now or datetime.now(UTC)
        created = await self._schedule(
            user_id,
            [
                (
                    "CPD Activity Reminder",
                    "Have you completed any CPD activities recently? "
                    "Don't forget to log them!",
                    "cpd",
                    "low",
                    _at(now.date() + timedelta(days=30), 14),
                )
            ],
        )
        return created[0]

    async def schedule_reflection_reminder(
        self, user_id: str, now: datetime | None = None
    ) -> Reminder | None:
        if not (await self.get_settings(user_id)).enabled:
            return None
        now = now or datetime.now(UTC)
        created = await self._schedule(
            user_id,
            [
                (
                    "Reflection Reminder",
                    "Time to write a new reflective account "
                    "about your recent practice experiences.",
                    "reflection",
                    "medium",
                    _at(now.date() + timedelta(days=14), 16),
                )
            ],
        )
        return created[0]

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def list_all(self, user_id: str) -> list[Reminder]:
        return await self._load(user_id)

    async def pending(self, user_id: str, now: datetime | None = None) -> list[Reminder]:
        """Due, unread reminders: highest priority first, then oldest first."""
        now = now or datetime.now(UTC)
        due = [
            r
            for r in await self._load(user_id)
            if r.scheduled_at <= now and not r.is_read
        ]
        return sorted(due, key=lambda r: (-PRIORITY_ORDER[r.priority], r.scheduled_at))

    async def mark_read(self, user_id: str, reminder_id: str) -> bool:
        reminders = await self._load(user_id)
        found = False
        for i, reminder in enumerate(reminders):
            if reminder.id == reminder_id:
                reminders[i] = replace(reminder, is_read=True)
                found = True
        if found:
            await self._save(user_id, reminders)
        return found

    async def clear_old(self, user_id: str, now: datetime | None = None) -> int:
        """Drop read reminders scheduled more than 30 days ago.  Returns the count."""
        cutoff = (now or datetime.now(UTC)) - timedelta(days=CLEAR_AFTER_DAYS)
        reminders = await self._load(user_id)
        kept = [r for r in reminders if r.scheduled_at > cutoff or not r.is_read]
        if len(kept) != len(reminders):
            await self._save(user_id, kept)
        return len(reminders) - len(kept)
