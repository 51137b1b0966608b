from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, timedelta

from prometheus_client import REGISTRY

from revalpro.services.reminders import ReminderService, _shift_months

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
USER = "nurse-1"


def _enable(service: ReminderService, **changes: bool) -> None:
    asyncio.run(service.update_settings(USER, enabled=True, **changes))


def test_defaults_are_disabled(reminder_service: ReminderService) -> None:
    settings = asyncio.run(reminder_service.get_settings(USER))
    assert settings.enabled is False
    assert settings.revalidation_reminders is True


def test_disabled_service_schedules_nothing(reminder_service: ReminderService) -> None:
    created = asyncio.run(
        reminder_service.schedule_revalidation_reminders(USER, date(2027, 10, 19), NOW)
    )
    assert created == []
    assert asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW)) is None
    assert asyncio.run(reminder_service.list_all(USER)) == []


def test_revalidation_reminders_for_distant_expiry(
    reminder_service: ReminderService,
) -> None:
    _enable(reminder_service)
    created = asyncio.run(
        reminder_service.schedule_revalidation_reminders(USER, date(2027, 10, 19), NOW)
    )
    assert [r.scheduled_at.date() for r in created] == [
        date(2027, 4, 19),
        date(2027, 7, 19),
        date(2027, 8, 20),
        date(2027, 9, 19),
    ]
    assert [r.priority for r in created] == ["medium", "medium", "high", "high"]
    assert [r.type for r in created] == ["revalidation", "revalidation", "deadline", "deadline"]


def test_only_future_reminders_are_scheduled(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    # 45 days out: only the one-month reminder is still ahead
    created = asyncio.run(
        reminder_service.schedule_revalidation_reminders(
            USER, date(2026, 12, 3), NOW
        )
    )
    assert [r.title for r in created] == ["Urgent: Registration Expires Soon"]


def test_deadline_alerts_setting_drops_deadline_reminders(
    reminder_service: ReminderService,
) -> None:
    _enable(reminder_service, deadline_alerts=False)
    created = asyncio.run(
        reminder_service.schedule_revalidation_reminders(USER, date(2027, 10, 19), NOW)
    )
    assert {r.type for r in created} == {"revalidation"}


def test_follow_up_reminders_land_at_fixed_times(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    weekly = asyncio.run(reminder_service.schedule_weekly_progress_reminder(USER, NOW))
    cpd = asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW))
    reflection = asyncio.run(reminder_service.schedule_reflection_reminder(USER, NOW))

    assert weekly.scheduled_at == datetime(2026, 10, 26, 10, 0, tzinfo=UTC)
    assert cpd.scheduled_at == datetime(2026, 11, 18, 14, 0, tzinfo=UTC)
    assert reflection.scheduled_at == datetime(2026, 11, 2, 16, 0, tzinfo=UTC)


def test_weekly_progress_respects_its_toggle(reminder_service: ReminderService) -> None:
    _enable(reminder_service, weekly_progress=False)
    assert asyncio.run(reminder_service.schedule_weekly_progress_reminder(USER, NOW)) is None


def test_pending_orders_by_priority_then_date(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    asyncio.run(reminder_service.schedule_weekly_progress_reminder(USER, NOW))
    asyncio.run(reminder_service.schedule_reflection_reminder(USER, NOW))
    asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW))

    assert asyncio.run(reminder_service.pending(USER, NOW)) == []

    later = NOW + timedelta(days=60)
    pending = asyncio.run(reminder_service.pending(USER, later))
    assert [r.type for r in pending] == ["reflection", "progress", "cpd"]


def test_mark_read_hides_reminder(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    reminder = asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW))
    later = NOW + timedelta(days=31)

    assert asyncio.run(reminder_service.mark_read(USER, reminder.id)) is True
    assert asyncio.run(reminder_service.pending(USER, later)) == []
    assert asyncio.run(reminder_service.mark_read(USER, "missing")) is False


def test_clear_old_only_drops_read_reminders(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    read = asyncio.run(reminder_service.schedule_weekly_progress_reminder(USER, NOW))
    asyncio.run(reminder_service.schedule_reflection_reminder(USER, NOW))
    asyncio.run(reminder_service.mark_read(USER, read.id))

    removed = asyncio.run(reminder_service.clear_old(USER, NOW + timedelta(days=90)))
    remaining = asyncio.run(reminder_service.list_all(USER))

    assert removed == 1
    assert [r.type for r in remaining] == ["reflection"]


def test_reminders_are_scoped_per_user(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW))
    assert asyncio.run(reminder_service.list_all("someone-else")) == []


def test_scheduling_increments_counter(reminder_service: ReminderService) -> None:
    _enable(reminder_service)
    labels = {"type": "cpd"}
    before = REGISTRY.get_sample_value("reminders_scheduled_total", labels) or 0.0
    asyncio.run(reminder_service.schedule_cpd_reminder(USER, NOW))
    assert REGISTRY.get_sample_value("reminders_scheduled_total", labels) - before == 1


def test_shift_months_clamps_to_month_end() -> None:
    assert _shift_months(date(2027, 8, 31), -6) == date(2027, 2, 28)
    assert _shift_months(date(2027, 1, 15), -3) == date(2026, 10, 15)
