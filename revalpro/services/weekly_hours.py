"""Weekly practice-hours allocator.

Splits a practice period into Monday-start calendar weeks, pro-rates the
contracted weekly hours across each week's days, and lets the user record
signed adjustments (sick leave, extra shifts) against individual weeks.

    2026-03-04 (Wed) .. 2026-03-17 (Tue), 35h/week

    week 1  Wed 04 .. Sun 08   5 days   25.0h
    week 2  Mon 09 .. Sun 15   7 days   35.0h
    week 3  Mon 16 .. Tue 17   2 days   10.0h
                                        -----
                                        70.0h

Every mutation recomputes the total and hands ``(total, breakdown)`` to the
``on_change`` callback, so a form bound to the allocator always shows the
latest figure.  Nothing here raises for bad user input: an inverted range
yields no weeks, and a blank-reason or zero-hour adjustment is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date, timedelta

from revalpro.core.metrics import WEEKLY_HOURS_RECALCULATIONS
from revalpro.models.weekly_hours import Adjustment, WeekEntry, round1

logger = logging.getLogger(__name__)

DEFAULT_WEEKLY_HOURS = 37.5

HoursCallback = Callable[[float, list[WeekEntry]], None]


def _scheduled_hours(weekly_hours: float, days_in_week: int) -> float:
    return round1((weekly_hours / 7) * min(days_in_week, 7))


def _actual_hours(entry: WeekEntry) -> float:
    return round1(entry.scheduled_hours + entry.adjustment_total)


def generate_weeks(
    start_date: date,
    end_date: date,
    weekly_hours: float,
    *,
    today: date | None = None,
) -> list[WeekEntry]:
    """Partition [start_date, end_date] into Monday-aligned weeks.

    The first and last weeks may be partial.  Returns an empty list when
    end_date precedes start_date.
    """
    today = today or date.today()
    weeks: list[WeekEntry] = []
    week_start = start_date - timedelta(days=start_date.weekday())

    while True:
        clipped_start = max(week_start, start_date)
        clipped_end = min(week_start + timedelta(days=6), end_date)
        if clipped_start > clipped_end:
            break

        days_in_week = (clipped_end - clipped_start).days + 1
        scheduled = _scheduled_hours(weekly_hours, days_in_week)
        weeks.append(
            WeekEntry(
                week_start=clipped_start,
                week_end=clipped_end,
                scheduled_hours=scheduled,
                actual_hours=scheduled,
                is_completed=clipped_end < today,
            )
        )
        week_start += timedelta(days=7)

    return weeks


class WeeklyHoursAllocator:
    """Stateful calculator backing the practice-hours form."""

    def __init__(
        self,
        start_date: date,
        end_date: date,
        weekly_hours: float = DEFAULT_WEEKLY_HOURS,
        *,
        existing_data: list[WeekEntry] | None = None,
        on_change: HoursCallback | None = None,
        today: date | None = None,
    ) -> None:
        self.start_date = start_date
        self.end_date = end_date
        self.weekly_hours = weekly_hours
        self._today = today or date.today()
        self._on_change = on_change

        if existing_data:
            # edits must not reach the caller's entries
            self.weeks = [
                replace(w, adjustments=list(w.adjustments)) for w in existing_data
            ]
        else:
            self.weeks = generate_weeks(
                start_date, end_date, weekly_hours, today=self._today
            )
            if end_date < start_date:
                logger.debug(
                    "Inverted range %s..%s produced no weeks", start_date, end_date
                )

        WEEKLY_HOURS_RECALCULATIONS.labels(operation="generate").inc()
        self._notify()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _week(self, index: int) -> WeekEntry:
        if not 0 <= index < len(self.weeks):
            raise IndexError(f"week index {index} out of range")
        return self.weeks[index]

    def update_weekly_hours(self, new_hours: float) -> None:
        """Re-prorate every week for new contracted hours, keeping adjustments."""
        self.weekly_hours = new_hours
        for entry in self.weeks:
            entry.scheduled_hours = _scheduled_hours(new_hours, entry.days_in_week)
            entry.actual_hours = _actual_hours(entry)

        WEEKLY_HOURS_RECALCULATIONS.labels(operation="update_weekly_hours").inc()
        self._notify()

    def add_adjustment(self, week_index: int, hours: float, reason: str) -> bool:
        """Append a signed adjustment to one week.

        Returns False (and changes nothing) when ``reason`` is blank or
        ``hours`` is zero.  Raises IndexError for an unknown week.
        """
        entry = self._week(week_index)
        if hours == 0 or not reason.strip():
            return False

        entry.adjustments.append(
            Adjustment(date=self._today, hours=hours, reason=reason)
        )
        entry.actual_hours = _actual_hours(entry)

        WEEKLY_HOURS_RECALCULATIONS.labels(operation="add_adjustment").inc()
        self._notify()
        return True

    def remove_adjustment(self, week_index: int, adjustment_index: int) -> Adjustment:
        entry = self._week(week_index)
        if not 0 <= adjustment_index < len(entry.adjustments):
            raise IndexError(f"adjustment index {adjustment_index} out of range")
        removed = entry.adjustments.pop(adjustment_index)
        entry.actual_hours = _actual_hours(entry)

        WEEKLY_HOURS_RECALCULATIONS.labels(operation="remove_adjustment").inc()
        self._notify()
        return removed

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def get_total(self) -> float:
        return round1(sum(entry.actual_hours for entry in self.weeks))

    def get_completed_total(self) -> float:
        """Hours from weeks that ended before today."""
        return round1(sum(e.actual_hours for e in self.weeks if e.is_completed))

    def get_pending_total(self) -> float:
        return round1(sum(e.actual_hours for e in self.weeks if not e.is_completed))

    def breakdown(self) -> list[WeekEntry]:
        return list(self.weeks)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.get_total(), self.breakdown())
