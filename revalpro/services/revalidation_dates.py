"""Date arithmetic for the three-year NMC revalidation cycle."""

from __future__ import annotations

from datetime import date
from typing import Literal

REVALIDATION_CYCLE_YEARS = 3

NotificationPhase = Literal["urgent", "warning", "notice", "ok"]


def days_until(target: date, today: date | None = None) -> int:
    """Whole days from today to target; negative once target has passed."""
    return (target - (today or date.today())).days


def _shift_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # 29 Feb in a non-leap target year
        return day.replace(year=day.year + years, day=28)


def revalidation_period(expiry: date) -> tuple[date, date]:
    return _shift_years(expiry, -REVALIDATION_CYCLE_YEARS), expiry


def is_within_period(day: date, period: tuple[date, date]) -> bool:
    start, end = period
    return start <= day <= end


def timeline_percent(expiry: date, today: date | None = None) -> float:
    """Share of the current cycle already elapsed, clamped to 0..100."""
    start, end = revalidation_period(expiry)
    total_days = (end - start).days
    elapsed = ((today or date.today()) - start).days
    return min(100.0, max(0.0, elapsed / total_days * 100))


def notification_phase(days_remaining: int) -> NotificationPhase:
    if days_remaining <= 30:
        return "urgent"
    if days_remaining <= 60:
        return "warning"
    if days_remaining <= 90:
        return "notice"
    return "ok"


def human_readable_period(start: date, end: date) -> str:
    days = (end - start).days

    if days < 0:
        return "Invalid period"
    if days == 0:
        return "Same day"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"

    weeks = days // 7
    if weeks == 1:
        return "1 week"
    if weeks < 4:
        return f"{weeks} weeks"

    # 28-29 days and 360-364 days fall between the week and year buckets
    months = max(1, days // 30)
    if months == 1:
        return "1 month"
    if months < 12:
        return f"{months} months"

    years = max(1, days // 365)
    if years == 1:
        return "1 year"
    return f"{years} years"
