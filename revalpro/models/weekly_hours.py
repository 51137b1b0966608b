from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar


def round1(value: float) -> float:
    """Round to one decimal place, halves toward positive infinity."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass(frozen=True, slots=True)
class Adjustment:
    """Signed manual correction to one week (sick leave, extra shift, ...)."""

    date: date
    hours: float
    reason: str

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "hours": self.hours, "reason": self.reason}

    @staticmethod
    def from_dict(data: dict) -> Adjustment:
        return Adjustment(
            date=date.fromisoformat(data["date"]),
            hours=float(data["hours"]),
            reason=str(data["reason"]),
        )


@dataclass(slots=True)
class WeekEntry:
    """One Monday-aligned week, clipped to the calculator's date range."""

    week_start: date
    week_end: date
    scheduled_hours: float
    actual_hours: float
    adjustments: list[Adjustment] = field(default_factory=list)
    is_completed: bool = False

    @property
    def days_in_week(self) -> int:
        return min((self.week_end - self.week_start).days + 1, 7)

    @property
    def adjustment_total(self) -> float:
        return sum(a.hours for a in self.adjustments)

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "days_in_week": self.days_in_week,
            "scheduled_hours": self.scheduled_hours,
            "actual_hours": self.actual_hours,
            "adjustments": [a.to_dict() for a in self.adjustments],
            "is_completed": self.is_completed,
        }

    @staticmethod
    def from_dict(data: dict) -> WeekEntry:
        return WeekEntry(
            week_start=date.fromisoformat(data["week_start"]),
            week_end=date.fromisoformat(data["week_end"]),
            scheduled_hours=float(data["scheduled_hours"]),
            actual_hours=float(data["actual_hours"]),
            adjustments=[Adjustment.from_dict(a) for a in data.get("adjustments", [])],
            is_completed=bool(data.get("is_completed", False)),
        )


@dataclass(frozen=True, slots=True)
class WeeklyHoursConfig:
    """A saved calculator run, referenced by practice-hours records."""

    kind: ClassVar[str] = "weekly_hours_config"

    start_date: date
    end_date: date
    weekly_hours: float
    breakdown: tuple[WeekEntry, ...]
    total_hours: float
    id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "weekly_hours": self.weekly_hours,
            "breakdown": [w.to_dict() for w in self.breakdown],
            "total_hours": self.total_hours,
        }

    @staticmethod
    def from_dict(data: dict) -> WeeklyHoursConfig:
        return WeeklyHoursConfig(
            id=data.get("id"),
            start_date=date.fromisoformat(data["start_date"]),
            end_date=date.fromisoformat(data["end_date"]),
            weekly_hours=float(data["weekly_hours"]),
            breakdown=tuple(WeekEntry.from_dict(w) for w in data.get("breakdown", [])),
            total_hours=float(data["total_hours"]),
        )
