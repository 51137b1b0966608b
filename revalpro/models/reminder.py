from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Literal

ReminderType = Literal["revalidation", "progress", "deadline", "cpd", "reflection"]
Priority = Literal["low", "medium", "high"]

PRIORITY_ORDER: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True, slots=True)
class ReminderSettings:
    enabled: bool = False
    revalidation_reminders: bool = True
    weekly_progress: bool = True
    deadline_alerts: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> ReminderSettings:
        defaults = ReminderSettings()
        return ReminderSettings(
            enabled=bool(data.get("enabled", defaults.enabled)),
            revalidation_reminders=bool(
                data.get("revalidation_reminders", defaults.revalidation_reminders)
            ),
            weekly_progress=bool(data.get("weekly_progress", defaults.weekly_progress)),
            deadline_alerts=bool(data.get("deadline_alerts", defaults.deadline_alerts)),
        )


@dataclass(frozen=True, slots=True)
class Reminder:
    """A scheduled nudge; becomes pending once ``scheduled_at`` has passed."""

    id: str
    title: str
    message: str
    type: ReminderType
    priority: Priority
    scheduled_at: datetime
    is_read: bool = False

    def to_dict(self) -> dict:
        out = asdict(self)
        out["scheduled_at"] = self.scheduled_at.isoformat()
        return out

    @staticmethod
    def from_dict(data: dict) -> Reminder:
        return Reminder(
            id=str(data["id"]),
            title=str(data["title"]),
            message=str(data["message"]),
            type=data["type"],
            priority=data["priority"],
            scheduled_at=datetime.fromisoformat(data["scheduled_at"]),
            is_read=bool(data.get("is_read", False)),
        )
