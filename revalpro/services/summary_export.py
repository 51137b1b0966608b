"""Backup export/restore and the flat progress summary.

The backup document is a plain JSON object:

    {
      "application": "RevalPro UK Nursing Revalidation",
      "version": "1.0.0",
      "exported_at": "2026-10-19T09:30:00+00:00",
      "user_id": "...",
      "data": {"practice_hours": [...], "cpd": [...], ...}
    }

``build_summary`` flattens a RevalidationProgress into the shape used by
dashboards and the PDF/infographic renderers.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from revalpro.models.progress import RevalidationProgress, RevalidationStatus
from revalpro.models.records import UserProfile
from revalpro.repos.record_repo import RecordRepo
from revalpro.services.progress import requirement_status
from revalpro.services.revalidation_dates import human_readable_period, notification_phase

APPLICATION = "RevalPro UK Nursing Revalidation"
EXPORT_VERSION = "1.0.0"

STATUS_LABELS: dict[RevalidationStatus, str] = {
    RevalidationStatus.NOT_STARTED: "Not Started",
    RevalidationStatus.IN_PROGRESS: "In Progress",
    RevalidationStatus.COMPLETED: "Completed",
    RevalidationStatus.ATTENTION: "Attention Needed",
}


class BackupFormatError(ValueError):
    pass


async def build_export(
    repo: RecordRepo, user_id: str, *, now: datetime | None = None
) -> dict:
    return {
        "application": APPLICATION,
        "version": EXPORT_VERSION,
        "exported_at": (now or datetime.now(UTC)).isoformat(),
        "user_id": user_id,
        "data": await repo.export_all(user_id),
    }


def parse_backup(document: dict) -> dict[str, list[dict]]:
    """Return the ``data`` section of a backup, rejecting foreign documents."""
    if not isinstance(document, dict) or not isinstance(document.get("data"), dict):
        raise BackupFormatError("Invalid backup file format")
    application = document.get("application")
    if application is not None and application != APPLICATION:
        raise BackupFormatError("This backup is not compatible with RevalPro")
    return document["data"]


async def restore_export(repo: RecordRepo, user_id: str, document: dict) -> dict[str, int]:
    return await repo.import_all(user_id, parse_backup(document))


def build_summary(
    progress: RevalidationProgress,
    profile: UserProfile | None,
    *,
    today: date | None = None,
) -> dict:
    expiry = profile.expiry_date if profile else None
    return {
        "name": profile.name if profile else None,
        "registration_number": profile.registration_number if profile else None,
        "expiry_date": expiry.isoformat() if expiry else None,
        "time_remaining": (
            human_readable_period(today or date.today(), expiry) if expiry else None
        ),
        "overall_percentage": progress.overall_percentage,
        "status": progress.status.value,
        "status_label": STATUS_LABELS[progress.status],
        "days_remaining": progress.days_remaining,
        "notification_phase": (
            notification_phase(progress.days_remaining)
            if progress.days_remaining is not None
            else None
        ),
        "categories": [
            {
                "name": c.name,
                "required": c.required,
                "completed": c.completed,
                "percentage": round(c.percentage, 1),
                "status": requirement_status(c).value,
            }
            for c in progress.categories()
        ],
    }
