from __future__ import annotations

import datetime
import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from revalpro.api.dependencies import CurrentUser, Reminders, Repo
from revalpro.models.records import UserProfile
from revalpro.models.reminder import Reminder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reminders", tags=["reminders"])


class ReminderOut(BaseModel):
    id: str
    title: str
    message: str
    type: str
    priority: str
    scheduled_at: datetime.datetime
    is_read: bool


class ReminderSettingsModel(BaseModel):
    enabled: bool
    revalidation_reminders: bool
    weekly_progress: bool
    deadline_alerts: bool


class ReminderSettingsUpdate(BaseModel):
    enabled: bool | None = None
    revalidation_reminders: bool | None = None
    weekly_progress: bool | None = None
    deadline_alerts: bool | None = None


class ScheduleIn(BaseModel):
    revalidation: bool = True
    weekly_progress: bool = False
    cpd: bool = False
    reflection: bool = False


def _out(reminders: list[Reminder]) -> list[ReminderOut]:
    return [ReminderOut(**r.to_dict()) for r in reminders]


@router.get("", response_model=list[ReminderOut])
async def pending_reminders(principal: CurrentUser, service: Reminders) -> list[ReminderOut]:
    """Due, unread reminders in display order."""
    return _out(await service.pending(principal.user_id))


@router.post("/schedule", response_model=list[ReminderOut])
async def schedule_reminders(
    body: ScheduleIn,
    principal: CurrentUser,
    service: Reminders,
    repo: Repo,
) -> list[ReminderOut]:
    user_id = principal.user_id
    created: list[Reminder] = []

    if body.revalidation:
        profile = await repo.current(user_id, UserProfile.kind)
        if profile is None or profile.expiry_date is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Set a registration expiry date on the profile first",
            )
        created += await service.schedule_revalidation_reminders(
            user_id, profile.expiry_date
        )

    for wanted, schedule in (
        (body.weekly_progress, service.schedule_weekly_progress_reminder),
        (body.cpd, service.schedule_cpd_reminder),
        (body.reflection, service.schedule_reflection_reminder),
    ):
        if wanted:
            reminder = await schedule(user_id)
            if reminder is not None:
                created.append(reminder)

    return _out(created)


@router.post("/clear-old")
async def clear_old_reminders(principal: CurrentUser, service: Reminders) -> dict:
    return {"removed": await service.clear_old(principal.user_id)}


@router.get("/settings", response_model=ReminderSettingsModel)
async def get_settings(principal: CurrentUser, service: Reminders) -> dict:
    return (await service.get_settings(principal.user_id)).to_dict()


@router.put("/settings", response_model=ReminderSettingsModel)
async def update_settings(
    body: ReminderSettingsUpdate, principal: CurrentUser, service: Reminders
) -> dict:
    changes = body.model_dump(exclude_none=True)
    return (await service.update_settings(principal.user_id, **changes)).to_dict()


@router.post("/{reminder_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(reminder_id: str, principal: CurrentUser, service: Reminders) -> None:
    if not await service.mark_read(principal.user_id, reminder_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found"
        )
