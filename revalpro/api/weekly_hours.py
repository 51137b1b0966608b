"""Weekly hours calculator endpoints.

POST /v1/weekly-hours/preview runs the allocator statelessly: weeks are
generated for the range, ``weekly_hours`` pro-rated across them and any
adjustments applied in order.  POST /configs does the same and saves the
result so a practice-hours record can reference it by id.
"""

import datetime
import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from revalpro.api.dependencies import CurrentUser, Repo
from revalpro.core.config import SETTINGS
from revalpro.models.weekly_hours import WeeklyHoursConfig
from revalpro.services.weekly_hours import WeeklyHoursAllocator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/weekly-hours", tags=["weekly-hours"])


class AdjustmentIn(BaseModel):
    week_index: int
    hours: float
    reason: str


class WeeklyHoursIn(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    weekly_hours: float | None = Field(default=None, ge=0, le=168)
    adjustments: list[AdjustmentIn] = []
    today: datetime.date | None = None


class AdjustmentOut(BaseModel):
    date: datetime.date
    hours: float
    reason: str


class WeekOut(BaseModel):
    week_start: datetime.date
    week_end: datetime.date
    days_in_week: int
    scheduled_hours: float
    actual_hours: float
    adjustments: list[AdjustmentOut]
    is_completed: bool


class WeeklyHoursPreviewOut(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    weekly_hours: float
    total_hours: float
    completed_hours: float
    pending_hours: float
    ignored_adjustments: int
    weeks: list[WeekOut]


class WeeklyHoursConfigOut(BaseModel):
    id: int
    start_date: datetime.date
    end_date: datetime.date
    weekly_hours: float
    total_hours: float
    breakdown: list[WeekOut]


def _run(body: WeeklyHoursIn) -> tuple[WeeklyHoursAllocator, int]:
    weekly_hours = (
        body.weekly_hours
        if body.weekly_hours is not None
        else SETTINGS.default_weekly_hours
    )
    allocator = WeeklyHoursAllocator(
        body.start_date, body.end_date, weekly_hours, today=body.today
    )
    ignored = 0
    for adj in body.adjustments:
        try:
            applied = allocator.add_adjustment(adj.week_index, adj.hours, adj.reason)
        except IndexError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"week_index {adj.week_index} is outside the "
                f"{len(allocator.weeks)} generated weeks",
            ) from None
        if not applied:
            ignored += 1
    return allocator, ignored


@router.post("/preview", response_model=WeeklyHoursPreviewOut)
async def preview(body: WeeklyHoursIn, _principal: CurrentUser) -> dict:
    allocator, ignored = _run(body)
    return {
        "start_date": allocator.start_date,
        "end_date": allocator.end_date,
        "weekly_hours": allocator.weekly_hours,
        "total_hours": allocator.get_total(),
        "completed_hours": allocator.get_completed_total(),
        "pending_hours": allocator.get_pending_total(),
        "ignored_adjustments": ignored,
        "weeks": [w.to_dict() for w in allocator.breakdown()],
    }


@router.post(
    "/configs",
    response_model=WeeklyHoursConfigOut,
    status_code=status.HTTP_201_CREATED,
)
async def save_config(body: WeeklyHoursIn, principal: CurrentUser, repo: Repo) -> dict:
    allocator, _ = _run(body)
    config = WeeklyHoursConfig(
        start_date=allocator.start_date,
        end_date=allocator.end_date,
        weekly_hours=allocator.weekly_hours,
        breakdown=tuple(allocator.breakdown()),
        total_hours=allocator.get_total(),
    )
    stored = await repo.add(principal.user_id, config)
    logger.info(
        "Saved weekly hours config id=%d total=%.1f weeks=%d",
        stored.id,
        stored.total_hours,
        len(stored.breakdown),
        extra={"week_count": len(stored.breakdown)},
    )
    return stored.to_dict()


@router.get("/configs", response_model=list[WeeklyHoursConfigOut])
async def list_configs(principal: CurrentUser, repo: Repo) -> list[dict]:
    configs = await repo.list(principal.user_id, WeeklyHoursConfig.kind)
    return [c.to_dict() for c in configs]
