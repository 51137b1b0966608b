"""Revalidation progress, recomputed from stored records on every read."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from revalpro.api.dependencies import CurrentUser, Repo
from revalpro.models.records import UserProfile
from revalpro.repos.record_repo import load_summary_data
from revalpro.services.progress import calculate_progress, requirement_status
from revalpro.services.summary_export import build_summary

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class CategoryOut(BaseModel):
    name: str
    required: float
    completed: float
    percentage: float
    status: str


class ProgressOut(BaseModel):
    overall_percentage: int
    status: str
    days_remaining: int | None
    timeline_percent: float | None
    categories: list[CategoryOut]


@router.get("", response_model=ProgressOut)
async def get_progress(
    principal: CurrentUser,
    repo: Repo,
    include_participatory: bool = False,
) -> ProgressOut:
    data = await load_summary_data(repo, principal.user_id)
    progress = calculate_progress(
        data, include_participatory_in_overall=include_participatory
    )
    return ProgressOut(
        overall_percentage=progress.overall_percentage,
        status=progress.status.value,
        days_remaining=progress.days_remaining,
        timeline_percent=progress.timeline_percent,
        categories=[
            CategoryOut(
                name=c.name,
                required=c.required,
                completed=c.completed,
                percentage=c.percentage,
                status=requirement_status(c).value,
            )
            for c in progress.categories()
        ],
    )


@router.get("/summary")
async def get_summary(
    principal: CurrentUser,
    repo: Repo,
    include_participatory: bool = False,
) -> dict:
    data = await load_summary_data(repo, principal.user_id)
    progress = calculate_progress(
        data, include_participatory_in_overall=include_participatory
    )
    profile = await repo.current(principal.user_id, UserProfile.kind)
    return build_summary(progress, profile)
