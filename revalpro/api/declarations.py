"""Singleton declarations: one current record per user, replaced on PUT."""

import datetime
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from revalpro.api.dependencies import CurrentUser, Repo
from revalpro.api.records import decode_or_422
from revalpro.models.records import (
    Confirmation,
    HealthDeclaration,
    ReflectiveDiscussion,
    UserProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["declarations"])


class HealthDeclarationIn(BaseModel):
    good_health: bool | None = None
    health_changes: str | None = None
    good_character: bool | None = None
    character_changes: str | None = None
    completed: bool = False


class HealthDeclarationOut(HealthDeclarationIn):
    id: int


class ConfirmationIn(BaseModel):
    confirmer_name: str
    confirmer_relationship: str
    confirmer_email: str | None = None
    confirmer_nmc_pin: str | None = None
    confirmation_date: datetime.date | None = None
    completed: bool = False


class ConfirmationOut(ConfirmationIn):
    id: int


class DiscussionIn(BaseModel):
    date: datetime.date
    partner_name: str
    partner_nmc_pin: str
    completed: bool = False
    notes: str | None = None


class DiscussionOut(DiscussionIn):
    id: int


class ProfileIn(BaseModel):
    name: str
    registration_number: str | None = None
    expiry_date: datetime.date | None = None
    job_title: str | None = None


class ProfileOut(ProfileIn):
    id: int


async def _get_current(repo: Repo, user_id: str, kind: str, label: str) -> dict:
    record = await repo.current(user_id, kind)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"No {label} recorded"
        )
    return record.to_dict()


async def _put_current(repo: Repo, user_id: str, kind: str, body: BaseModel) -> dict:
    record: Any = decode_or_422(kind, body.model_dump())
    stored = await repo.put_current(user_id, record)
    logger.info("Saved %s for user=%s", kind, user_id, extra={"record_kind": kind})
    return stored.to_dict()


@router.get("/v1/declarations/health", response_model=HealthDeclarationOut)
async def get_health(principal: CurrentUser, repo: Repo) -> dict:
    return await _get_current(
        repo, principal.user_id, HealthDeclaration.kind, "health declaration"
    )


@router.put("/v1/declarations/health", response_model=HealthDeclarationOut)
async def put_health(
    body: HealthDeclarationIn, principal: CurrentUser, repo: Repo
) -> dict:
    return await _put_current(repo, principal.user_id, HealthDeclaration.kind, body)


@router.get("/v1/declarations/confirmation", response_model=ConfirmationOut)
async def get_confirmation(principal: CurrentUser, repo: Repo) -> dict:
    return await _get_current(
        repo, principal.user_id, Confirmation.kind, "confirmation"
    )


@router.put("/v1/declarations/confirmation", response_model=ConfirmationOut)
async def put_confirmation(
    body: ConfirmationIn, principal: CurrentUser, repo: Repo
) -> dict:
    return await _put_current(repo, principal.user_id, Confirmation.kind, body)


@router.get("/v1/declarations/discussion", response_model=DiscussionOut)
async def get_discussion(principal: CurrentUser, repo: Repo) -> dict:
    return await _get_current(
        repo, principal.user_id, ReflectiveDiscussion.kind, "reflective discussion"
    )


@router.put("/v1/declarations/discussion", response_model=DiscussionOut)
async def put_discussion(body: DiscussionIn, principal: CurrentUser, repo: Repo) -> dict:
    return await _put_current(repo, principal.user_id, ReflectiveDiscussion.kind, body)


@router.get("/v1/profile", response_model=ProfileOut, tags=["profile"])
async def get_profile(principal: CurrentUser, repo: Repo) -> dict:
    return await _get_current(repo, principal.user_id, UserProfile.kind, "profile")


@router.put("/v1/profile", response_model=ProfileOut, tags=["profile"])
async def put_profile(body: ProfileIn, principal: CurrentUser, repo: Repo) -> dict:
    return await _put_current(repo, principal.user_id, UserProfile.kind, body)
