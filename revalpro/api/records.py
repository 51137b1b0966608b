"""CRUD endpoints for the four evidence collections.

    /v1/practice-hours   PracticeHoursRecord
    /v1/cpd              CpdRecord
    /v1/feedback         FeedbackRecord
    /v1/reflections      ReflectiveAccount

Request bodies are shape-checked by pydantic and then decoded through the
record's own ``from_dict`` so API writes and stored reads share one set of
rules.
"""

import datetime
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from revalpro.api.dependencies import CurrentUser, Repo
from revalpro.models.records import (
    CpdRecord,
    FeedbackRecord,
    PracticeHoursRecord,
    RecordValidationError,
    ReflectiveAccount,
    decode_record,
)

logger = logging.getLogger(__name__)


def decode_or_422(kind: str, payload: dict) -> Any:
    try:
        return decode_record(kind, payload)
    except RecordValidationError as e:
        logger.info("Rejected %s payload: %s", kind, e, extra={"record_kind": kind})
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class PracticeHoursIn(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    hours: float
    work_setting: str
    scope: str
    registration: str
    notes: str | None = None
    weekly_config_id: int | None = None


class PracticeHoursOut(PracticeHoursIn):
    id: int


class CpdIn(BaseModel):
    date: datetime.date
    title: str
    hours: float
    participatory: bool = False
    description: str | None = None
    relevance_to_code: str | None = None


class CpdOut(CpdIn):
    id: int


class FeedbackIn(BaseModel):
    date: datetime.date
    source: str
    content: str
    reflection: str | None = None


class FeedbackOut(FeedbackIn):
    id: int


class ReflectionIn(BaseModel):
    date: datetime.date
    title: str
    experience: str
    what_learned: str
    how_changed: str
    code_relation: str
    reflective_model: str = "Standard"


class ReflectionOut(ReflectionIn):
    id: int


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------


def collection_router(
    prefix: str,
    kind: str,
    model_in: type[BaseModel],
    model_out: type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[kind])

    def _not_found(record_id: int) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{kind} record {record_id} not found",
        )

    @router.get("", response_model=list[model_out])
    async def list_records(principal: CurrentUser, repo: Repo) -> list[dict]:
        return [r.to_dict() for r in await repo.list(principal.user_id, kind)]

    @router.post("", response_model=model_out, status_code=status.HTTP_201_CREATED)
    async def create_record(
        body: model_in, principal: CurrentUser, repo: Repo  # type: ignore[valid-type]
    ) -> dict:
        record = decode_or_422(kind, body.model_dump())  # type: ignore[attr-defined]
        stored = await repo.add(principal.user_id, record)
        logger.info(
            "Created record id=%d for user=%s",
            stored.id,
            principal.user_id,
            extra={"record_kind": kind},
        )
        return stored.to_dict()

    @router.get("/{record_id}", response_model=model_out)
    async def get_record(record_id: int, principal: CurrentUser, repo: Repo) -> dict:
        record = await repo.get(principal.user_id, kind, record_id)
        if record is None:
            raise _not_found(record_id)
        return record.to_dict()

    @router.put("/{record_id}", response_model=model_out)
    async def update_record(
        record_id: int,
        body: model_in,  # type: ignore[valid-type]
        principal: CurrentUser,
        repo: Repo,
    ) -> dict:
        record = decode_or_422(kind, body.model_dump())  # type: ignore[attr-defined]
        stored = await repo.update(principal.user_id, record_id, record)
        if stored is None:
            raise _not_found(record_id)
        return stored.to_dict()

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_record(record_id: int, principal: CurrentUser, repo: Repo) -> None:
        if not await repo.remove(principal.user_id, kind, record_id):
            raise _not_found(record_id)

    return router


practice_hours_router = collection_router(
    "/v1/practice-hours", PracticeHoursRecord.kind, PracticeHoursIn, PracticeHoursOut
)
cpd_router = collection_router("/v1/cpd", CpdRecord.kind, CpdIn, CpdOut)
feedback_router = collection_router(
    "/v1/feedback", FeedbackRecord.kind, FeedbackIn, FeedbackOut
)
reflections_router = collection_router(
    "/v1/reflections", ReflectiveAccount.kind, ReflectionIn, ReflectionOut
)
