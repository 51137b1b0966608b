"""Backup export and restore.

GET /v1/export returns every stored collection for the caller; POST
/v1/import replaces them all with the posted backup.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, HTTPException, status

from revalpro.api.dependencies import CurrentUser, Repo
from revalpro.models.records import RecordValidationError
from revalpro.services.summary_export import (
    BackupFormatError,
    build_export,
    restore_export,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["export"])


@router.get("/export")
async def export_data(principal: CurrentUser, repo: Repo) -> dict:
    return await build_export(repo, principal.user_id)


@router.post("/import")
async def import_data(
    principal: CurrentUser, repo: Repo, document: dict = Body(...)
) -> dict:
    try:
        counts = await restore_export(repo, principal.user_id, document)
    except (BackupFormatError, RecordValidationError) as e:
        logger.warning("Import rejected for user=%s: %s", principal.user_id, e)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None
    return {"imported": counts}
