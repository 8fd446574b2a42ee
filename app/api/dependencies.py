"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends, File, Header, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app import failure_codes
from app.api.errors import to_http_exception
from app.domain.errors import InvalidTargetAgentCountError, NoFileError
from app.domain.upload import RawUpload
from app.repositories.distribution_store import DistributionStore, SQLDistributionStore
from app.services.upload_pipeline_service import (
    UploadPipelineService,
    get_upload_pipeline_service,
)
from db.session import get_db

UPLOADER_HEADER = "X-Uploader-Id"


def get_uploader_id(
    x_uploader_id: str | None = Header(default=None, alias=UPLOADER_HEADER),
) -> UUID:
    """
    Read the caller identity forwarded by the upstream gateway.
    """

    if not x_uploader_id or not x_uploader_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": failure_codes.UNAUTHORIZED,
                "message": f"{UPLOADER_HEADER} header is required.",
            },
        )
    try:
        return UUID(x_uploader_id.strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": failure_codes.UNAUTHORIZED,
                "message": f"{UPLOADER_HEADER} header must be a UUID.",
            },
        ) from exc


def get_raw_upload(
    file: UploadFile | None = File(default=None),
    pipeline: UploadPipelineService = Depends(get_upload_pipeline_service),
) -> RawUpload:
    """
    Buffer the uploaded file in memory, reading at most one byte past the limit.
    """

    if file is None:
        raise to_http_exception(NoFileError())

    try:
        content = file.file.read(pipeline.max_upload_bytes + 1)
    finally:
        file.file.close()

    return RawUpload(
        content=content,
        filename=file.filename,
        content_type=file.content_type,
    )


def get_distribution_store(db: Session = Depends(get_db)) -> DistributionStore:
    return SQLDistributionStore(db)


def get_target_agent_count(
    target_agent_count: str | None = Query(
        default=None,
        description="Number of agents to distribute across (1-10, default 5)",
    ),
) -> int | None:
    """
    Parse the optional target agent count; range checks happen in the pipeline.
    """

    if target_agent_count is None or not target_agent_count.strip():
        return None
    try:
        return int(target_agent_count.strip())
    except ValueError as exc:
        raise to_http_exception(
            InvalidTargetAgentCountError(
                "Target agent count must be a positive integer",
                details={"target_agent_count": target_agent_count},
            )
        ) from exc
