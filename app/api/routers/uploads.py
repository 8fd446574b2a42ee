"""
app/api/routers/uploads.py

Contact upload HTTP endpoints: validate/preview and commit.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import (
    get_distribution_store,
    get_raw_upload,
    get_target_agent_count,
    get_uploader_id,
)
from app.api.errors import to_http_exception
from app.domain.errors import PipelineError
from app.domain.upload import RawUpload
from app.repositories.distribution_store import DistributionStore
from app.schemas.uploads import (
    CommittedDistributionResponse,
    DistributionPreviewResponse,
    FileInfoResponse,
    UploadCommitResponse,
    UploadPreviewResponse,
)
from app.services.upload_pipeline_service import (
    UploadPipelineService,
    get_upload_pipeline_service,
)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("/validate", response_model=UploadPreviewResponse)
def validate_upload(
    uploader_id: UUID = Depends(get_uploader_id),
    raw: RawUpload = Depends(get_raw_upload),
    target_agent_count: int | None = Depends(get_target_agent_count),
    include_distribution: bool = Query(
        default=True,
        description="Include the distribution preview in the response",
    ),
    store: DistributionStore = Depends(get_distribution_store),
    pipeline: UploadPipelineService = Depends(get_upload_pipeline_service),
) -> UploadPreviewResponse:
    """
    Validate one file and preview its distribution without persisting anything.
    """

    try:
        preview = pipeline.preview(
            raw,
            store=store,
            target_agent_count=target_agent_count,
            include_distribution=include_distribution,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc

    if preview.distribution is None and include_distribution:
        message = "File is valid, but no active agents are available for distribution"
    else:
        message = "File is valid and ready for upload"

    return UploadPreviewResponse(
        message=message,
        filename=preview.filename,
        total_rows=preview.total_rows,
        preview_rows=preview.preview_rows,
        columns=preview.columns,
        file_info=FileInfoResponse(**preview.file_info),
        distribution=(
            DistributionPreviewResponse(**preview.distribution)
            if preview.distribution is not None
            else None
        ),
        active_agents=preview.active_agents,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadCommitResponse,
)
def upload_contacts(
    uploader_id: UUID = Depends(get_uploader_id),
    raw: RawUpload = Depends(get_raw_upload),
    target_agent_count: int | None = Depends(get_target_agent_count),
    store: DistributionStore = Depends(get_distribution_store),
    pipeline: UploadPipelineService = Depends(get_upload_pipeline_service),
) -> UploadCommitResponse:
    """
    Validate one file, distribute its contacts, and persist the tasks.
    """

    try:
        result = pipeline.commit(
            raw,
            store=store,
            uploaded_by=uploader_id,
            target_agent_count=target_agent_count,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc

    return UploadCommitResponse(
        message="File uploaded and distributed successfully",
        distribution_id=result.distribution_id,
        filename=result.filename,
        total_items=result.total_items,
        distribution=CommittedDistributionResponse(**result.distribution),
    )
