"""
Distribution inspection endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_distribution_store, get_uploader_id
from app.api.errors import to_http_exception
from app.domain.distribution import DistributionRecord, TaskRecord
from app.domain.errors import PipelineError
from app.repositories.distribution_store import DistributionStore
from app.schemas.distributions import (
    AgentTasksResponse,
    DistributionDetailResponse,
    DistributionListResponse,
    DistributionResponse,
    DistributionSummaryResponse,
    TaskResponse,
)
from app.services.upload_pipeline_service import (
    UploadPipelineService,
    get_upload_pipeline_service,
)

router = APIRouter(prefix="/api/distributions", tags=["distributions"])


@router.get("", response_model=DistributionListResponse)
def list_distributions(
    uploader_id: UUID = Depends(get_uploader_id),
    limit: int = Query(default=100, ge=1, le=500, description="Max distributions returned"),
    store: DistributionStore = Depends(get_distribution_store),
    pipeline: UploadPipelineService = Depends(get_upload_pipeline_service),
) -> DistributionListResponse:
    records = pipeline.list_distributions(store=store, uploaded_by=uploader_id, limit=limit)
    return DistributionListResponse(
        distributions=[_to_distribution_response(record) for record in records]
    )


@router.get("/{distribution_id}", response_model=DistributionDetailResponse)
def get_distribution(
    distribution_id: UUID,
    uploader_id: UUID = Depends(get_uploader_id),
    store: DistributionStore = Depends(get_distribution_store),
    pipeline: UploadPipelineService = Depends(get_upload_pipeline_service),
) -> DistributionDetailResponse:
    try:
        detail = pipeline.get_distribution_detail(
            store=store,
            distribution_id=distribution_id,
            uploaded_by=uploader_id,
        )
    except PipelineError as exc:
        raise to_http_exception(exc) from exc

    return DistributionDetailResponse(
        distribution=_to_distribution_response(detail.distribution),
        tasks_created=detail.tasks_created,
        agents=[
            AgentTasksResponse(
                agent_id=group.agent_id,
                agent_name=group.agent_name,
                agent_email=group.agent_email,
                task_count=group.task_count,
                tasks=[_to_task_response(task) for task in group.tasks],
            )
            for group in detail.agents
        ],
    )


def _to_distribution_response(record: DistributionRecord) -> DistributionResponse:
    return DistributionResponse(
        id=record.id,
        filename=record.filename,
        original_name=record.original_name,
        total_items=record.total_items,
        status=record.status,
        uploaded_by=record.uploaded_by,
        created_at=record.created_at,
        completed_at=record.completed_at,
        processing_error=record.processing_error,
        summary=(
            DistributionSummaryResponse(**record.summary.to_dict())
            if record.summary is not None
            else None
        ),
    )


def _to_task_response(task: TaskRecord) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        first_name=task.first_name,
        phone=task.phone,
        notes=task.notes,
        status=task.status,
        position=task.position,
        assigned_at=task.assigned_at,
        completed_at=task.completed_at,
    )
