"""
app/schemas/uploads.py

Response schemas for upload validation and commit endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AgentDistributionResponse(BaseModel):
    agent_id: UUID
    agent_name: str
    agent_email: str
    item_count: int = Field(..., ge=0)


class DistributionPreviewResponse(BaseModel):
    """
    Per-agent split of one upload, computed or committed.
    """

    total_items: int = Field(..., ge=0)
    total_agents: int = Field(..., ge=1)
    items_per_agent: int = Field(..., ge=0)
    remainder_items: int = Field(..., ge=0)
    agents: list[AgentDistributionResponse] = Field(default_factory=list)


class CommittedDistributionResponse(DistributionPreviewResponse):
    tasks_created: int = Field(..., ge=0)


class FileInfoResponse(BaseModel):
    original_name: str
    stored_name: str
    format: str
    content_type: str | None = None
    size: int = Field(..., ge=1)
    received_at: datetime


class UploadPreviewResponse(BaseModel):
    """
    API response model for the validate/preview endpoint.
    """

    message: str
    filename: str
    total_rows: int = Field(..., ge=1)
    preview_rows: list[dict[str, str]] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)
    file_info: FileInfoResponse
    distribution: DistributionPreviewResponse | None = None
    active_agents: int = Field(..., ge=0)


class UploadCommitResponse(BaseModel):
    """
    API response model for a committed upload.
    """

    message: str
    distribution_id: UUID
    filename: str
    total_items: int = Field(..., ge=1)
    distribution: CommittedDistributionResponse
