"""
Schemas for distribution listing and detail endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class DistributionSummaryResponse(BaseModel):
    total_agents: int
    items_per_agent: int
    remainder_items: int


class DistributionResponse(BaseModel):
    id: UUID
    filename: str
    original_name: str
    total_items: int
    status: str
    uploaded_by: UUID
    created_at: datetime | None = None
    completed_at: datetime | None = None
    processing_error: str | None = None
    summary: DistributionSummaryResponse | None = None


class DistributionListResponse(BaseModel):
    distributions: list[DistributionResponse] = Field(default_factory=list)


class TaskResponse(BaseModel):
    id: UUID
    first_name: str
    phone: str
    notes: str
    status: str
    position: int
    assigned_at: datetime | None = None
    completed_at: datetime | None = None


class AgentTasksResponse(BaseModel):
    agent_id: UUID
    agent_name: str | None = None
    agent_email: str | None = None
    task_count: int
    tasks: list[TaskResponse] = Field(default_factory=list)


class DistributionDetailResponse(BaseModel):
    distribution: DistributionResponse
    tasks_created: int
    agents: list[AgentTasksResponse] = Field(default_factory=list)
