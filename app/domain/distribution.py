"""
app/domain/distribution.py

Value objects for distribution planning and its outcome.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Union

from app.domain.contact import ContactItem


@dataclass(frozen=True)
class AgentSnapshot:
    """
    Read-only view of one active agent, in roster order.
    """

    id: uuid.UUID
    name: str
    email: str


@dataclass(frozen=True)
class DistributionSummary:
    total_agents: int
    items_per_agent: int
    remainder_items: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_agents": self.total_agents,
            "items_per_agent": self.items_per_agent,
            "remainder_items": self.remainder_items,
        }


@dataclass(frozen=True)
class AgentAssignment:
    """
    Contiguous slice of items assigned to one agent.
    """

    agent: AgentSnapshot
    items: tuple[ContactItem, ...]

    @property
    def item_count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class DistributionPlan:
    """
    Complete, side-effect-free partition of items across agents.
    """

    summary: DistributionSummary
    assignments: tuple[AgentAssignment, ...]

    @property
    def total_items(self) -> int:
        return sum(assignment.item_count for assignment in self.assignments)

    def item_counts(self) -> list[int]:
        return [assignment.item_count for assignment in self.assignments]

    def to_preview(self) -> dict[str, Any]:
        return {
            "total_items": self.total_items,
            **self.summary.to_dict(),
            "agents": [
                {
                    "agent_id": assignment.agent.id,
                    "agent_name": assignment.agent.name,
                    "agent_email": assignment.agent.email,
                    "item_count": assignment.item_count,
                }
                for assignment in self.assignments
            ],
        }


@dataclass(frozen=True)
class TaskCreate:
    """
    Payload for one task row in a bulk insert.
    """

    distribution_id: uuid.UUID
    agent_id: uuid.UUID
    first_name: str
    phone: str
    notes: str
    position: int = 0


@dataclass(frozen=True)
class DistributionSucceeded:
    plan: DistributionPlan
    tasks_created: int
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class DistributionFailed:
    reason: str
    ok: bool = field(default=False, init=False)


DistributionOutcome = Union[DistributionSucceeded, DistributionFailed]


@dataclass(frozen=True)
class DistributionRecord:
    """
    Persisted distribution as seen by the pipeline and the API.
    """

    id: uuid.UUID
    filename: str
    original_name: str
    total_items: int
    status: str
    uploaded_by: uuid.UUID
    created_at: datetime | None = None
    completed_at: datetime | None = None
    processing_error: str | None = None
    summary: DistributionSummary | None = None


@dataclass(frozen=True)
class TaskRecord:
    id: uuid.UUID
    distribution_id: uuid.UUID
    agent_id: uuid.UUID
    first_name: str
    phone: str
    notes: str
    status: str
    position: int = 0
    assigned_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class AgentTaskGroup:
    agent_id: uuid.UUID
    agent_name: str | None
    agent_email: str | None
    tasks: tuple[TaskRecord, ...]

    @property
    def task_count(self) -> int:
        return len(self.tasks)


@dataclass(frozen=True)
class DistributionDetail:
    """
    A distribution with its tasks grouped per agent in assignment order.
    """

    distribution: DistributionRecord
    agents: tuple[AgentTaskGroup, ...]

    @property
    def tasks_created(self) -> int:
        return sum(group.task_count for group in self.agents)
