"""
app/repositories/distribution_store.py

Persistence boundary used by the upload pipeline.

`DistributionStore` is the protocol the pipeline service and the
orchestrator depend on; `SQLDistributionStore` implements it on top of the
SQLAlchemy repositories in `db.repositories`.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import ContextManager, Protocol

from sqlalchemy.orm import Session

from app.domain.distribution import (
    AgentSnapshot,
    DistributionRecord,
    DistributionSummary,
    TaskCreate,
    TaskRecord,
)
from db.models.agent import Agent
from db.models.distribution import Distribution
from db.models.task import Task
from db.repositories.agent_repository import AgentRepository
from db.repositories.distribution_repository import DistributionRepository
from db.repositories.task_repository import TaskRepository


class DistributionStore(Protocol):
    """
    Storage operations needed to run and inspect distributions.

    Writes only become durable when made inside `transaction()`; leaving the
    block with an exception discards everything written in it.
    """

    def transaction(self) -> ContextManager[None]:
        ...

    def list_active_agents(self) -> list[AgentSnapshot]:
        ...

    def get_agents(self, agent_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, AgentSnapshot]:
        ...

    def create_distribution(
        self,
        *,
        filename: str,
        original_name: str,
        total_items: int,
        uploaded_by: uuid.UUID,
    ) -> DistributionRecord:
        ...

    def bulk_create_tasks(self, tasks: Sequence[TaskCreate]) -> int:
        ...

    def mark_completed(
        self,
        distribution_id: uuid.UUID,
        summary: DistributionSummary,
    ) -> DistributionRecord:
        ...

    def mark_failed(self, distribution_id: uuid.UUID, reason: str) -> DistributionRecord:
        ...

    def get_distribution(self, distribution_id: uuid.UUID) -> DistributionRecord | None:
        ...

    def list_distributions(
        self,
        *,
        uploaded_by: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[DistributionRecord]:
        ...

    def list_tasks(self, distribution_id: uuid.UUID) -> list[TaskRecord]:
        ...


def agent_to_snapshot(agent: Agent) -> AgentSnapshot:
    return AgentSnapshot(id=agent.id, name=agent.name, email=agent.email)


def distribution_to_record(distribution: Distribution) -> DistributionRecord:
    summary = None
    if distribution.total_agents is not None:
        summary = DistributionSummary(
            total_agents=distribution.total_agents,
            items_per_agent=distribution.items_per_agent or 0,
            remainder_items=distribution.remainder_items or 0,
        )
    return DistributionRecord(
        id=distribution.id,
        filename=distribution.filename,
        original_name=distribution.original_name,
        total_items=distribution.total_items,
        status=distribution.status,
        uploaded_by=distribution.uploaded_by,
        created_at=distribution.created_at,
        completed_at=distribution.completed_at,
        processing_error=distribution.processing_error,
        summary=summary,
    )


def task_to_record(task: Task) -> TaskRecord:
    return TaskRecord(
        id=task.id,
        distribution_id=task.distribution_id,
        agent_id=task.agent_id,
        first_name=task.first_name,
        phone=task.phone,
        notes=task.notes,
        status=task.status,
        position=task.position,
        assigned_at=task.assigned_at,
        completed_at=task.completed_at,
    )


class SQLDistributionStore:
    """
    `DistributionStore` backed by one SQLAlchemy session.
    """

    def __init__(self, session: Session, *, task_batch_size: int = 1000) -> None:
        self._session = session
        self._agents = AgentRepository(session)
        self._distributions = DistributionRepository(session)
        self._tasks = TaskRepository(session)
        self._task_batch_size = max(1, task_batch_size)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # Reads outside a block autobegin a transaction; close it first so
        # this block commits or rolls back on its own.
        if self._session.in_transaction():
            self._session.commit()
        with self._session.begin():
            yield

    def list_active_agents(self) -> list[AgentSnapshot]:
        return [agent_to_snapshot(agent) for agent in self._agents.list_active()]

    def get_agents(self, agent_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, AgentSnapshot]:
        return {
            agent_id: agent_to_snapshot(agent)
            for agent_id, agent in self._agents.get_many(agent_ids).items()
        }

    def create_distribution(
        self,
        *,
        filename: str,
        original_name: str,
        total_items: int,
        uploaded_by: uuid.UUID,
    ) -> DistributionRecord:
        distribution = self._distributions.create_distribution(
            filename=filename,
            original_name=original_name,
            total_items=total_items,
            uploaded_by=uploaded_by,
        )
        return distribution_to_record(distribution)

    def bulk_create_tasks(self, tasks: Sequence[TaskCreate]) -> int:
        rows = [
            {
                "distribution_id": task.distribution_id,
                "agent_id": task.agent_id,
                "first_name": task.first_name,
                "phone": task.phone,
                "notes": task.notes,
                "position": task.position,
            }
            for task in tasks
        ]
        return self._tasks.bulk_create_tasks(rows, batch_size=self._task_batch_size)

    def mark_completed(
        self,
        distribution_id: uuid.UUID,
        summary: DistributionSummary,
    ) -> DistributionRecord:
        distribution = self._distributions.mark_completed(
            distribution_id=distribution_id,
            total_agents=summary.total_agents,
            items_per_agent=summary.items_per_agent,
            remainder_items=summary.remainder_items,
        )
        if distribution is None:
            raise LookupError(f"Distribution not found: {distribution_id}")
        return distribution_to_record(distribution)

    def mark_failed(self, distribution_id: uuid.UUID, reason: str) -> DistributionRecord:
        distribution = self._distributions.mark_failed(
            distribution_id=distribution_id,
            error_message=reason,
        )
        if distribution is None:
            raise LookupError(f"Distribution not found: {distribution_id}")
        return distribution_to_record(distribution)

    def get_distribution(self, distribution_id: uuid.UUID) -> DistributionRecord | None:
        distribution = self._distributions.get_distribution(distribution_id)
        if distribution is None:
            return None
        return distribution_to_record(distribution)

    def list_distributions(
        self,
        *,
        uploaded_by: uuid.UUID | None = None,
        limit: int = 100,
    ) -> list[DistributionRecord]:
        return [
            distribution_to_record(distribution)
            for distribution in self._distributions.list_distributions(
                uploaded_by=uploaded_by,
                limit=limit,
            )
        ]

    def list_tasks(self, distribution_id: uuid.UUID) -> list[TaskRecord]:
        return [task_to_record(task) for task in self._tasks.list_by_distribution(distribution_id)]
