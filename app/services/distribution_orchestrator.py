"""
app/services/distribution_orchestrator.py

Turns a computed distribution plan into persisted tasks.

The orchestrator runs against a Distribution that already exists in
`processing` status. Tasks are written in one bulk insert and the
`completed` transition is applied in the same transaction, so either every
task for the upload exists and the Distribution is completed, or nothing was
written. Failures come back as a `DistributionFailed` result; the caller
decides how to record them.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from app.domain.contact import ContactItem
from app.domain.distribution import (
    AgentSnapshot,
    DistributionFailed,
    DistributionOutcome,
    DistributionPlan,
    DistributionSucceeded,
    TaskCreate,
)
from app.logging_utils import log_event
from app.repositories.distribution_store import DistributionStore
from app.services.distribution_engine import MAX_TARGET_AGENT_COUNT, plan_distribution

logger = logging.getLogger(__name__)


def build_task_payloads(
    plan: DistributionPlan,
    *,
    distribution_id: uuid.UUID,
) -> list[TaskCreate]:
    """
    Flatten a plan into task rows, agent by agent in roster order.
    """

    return [
        TaskCreate(
            distribution_id=distribution_id,
            agent_id=assignment.agent.id,
            first_name=item.first_name,
            phone=item.phone,
            notes=item.notes,
            position=position,
        )
        for position, (assignment, item) in enumerate(
            (assignment, item)
            for assignment in plan.assignments
            for item in assignment.items
        )
    ]


class DistributionOrchestrator:
    """
    Runs the distribution engine and persists its result all-or-nothing.
    """

    def __init__(self, *, max_agent_count: int = MAX_TARGET_AGENT_COUNT) -> None:
        self._max_agent_count = max_agent_count

    def run(
        self,
        *,
        store: DistributionStore,
        distribution_id: uuid.UUID,
        items: Sequence[ContactItem],
        agents: Sequence[AgentSnapshot],
        target_agent_count: int | None = None,
    ) -> DistributionOutcome:
        try:
            plan = plan_distribution(
                items,
                agents,
                target_agent_count=target_agent_count,
                max_agent_count=self._max_agent_count,
            )
            payloads = build_task_payloads(plan, distribution_id=distribution_id)

            with store.transaction():
                tasks_created = store.bulk_create_tasks(payloads)
                if tasks_created != len(items):
                    raise RuntimeError(
                        f"Created {tasks_created} tasks for {len(items)} items"
                    )
                store.mark_completed(distribution_id, plan.summary)
        except Exception as exc:  # noqa: BLE001
            reason = str(exc) or exc.__class__.__name__
            logger.exception("Distribution run failed distribution_id=%s", distribution_id)
            return DistributionFailed(reason=reason)

        log_event(
            logger,
            logging.INFO,
            "distribution_completed",
            distribution_id=distribution_id,
            tasks_created=tasks_created,
            **plan.summary.to_dict(),
        )
        return DistributionSucceeded(plan=plan, tasks_created=tasks_created)
