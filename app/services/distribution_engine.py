"""
app/services/distribution_engine.py

Deterministic partition of validated contacts across the active roster.

Pure functions only: no database access, no clock, no randomness. The same
items and the same roster order always produce the same plan.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from app.domain.contact import ContactItem
from app.domain.distribution import (
    AgentAssignment,
    AgentSnapshot,
    DistributionPlan,
    DistributionSummary,
)
from app.domain.errors import InvalidTargetAgentCountError, NoActiveAgentsError

MAX_TARGET_AGENT_COUNT = 10


def resolve_target_agent_count(value: Any, *, default: int, maximum: int) -> int:
    """
    Validate the caller's target agent count, falling back to `default`.
    """

    if value is None:
        return default

    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidTargetAgentCountError(
            "Target agent count must be a positive integer",
            details={"target_agent_count": value, "maximum": maximum},
        )
    if value > maximum:
        raise InvalidTargetAgentCountError(
            f"Target agent count cannot exceed {maximum}",
            details={"target_agent_count": value, "maximum": maximum},
        )
    return value


def split_counts(total_items: int, total_agents: int) -> list[int]:
    """
    Per-agent item counts: the first `total_items % total_agents` agents get
    one item more than the base share.
    """

    if total_agents < 1:
        raise NoActiveAgentsError()
    base, remainder = divmod(total_items, total_agents)
    return [base + (1 if position < remainder else 0) for position in range(total_agents)]


def plan_distribution(
    items: Sequence[ContactItem],
    agents: Sequence[AgentSnapshot],
    *,
    target_agent_count: int | None = None,
    max_agent_count: int = MAX_TARGET_AGENT_COUNT,
) -> DistributionPlan:
    """
    Assign every item to exactly one agent in contiguous, file-ordered slices.

    Only the first `target_agent_count` agents of the roster take part when
    the target is smaller than the roster. The roster is not re-sorted.
    A target outside 1..`max_agent_count` raises InvalidTargetAgentCountError
    before the roster is looked at.
    """

    if target_agent_count is not None:
        target_agent_count = resolve_target_agent_count(
            target_agent_count,
            default=max_agent_count,
            maximum=max_agent_count,
        )

    if not agents:
        raise NoActiveAgentsError()
    if not items:
        raise ValueError("Items are required and cannot be empty.")

    participating = list(agents if target_agent_count is None else agents[:target_agent_count])
    if not participating:
        raise NoActiveAgentsError()

    counts = split_counts(len(items), len(participating))
    base, remainder = divmod(len(items), len(participating))

    assignments: list[AgentAssignment] = []
    cursor = 0
    for agent, count in zip(participating, counts):
        assignments.append(
            AgentAssignment(agent=agent, items=tuple(items[cursor:cursor + count]))
        )
        cursor += count

    return DistributionPlan(
        summary=DistributionSummary(
            total_agents=len(participating),
            items_per_agent=base,
            remainder_items=remainder,
        ),
        assignments=tuple(assignments),
    )
