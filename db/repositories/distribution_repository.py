"""
Repository for distribution lifecycle persistence and lookup.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.base import utc_now
from db.models.distribution import Distribution, DistributionStatus
from db.repositories.errors import DistributionStateError, SummaryMismatchError


class DistributionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_distribution(
        self,
        *,
        filename: str,
        original_name: str,
        total_items: int,
        uploaded_by: uuid.UUID,
    ) -> Distribution:
        distribution = Distribution(
            filename=filename,
            original_name=original_name,
            total_items=total_items,
            uploaded_by=uploaded_by,
            status=DistributionStatus.PROCESSING,
        )
        self._session.add(distribution)
        self._session.flush()
        self._session.refresh(distribution)
        return distribution

    def get_distribution(self, distribution_id: uuid.UUID) -> Distribution | None:
        return self._session.get(Distribution, distribution_id)

    def list_distributions(
        self,
        *,
        uploaded_by: uuid.UUID | None = None,
        status: str | None = None,
        limit: int = 100,
    ) -> list[Distribution]:
        stmt: Select[tuple[Distribution]] = select(Distribution)

        if uploaded_by is not None:
            stmt = stmt.where(Distribution.uploaded_by == uploaded_by)
        if status:
            stmt = stmt.where(Distribution.status == status)

        stmt = stmt.order_by(
            Distribution.created_at.desc(),
            Distribution.id.desc(),
        ).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def mark_completed(
        self,
        *,
        distribution_id: uuid.UUID,
        total_agents: int,
        items_per_agent: int,
        remainder_items: int,
    ) -> Distribution | None:
        distribution = self.get_distribution(distribution_id)
        if distribution is None:
            return None
        if distribution.status != DistributionStatus.PROCESSING:
            raise DistributionStateError(
                f"Distribution {distribution_id} is already {distribution.status}"
            )

        covered = total_agents * items_per_agent + remainder_items
        if covered != distribution.total_items:
            raise SummaryMismatchError(
                f"Distribution summary covers {covered} items, "
                f"expected {distribution.total_items}"
            )

        distribution.status = DistributionStatus.COMPLETED
        distribution.total_agents = total_agents
        distribution.items_per_agent = items_per_agent
        distribution.remainder_items = remainder_items
        distribution.processing_error = None
        distribution.completed_at = utc_now()
        self._session.flush()
        return distribution

    def mark_failed(
        self,
        *,
        distribution_id: uuid.UUID,
        error_message: str,
    ) -> Distribution | None:
        distribution = self.get_distribution(distribution_id)
        if distribution is None:
            return None
        if distribution.status == DistributionStatus.COMPLETED:
            raise DistributionStateError(
                f"Distribution {distribution_id} is already {distribution.status}"
            )

        distribution.status = DistributionStatus.FAILED
        distribution.processing_error = error_message
        distribution.total_agents = None
        distribution.items_per_agent = None
        distribution.remainder_items = None
        distribution.completed_at = None
        self._session.flush()
        return distribution
