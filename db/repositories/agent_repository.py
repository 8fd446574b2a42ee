"""
Read-only access to the agent roster.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.agent import Agent


class AgentRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_active(self) -> list[Agent]:
        """
        Active agents, oldest-created first; id breaks created_at ties.
        """

        stmt: Select[tuple[Agent]] = (
            select(Agent)
            .where(Agent.is_active.is_(True))
            .order_by(Agent.created_at.asc(), Agent.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def get_many(self, agent_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Agent]:
        if not agent_ids:
            return {}
        stmt = select(Agent).where(Agent.id.in_(list(agent_ids)))
        return {agent.id: agent for agent in self._session.scalars(stmt).all()}
