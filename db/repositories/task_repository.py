"""
Task repository: chunked bulk insert and per-distribution lookup.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from db.base import utc_now
from db.models.task import Task, TaskStatus


class TaskRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def bulk_create_tasks(
        self,
        rows: Sequence[dict[str, Any]],
        *,
        batch_size: int = 1000,
    ) -> int:
        """
        Insert task rows with chunked executemany INSERTs.

        Every row shares one assignment timestamp. Rows carry
        distribution_id, agent_id, first_name, phone, notes and position.
        The caller owns the transaction, so a failing chunk leaves nothing
        behind once it rolls back.
        """

        if not rows:
            return 0

        assigned_at = utc_now()
        inserted = 0
        for chunk_start in range(0, len(rows), batch_size):
            chunk = rows[chunk_start : chunk_start + batch_size]
            values = [
                {
                    "id": uuid.uuid4(),
                    "distribution_id": row["distribution_id"],
                    "agent_id": row["agent_id"],
                    "first_name": row["first_name"],
                    "phone": row["phone"],
                    "notes": row.get("notes") or "",
                    "position": row.get("position", 0),
                    "status": TaskStatus.ASSIGNED,
                    "assigned_at": assigned_at,
                    "created_at": assigned_at,
                    "updated_at": assigned_at,
                }
                for row in chunk
            ]
            self._session.execute(insert(Task), values)
            inserted += len(values)
        return inserted

    def list_by_distribution(self, distribution_id: uuid.UUID) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.distribution_id == distribution_id)
            .order_by(Task.position.asc(), Task.id.asc())
        )
        return list(self._session.scalars(stmt).all())

