"""
db/models/task.py

Task model: one contact assigned to one agent by a distribution.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, utc_now

if TYPE_CHECKING:
    from db.models.distribution import Distribution


class TaskStatus:
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class Task(Base, TimestampMixin):
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    distribution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("distributions.id", ondelete="CASCADE"),
        nullable=False,
    )

    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("agents.id", ondelete="RESTRICT"),
        nullable=False,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="0-based position of the contact in the uploaded file",
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.ASSIGNED,
    )

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    distribution: Mapped["Distribution"] = relationship(
        "Distribution",
        back_populates="tasks",
    )

    __table_args__ = (
        Index("ix_tasks_agent_id_status", "agent_id", "status"),
        Index("ix_tasks_distribution_id_agent_id", "distribution_id", "agent_id"),
        Index("ix_tasks_agent_id_assigned_at", "agent_id", "assigned_at"),
        Index("ix_tasks_distribution_id_position", "distribution_id", "position"),
    )
