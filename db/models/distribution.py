"""
db/models/distribution.py

Distribution model: one upload event and its split across agents.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.task import Task


class DistributionStatus:
    """Valid lifecycle states for a distribution."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Distribution(Base, TimestampMixin):
    """
    Persisted record of one uploaded contact file.

    Created in `processing` before tasks are written and moved to exactly one
    terminal state. The summary columns are only populated on completion;
    processing_error is only populated on failure.
    """

    __tablename__ = "distributions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    filename: Mapped[str] = mapped_column(
        String(300),
        nullable=False,
        comment="Collision-proof stored name: <epoch_ms>_<hex><ext>",
    )

    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Sanitized name of the uploaded file",
    )

    total_items: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DistributionStatus.PROCESSING,
        comment="processing → completed | failed",
    )

    processing_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )

    total_agents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    items_per_agent: Mapped[int | None] = mapped_column(Integer, nullable=True)
    remainder_items: Mapped[int | None] = mapped_column(Integer, nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="distribution",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __table_args__ = (
        Index("ix_distributions_status", "status"),
        Index("ix_distributions_uploaded_by_created_at", "uploaded_by", "created_at"),
        Index("ix_distributions_filename", "filename"),
    )

    @property
    def summary(self) -> dict[str, int] | None:
        if self.total_agents is None:
            return None
        return {
            "total_agents": self.total_agents,
            "items_per_agent": self.items_per_agent or 0,
            "remainder_items": self.remainder_items or 0,
        }

    def __repr__(self) -> str:
        return f"<Distribution id={self.id} status={self.status!r} total_items={self.total_items}>"
