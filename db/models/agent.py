"""
db/models/agent.py

Field agent model. Agents are managed outside the upload pipeline; the
pipeline only reads the active roster.
"""

import uuid

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Agent(Base, TimestampMixin):
    """
    One field agent eligible to receive task assignments while active.
    """

    __tablename__ = "agents"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Only active agents take part in new distributions",
    )

    __table_args__ = (
        Index("ix_agents_is_active_created_at", "is_active", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Agent id={self.id} email={self.email!r} active={self.is_active}>"
