"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.agent import Agent
from db.models.distribution import Distribution, DistributionStatus
from db.models.task import Task, TaskStatus

__all__ = [
    "Agent",
    "Distribution",
    "DistributionStatus",
    "Task",
    "TaskStatus",
]
