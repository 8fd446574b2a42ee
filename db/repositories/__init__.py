"""
Repository layer exports.
"""

from db.repositories.agent_repository import AgentRepository
from db.repositories.distribution_repository import DistributionRepository
from db.repositories.errors import (
    DistributionRepositoryError,
    DistributionStateError,
    SummaryMismatchError,
)
from db.repositories.task_repository import TaskRepository

__all__ = [
    "AgentRepository",
    "DistributionRepository",
    "TaskRepository",
    "DistributionRepositoryError",
    "DistributionStateError",
    "SummaryMismatchError",
]
