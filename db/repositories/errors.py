"""
Repository-layer exceptions for distribution persistence.
"""

from __future__ import annotations


class DistributionRepositoryError(Exception):
    """Base exception for distribution repository failures."""


class DistributionStateError(DistributionRepositoryError):
    """Raised when a lifecycle transition is attempted from a terminal state."""


class SummaryMismatchError(DistributionRepositoryError):
    """Raised when a completion summary does not cover the declared item count."""
