"""
app/repositories package marker.
"""

from app.repositories.distribution_store import DistributionStore, SQLDistributionStore

__all__ = [
    "DistributionStore",
    "SQLDistributionStore",
]
