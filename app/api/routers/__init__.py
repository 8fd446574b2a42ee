"""
app/api/routers package marker.
"""

from app.api.routers.distributions import router as distributions_router
from app.api.routers.uploads import router as uploads_router

__all__ = [
    "distributions_router",
    "uploads_router",
]
