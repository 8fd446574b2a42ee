"""
app/mappers package marker.
"""

from app.mappers.contact_columns import (
    CANONICAL_COLUMN_ALIASES,
    REQUIRED_COLUMNS,
    require_columns,
    resolve_columns,
)

__all__ = [
    "CANONICAL_COLUMN_ALIASES",
    "REQUIRED_COLUMNS",
    "require_columns",
    "resolve_columns",
]
