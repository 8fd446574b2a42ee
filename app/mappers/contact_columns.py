"""
app/mappers/contact_columns.py

Header matching between uploaded files and the canonical contact columns.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from app.domain.contact import FIRST_NAME, NOTES, PHONE, ParsedSheet
from app.domain.errors import EmptyFileError, MissingColumnsError

REQUIRED_COLUMNS: tuple[str, ...] = (FIRST_NAME, PHONE, NOTES)

# Canonical column -> accepted header spellings after strip().lower().
CANONICAL_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    FIRST_NAME: ("firstname",),
    PHONE: ("phone",),
    NOTES: ("notes",),
}


def normalize_header(header: str) -> str:
    return header.strip().lower()


def resolve_columns(
    headers: Sequence[str],
    *,
    aliases: Mapping[str, Sequence[str]] = CANONICAL_COLUMN_ALIASES,
) -> dict[str, str]:
    """
    Map each canonical column to the first source header that matches it.

    Canonical columns with no matching header are left out.
    """

    lookup: dict[str, str] = {}
    for header in headers:
        lookup.setdefault(normalize_header(header), header)

    resolved: dict[str, str] = {}
    for canonical, accepted in aliases.items():
        for alias in accepted:
            source = lookup.get(alias)
            if source is not None:
                resolved[canonical] = source
                break
    return resolved


def require_columns(
    sheet: ParsedSheet,
    *,
    required: Sequence[str] = REQUIRED_COLUMNS,
) -> dict[str, str]:
    """
    Enforce that the sheet has data rows and every required column.

    Returns the canonical-to-source header mapping.
    """

    if sheet.row_count == 0:
        raise EmptyFileError("The uploaded file is empty or contains no data")

    resolved = resolve_columns(sheet.headers)
    missing = [column for column in required if column not in resolved]
    if missing:
        raise MissingColumnsError(
            missing_columns=missing,
            available_columns=list(sheet.headers),
            required_columns=list(required),
        )
    return resolved
