"""
app/domain/contact.py

Row and contact records produced by the parser and validator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ParsedRow = dict[str, str]

FIRST_NAME = "FirstName"
PHONE = "Phone"
NOTES = "Notes"

CANONICAL_COLUMNS: tuple[str, ...] = (FIRST_NAME, PHONE, NOTES)


@dataclass(frozen=True)
class ParsedSheet:
    """
    Ordered rows of one CSV file or first worksheet, keyed by header text
    exactly as written in the source.
    """

    headers: tuple[str, ...]
    rows: list[ParsedRow] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ContactItem:
    """
    Canonical contact that passed row validation.
    """

    first_name: str
    phone: str
    notes: str = ""

    def to_row(self) -> dict[str, Any]:
        return {FIRST_NAME: self.first_name, PHONE: self.phone, NOTES: self.notes}
