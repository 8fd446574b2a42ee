"""
app/validators/contact_validator.py

Row normalization and data-quality validation for uploaded contacts.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Sequence

from app.config import ContactValidationSettings, get_contact_validation_settings
from app.domain.contact import FIRST_NAME, NOTES, PHONE, ContactItem, ParsedRow
from app.domain.errors import InvalidDataError
from app.mappers.contact_columns import CANONICAL_COLUMN_ALIASES, resolve_columns

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class ContactRowValidator:
    """
    Normalizes parsed rows to the canonical columns and validates them.
    """

    def __init__(self, settings: ContactValidationSettings | None = None) -> None:
        self._settings = settings or get_contact_validation_settings()

    @property
    def settings(self) -> ContactValidationSettings:
        return self._settings

    def normalize_row(self, row: Mapping[str, str | None]) -> dict[str, str | None]:
        """
        Map source headers to FirstName/Phone/Notes and trim every value.

        Columns missing from the row normalize to None.
        """

        resolved = resolve_columns(list(row.keys()))
        normalized: dict[str, str | None] = {}
        for canonical in CANONICAL_COLUMN_ALIASES:
            source = resolved.get(canonical)
            value = row.get(source) if source is not None else None
            normalized[canonical] = self._clean(value) if value is not None else None
        return normalized

    def validate_row(
        self,
        row: Mapping[str, str | None],
        index: int,
        *,
        notes_max_length: int,
    ) -> tuple[ContactItem | None, list[str]]:
        """
        Validate one normalized row at 0-based position `index`.

        Error strings reference the 1-based row number.
        """

        prefix = f"Row {index + 1}:"
        errors: list[str] = []

        first_name = row.get(FIRST_NAME) or ""
        phone = row.get(PHONE) or ""
        notes = row.get(NOTES) or ""

        if not first_name:
            errors.append(f"{prefix} FirstName is required")
        elif len(first_name) > self._settings.first_name_max_length:
            errors.append(
                f"{prefix} FirstName cannot exceed "
                f"{self._settings.first_name_max_length} characters"
            )

        if not phone:
            errors.append(f"{prefix} Phone is required")
        elif len(_NON_DIGITS.sub("", phone)) < self._settings.phone_min_digits:
            errors.append(f"{prefix} Phone number appears to be invalid")
        elif len(phone) > self._settings.phone_max_length:
            errors.append(
                f"{prefix} Phone number cannot exceed "
                f"{self._settings.phone_max_length} characters"
            )

        if len(notes) > notes_max_length:
            errors.append(
                f"{prefix} Notes field is too long (max {notes_max_length} characters)"
            )

        if errors:
            return None, errors
        return ContactItem(first_name=first_name, phone=phone, notes=notes), []

    def validate_rows(
        self,
        rows: Sequence[ParsedRow],
        *,
        notes_max_length: int,
    ) -> list[ContactItem]:
        """
        Normalize and validate every row, accumulating errors file-wide.

        Any invalid row rejects the whole file; valid rows are never
        returned on their own.
        """

        items: list[ContactItem] = []
        errors: list[str] = []

        for index, raw_row in enumerate(rows):
            item, row_errors = self.validate_row(
                self.normalize_row(raw_row),
                index,
                notes_max_length=notes_max_length,
            )
            if row_errors:
                errors.extend(row_errors)
                if self._settings.log_validation_errors:
                    for message in row_errors:
                        logger.warning("Contact validation error %s", message)
                continue
            if item is not None:
                items.append(item)

        if errors:
            raise InvalidDataError(
                errors=errors,
                total_rows=len(rows),
                valid_rows=len(items),
            )
        return items

    @staticmethod
    def _clean(value: str) -> str:
        return _CONTROL_CHARS.sub("", str(value)).strip()
