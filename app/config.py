"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

MIB = 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits enforced by the ingestion gate.
    """

    max_bytes: int = 5 * MIB
    csv_sniff_bytes: int = 1024
    max_filename_length: int = 255
    preview_row_limit: int = 5


@dataclass(frozen=True)
class ContactValidationSettings:
    """
    Row-level data quality limits.

    Notes are checked against a different maximum on the preview path and
    on the commit path; the commit limit matches the tasks.notes column.
    """

    first_name_max_length: int = 100
    phone_min_digits: int = 7
    phone_max_length: int = 20
    notes_max_length_preview: int = 500
    notes_max_length_commit: int = 1000
    log_validation_errors: bool = True


@dataclass(frozen=True)
class DistributionSettings:
    """
    Agent-count bounds for distribution runs.
    """

    default_agent_count: int = 5
    max_agent_count: int = 10


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload gate settings from environment variables.
    """

    return UploadSettings(
        max_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 5 * MIB)),
        csv_sniff_bytes=max(1, _get_int_env("UPLOAD_CSV_SNIFF_BYTES", 1024)),
        max_filename_length=max(1, _get_int_env("UPLOAD_MAX_FILENAME_LENGTH", 255)),
        preview_row_limit=max(0, _get_int_env("UPLOAD_PREVIEW_ROW_LIMIT", 5)),
    )


@lru_cache(maxsize=1)
def get_contact_validation_settings() -> ContactValidationSettings:
    """
    Return cached contact validation settings from environment variables.
    """

    return ContactValidationSettings(
        first_name_max_length=max(1, _get_int_env("CONTACT_FIRST_NAME_MAX_LENGTH", 100)),
        phone_min_digits=max(1, _get_int_env("CONTACT_PHONE_MIN_DIGITS", 7)),
        phone_max_length=max(1, _get_int_env("CONTACT_PHONE_MAX_LENGTH", 20)),
        notes_max_length_preview=max(0, _get_int_env("CONTACT_NOTES_MAX_LENGTH_PREVIEW", 500)),
        notes_max_length_commit=max(0, _get_int_env("CONTACT_NOTES_MAX_LENGTH_COMMIT", 1000)),
        log_validation_errors=_get_bool_env("CONTACT_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_distribution_settings() -> DistributionSettings:
    """
    Return cached distribution settings from environment variables.
    """

    max_agent_count = max(1, _get_int_env("DISTRIBUTION_MAX_AGENT_COUNT", 10))
    default_agent_count = _get_int_env("DISTRIBUTION_DEFAULT_AGENT_COUNT", 5)
    return DistributionSettings(
        default_agent_count=min(max(1, default_agent_count), max_agent_count),
        max_agent_count=max_agent_count,
    )
