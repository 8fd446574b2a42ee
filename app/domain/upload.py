"""
app/domain/upload.py

Upload descriptors used by the ingestion gate and parser, and the
results the pipeline returns for one upload.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class FileFormat(str, Enum):
    CSV = "csv"
    XLS = "xls"
    XLSX = "xlsx"


@dataclass(frozen=True)
class RawUpload:
    """
    Untrusted upload exactly as received. Never persisted.
    """

    content: bytes
    filename: str | None
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ValidatedUpload:
    """
    Upload that passed the ingestion gate.

    `filename` is the sanitized name used for display and logging;
    `unique_filename` names any persisted artifact. `content` is the
    original byte content, untouched.
    """

    content: bytes
    filename: str
    unique_filename: str
    file_format: FileFormat
    content_type: str | None
    size: int
    received_at: datetime


@dataclass(frozen=True)
class UploadPreview:
    """
    Result of the validate/preview path. Nothing was persisted.

    `distribution` is None when no preview was requested or when no agent is
    active; `active_agents` tells the two cases apart.
    """

    filename: str
    total_rows: int
    preview_rows: list[dict[str, str]]
    columns: list[str]
    file_info: dict[str, Any]
    distribution: dict[str, Any] | None
    active_agents: int


@dataclass(frozen=True)
class UploadCommitResult:
    distribution_id: uuid.UUID
    filename: str
    total_items: int
    distribution: dict[str, Any]
    tasks_created: int
