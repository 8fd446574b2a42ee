"""
app/validators/upload_validator.py

Ingestion gate: size, declared type, content signature, and filename checks
for uploaded contact files. Runs before any parsing touches the bytes.
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timezone
from pathlib import PurePosixPath

from app.config import UploadSettings, get_upload_settings
from app.domain.errors import (
    EmptyFileError,
    FileTooLargeError,
    FilenameInvalidError,
    InvalidSignatureError,
    UnsupportedTypeError,
)
from app.domain.upload import FileFormat, RawUpload, ValidatedUpload

EXTENSION_FORMATS: dict[str, FileFormat] = {
    ".csv": FileFormat.CSV,
    ".xls": FileFormat.XLS,
    ".xlsx": FileFormat.XLSX,
}

CONTENT_TYPE_FORMATS: dict[str, FileFormat] = {
    "text/csv": FileFormat.CSV,
    "application/csv": FileFormat.CSV,
    "text/plain": FileFormat.CSV,
    "application/vnd.ms-excel": FileFormat.XLS,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": FileFormat.XLSX,
}

XLS_SIGNATURES: tuple[bytes, ...] = (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1",)
XLSX_SIGNATURES: tuple[bytes, ...] = (
    b"PK\x03\x04",
    b"PK\x05\x06",
    b"PK\x07\x08",
)
UTF8_BOM = b"\xef\xbb\xbf"

_TEXT_CONTROL_BYTES = frozenset({0x09, 0x0A, 0x0D})
_FORBIDDEN_FILENAME_CHARS = re.compile(r'[<>:"|?*\x00-\x1f\x7f]')
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_RESERVED_DEVICE_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{index}" for index in range(1, 10)}
    | {f"LPT{index}" for index in range(1, 10)}
)


def resolve_file_format(filename: str | None, content_type: str | None) -> FileFormat | None:
    """
    Resolve the declared format; the file extension wins over the MIME type.
    """

    name = _basename(filename or "").lower()
    extension = PurePosixPath(name).suffix
    if extension in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[extension]

    normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_FORMATS.get(normalized_type)


def sniff_signature(content: bytes, file_format: FileFormat, *, sniff_bytes: int = 1024) -> bool:
    """
    Return True when the leading bytes match the declared format.
    """

    if file_format is FileFormat.XLSX:
        return content.startswith(XLSX_SIGNATURES)
    if file_format is FileFormat.XLS:
        return content.startswith(XLS_SIGNATURES)

    sample = content[len(UTF8_BOM):] if content.startswith(UTF8_BOM) else content
    return all(
        0x20 <= byte <= 0x7E or byte in _TEXT_CONTROL_BYTES
        for byte in sample[:sniff_bytes]
    )


def sanitize_filename(filename: str | None, *, max_length: int = 255) -> str:
    """
    Strip path components, reject unsafe names, and replace anything outside
    [A-Za-z0-9._-] with underscores.
    """

    name = _basename(filename or "").strip()
    if not name or name in {".", ".."}:
        raise FilenameInvalidError("Invalid filename. A file name is required.")
    if ".." in name:
        raise FilenameInvalidError("Invalid filename. Contains suspicious characters.")
    if _FORBIDDEN_FILENAME_CHARS.search(name):
        raise FilenameInvalidError("Invalid filename. Contains suspicious characters.")
    if name.split(".", 1)[0].strip().upper() in _RESERVED_DEVICE_NAMES:
        raise FilenameInvalidError("Invalid filename. Reserved device names are not allowed.")
    if len(name) > max_length:
        raise FilenameInvalidError(
            f"Filename too long. Maximum {max_length} characters allowed."
        )
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def build_unique_filename(sanitized_name: str, *, now: datetime | None = None) -> str:
    """
    Build a collision-proof artifact name: <epoch_ms>_<16 hex><extension>.
    """

    moment = now or datetime.now(timezone.utc)
    epoch_ms = int(moment.timestamp() * 1000)
    extension = PurePosixPath(sanitized_name).suffix.lower()
    return f"{epoch_ms}_{secrets.token_hex(8)}{extension}"


def _basename(filename: str) -> str:
    return re.split(r"[\\/]", filename)[-1]


class UploadValidator:
    """
    Validates raw uploads and produces tagged, validated descriptors.
    """

    def __init__(self, settings: UploadSettings | None = None) -> None:
        self._settings = settings or get_upload_settings()

    @property
    def max_bytes(self) -> int:
        return self._settings.max_bytes

    def validate(self, raw: RawUpload) -> ValidatedUpload:
        """
        Run every gate check in order, stopping at the first failure.
        """

        size = raw.size
        if size == 0:
            raise EmptyFileError("The uploaded file is empty or contains no data")
        if size > self._settings.max_bytes:
            limit_mib = self._settings.max_bytes / (1024 * 1024)
            raise FileTooLargeError(f"File size exceeds {limit_mib:g}MB limit")

        file_format = resolve_file_format(raw.filename, raw.content_type)
        if file_format is None:
            raise UnsupportedTypeError(
                "Invalid file type. Only CSV, XLSX, and XLS files are allowed."
            )

        if not sniff_signature(raw.content, file_format, sniff_bytes=self._settings.csv_sniff_bytes):
            raise InvalidSignatureError("File content does not match the declared file type")

        filename = sanitize_filename(raw.filename, max_length=self._settings.max_filename_length)
        received_at = datetime.now(timezone.utc)

        return ValidatedUpload(
            content=raw.content,
            filename=filename,
            unique_filename=build_unique_filename(filename, now=received_at),
            file_format=file_format,
            content_type=raw.content_type,
            size=size,
            received_at=received_at,
        )
