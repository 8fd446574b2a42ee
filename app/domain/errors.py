"""
app/domain/errors.py

Typed failures raised by the upload-to-distribution pipeline.

Each error carries a machine-readable code, a human message, and optional
structured details so the HTTP layer can report every problem at once.
"""

from __future__ import annotations

from typing import Any

from app import failure_codes


class PipelineError(Exception):
    """
    Base class for all pipeline failures.
    """

    code: str = failure_codes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


# ---------------------------------------------------------------------------
# Ingestion gate
# ---------------------------------------------------------------------------


class IngestionError(PipelineError):
    """Raised when an uploaded blob is rejected before parsing."""


class NoFileError(IngestionError):
    code = failure_codes.NO_FILE

    def __init__(self, message: str = "No file was uploaded") -> None:
        super().__init__(message)


class EmptyFileError(IngestionError):
    code = failure_codes.EMPTY_FILE


class FileTooLargeError(IngestionError):
    code = failure_codes.FILE_TOO_LARGE


class UnsupportedTypeError(IngestionError):
    code = failure_codes.UNSUPPORTED_TYPE


class InvalidSignatureError(IngestionError):
    code = failure_codes.INVALID_FILE_SIGNATURE


class FilenameInvalidError(IngestionError):
    code = failure_codes.FILENAME_INVALID


# ---------------------------------------------------------------------------
# Structural parser
# ---------------------------------------------------------------------------


class ParseError(PipelineError):
    """Raised when a validated blob cannot be turned into rows."""


class UnsupportedFormatError(ParseError):
    code = failure_codes.UNSUPPORTED_FORMAT


class NoWorksheetsError(ParseError):
    code = failure_codes.NO_WORKSHEETS


class EmptyWorksheetError(ParseError):
    code = failure_codes.EMPTY_WORKSHEET


class MalformedFileError(ParseError):
    """Container-level parse failure; code is CSV_PARSE_ERROR or EXCEL_PARSE_ERROR."""


class MissingColumnsError(ParseError):
    code = failure_codes.MISSING_COLUMNS

    def __init__(
        self,
        *,
        missing_columns: list[str],
        available_columns: list[str],
        required_columns: list[str],
    ) -> None:
        super().__init__(
            f"Missing required columns: {', '.join(missing_columns)}",
            details={
                "missing_columns": list(missing_columns),
                "available_columns": list(available_columns),
                "required_columns": list(required_columns),
            },
        )
        self.missing_columns = tuple(missing_columns)
        self.available_columns = tuple(available_columns)
        self.required_columns = tuple(required_columns)


# ---------------------------------------------------------------------------
# Row validation
# ---------------------------------------------------------------------------


class ContactValidationError(PipelineError):
    """Raised when row-level data quality checks fail."""


class InvalidDataError(ContactValidationError):
    code = failure_codes.INVALID_DATA

    def __init__(self, *, errors: list[str], total_rows: int, valid_rows: int) -> None:
        super().__init__(
            "Some rows contain invalid data",
            details={
                "errors": list(errors),
                "total_rows": total_rows,
                "valid_rows": valid_rows,
            },
        )
        self.errors = tuple(errors)
        self.total_rows = total_rows
        self.valid_rows = valid_rows


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------


class DistributionError(PipelineError):
    """Raised for distribution preconditions and lifecycle failures."""


class NoActiveAgentsError(DistributionError):
    code = failure_codes.NO_ACTIVE_AGENTS

    def __init__(self, message: str = "No active agents available for distribution") -> None:
        super().__init__(message)


class InvalidTargetAgentCountError(DistributionError):
    code = failure_codes.INVALID_TARGET_AGENT_COUNT


class DistributionFailedError(DistributionError):
    """
    Raised after a distribution record was marked failed.

    The reason is stored on the record; the caller only sees a generic
    internal error plus the distribution id.
    """

    code = failure_codes.INTERNAL_ERROR

    def __init__(self, *, distribution_id: Any, reason: str) -> None:
        super().__init__(
            "An unexpected error occurred while processing the file",
            details={"distribution_id": str(distribution_id)},
        )
        self.distribution_id = distribution_id
        self.reason = reason


class DistributionPersistenceError(DistributionError):
    code = failure_codes.INTERNAL_ERROR


class DistributionNotFoundError(DistributionError):
    code = failure_codes.NOT_FOUND

    def __init__(self, message: str = "Distribution not found") -> None:
        super().__init__(message)
