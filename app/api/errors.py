"""
app/api/errors.py

Translation of pipeline failures into HTTP errors.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app import failure_codes
from app.domain.errors import (
    DistributionNotFoundError,
    FileTooLargeError,
    NoActiveAgentsError,
    PipelineError,
    UnsupportedTypeError,
)

logger = logging.getLogger(__name__)

HTTP_413_CONTENT_TOO_LARGE = 413

_STATUS_BY_ERROR: tuple[tuple[type[PipelineError], int], ...] = (
    (FileTooLargeError, HTTP_413_CONTENT_TOO_LARGE),
    (UnsupportedTypeError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (NoActiveAgentsError, status.HTTP_409_CONFLICT),
    (DistributionNotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_for(exc: PipelineError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    if exc.code == failure_codes.INTERNAL_ERROR:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: PipelineError) -> HTTPException:
    return HTTPException(status_code=status_for(exc), detail=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report malformed query, path, or form fields in the same shape as pipeline errors.
    """

    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    logger.warning("Request validation failed path=%s errors=%d", request.url.path, len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "code": failure_codes.INVALID_REQUEST,
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(errors)},
            }
        },
    )


def register_error_handlers(application: FastAPI) -> None:
    application.add_exception_handler(RequestValidationError, request_validation_handler)
