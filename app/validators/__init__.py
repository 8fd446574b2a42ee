"""
app/validators package marker.
"""

from app.validators.contact_validator import ContactRowValidator
from app.validators.upload_validator import (
    UploadValidator,
    build_unique_filename,
    resolve_file_format,
    sanitize_filename,
    sniff_signature,
)

__all__ = [
    "ContactRowValidator",
    "UploadValidator",
    "build_unique_filename",
    "resolve_file_format",
    "sanitize_filename",
    "sniff_signature",
]
