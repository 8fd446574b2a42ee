"""
tests/test_upload_validator.py

Ingestion gate checks: size, declared type, signature sniffing, filename
hygiene and the uniqueness tag. Pure unit tests, no I/O.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from app.config import UploadSettings
from app.domain.errors import (
    EmptyFileError,
    FileTooLargeError,
    FilenameInvalidError,
    InvalidSignatureError,
    UnsupportedTypeError,
)
from app.domain.upload import FileFormat, RawUpload
from app.validators.upload_validator import (
    UploadValidator,
    build_unique_filename,
    resolve_file_format,
    sanitize_filename,
    sniff_signature,
)

CSV_BODY = b"FirstName,Phone,Notes\nAda,5550101234,hello\n"
XLS_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


@pytest.fixture()
def validator() -> UploadValidator:
    return UploadValidator(UploadSettings())


# ---------------------------------------------------------------------------
# Size bound
# ---------------------------------------------------------------------------


class TestSizeBound:
    def test_empty_file_is_rejected(self, validator: UploadValidator) -> None:
        with pytest.raises(EmptyFileError) as exc_info:
            validator.validate(RawUpload(content=b"", filename="contacts.csv"))
        assert exc_info.value.code == "EMPTY_FILE"

    def test_six_mib_csv_is_rejected_as_too_large(self, validator: UploadValidator) -> None:
        content = b"a" * (6 * 1024 * 1024)
        with pytest.raises(FileTooLargeError) as exc_info:
            validator.validate(RawUpload(content=content, filename="contacts.csv"))
        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert exc_info.value.message == "File size exceeds 5MB limit"

    def test_exactly_at_limit_is_accepted(self) -> None:
        validator = UploadValidator(UploadSettings(max_bytes=len(CSV_BODY)))
        validated = validator.validate(RawUpload(content=CSV_BODY, filename="contacts.csv"))
        assert validated.size == len(CSV_BODY)

    def test_size_is_checked_before_type(self) -> None:
        validator = UploadValidator(UploadSettings(max_bytes=4))
        with pytest.raises(FileTooLargeError):
            validator.validate(RawUpload(content=b"\x00" * 10, filename="payload.exe"))


# ---------------------------------------------------------------------------
# Declared type
# ---------------------------------------------------------------------------


class TestDeclaredType:
    @pytest.mark.parametrize(
        ("filename", "content_type", "expected"),
        [
            ("contacts.csv", None, FileFormat.CSV),
            ("CONTACTS.CSV", None, FileFormat.CSV),
            ("book.xlsx", None, FileFormat.XLSX),
            ("book.xls", None, FileFormat.XLS),
            ("upload", "text/csv; charset=utf-8", FileFormat.CSV),
            ("upload", "application/vnd.ms-excel", FileFormat.XLS),
            (
                "upload",
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                FileFormat.XLSX,
            ),
            ("book.xlsx", "text/csv", FileFormat.XLSX),
        ],
    )
    def test_resolves_extension_then_mime(self, filename, content_type, expected) -> None:
        assert resolve_file_format(filename, content_type) is expected

    def test_unknown_type_resolves_to_none(self) -> None:
        assert resolve_file_format("payload.exe", "application/octet-stream") is None

    def test_unsupported_type_is_rejected(self, validator: UploadValidator) -> None:
        with pytest.raises(UnsupportedTypeError) as exc_info:
            validator.validate(
                RawUpload(content=b"MZ\x90\x00", filename="payload.exe", content_type="application/x-msdownload")
            )
        assert exc_info.value.code == "UNSUPPORTED_TYPE"


# ---------------------------------------------------------------------------
# Signature sniffing
# ---------------------------------------------------------------------------


class TestSignatureSniffing:
    def test_csv_with_printable_ascii_passes(self) -> None:
        assert sniff_signature(CSV_BODY, FileFormat.CSV)

    def test_csv_with_utf8_bom_passes(self) -> None:
        assert sniff_signature(b"\xef\xbb\xbf" + CSV_BODY, FileFormat.CSV)

    def test_csv_with_binary_byte_fails(self) -> None:
        assert not sniff_signature(b"FirstName,Phone\x00,Notes\n", FileFormat.CSV)

    def test_csv_bytes_beyond_sniff_window_are_not_checked(self) -> None:
        content = b"a" * 1024 + b"\x00"
        assert sniff_signature(content, FileFormat.CSV, sniff_bytes=1024)

    @pytest.mark.parametrize("prefix", [b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08"])
    def test_xlsx_zip_signatures_pass(self, prefix: bytes) -> None:
        assert sniff_signature(prefix + b"rest", FileFormat.XLSX)

    def test_xls_compound_document_signature_passes(self) -> None:
        assert sniff_signature(XLS_MAGIC + b"\x00" * 8, FileFormat.XLS)

    def test_disguised_xlsx_is_rejected(self, validator: UploadValidator) -> None:
        with pytest.raises(InvalidSignatureError) as exc_info:
            validator.validate(RawUpload(content=CSV_BODY, filename="contacts.xlsx"))
        assert exc_info.value.code == "INVALID_FILE_SIGNATURE"

    def test_disguised_xls_is_rejected(self, validator: UploadValidator) -> None:
        with pytest.raises(InvalidSignatureError):
            validator.validate(RawUpload(content=b"PK\x03\x04data", filename="contacts.xls"))


# ---------------------------------------------------------------------------
# Filename hygiene
# ---------------------------------------------------------------------------


class TestFilenameHygiene:
    def test_path_components_are_stripped(self) -> None:
        assert sanitize_filename("/tmp/uploads/contacts.csv") == "contacts.csv"
        assert sanitize_filename("C:\\Users\\ops\\contacts.csv") == "contacts.csv"

    def test_unsafe_characters_are_replaced(self) -> None:
        assert sanitize_filename("my contacts (v2).csv") == "my_contacts__v2_.csv"

    @pytest.mark.parametrize(
        "filename",
        ["", "   ", "..", "contacts..csv", "con<tacts>.csv", "a|b.csv", "what?.csv", "tab\tname.csv"],
    )
    def test_invalid_names_are_rejected(self, filename: str) -> None:
        with pytest.raises(FilenameInvalidError):
            sanitize_filename(filename)

    @pytest.mark.parametrize("filename", ["CON.csv", "nul.xlsx", "com1.csv", "LPT9.xls", "aux"])
    def test_reserved_device_names_are_rejected(self, filename: str) -> None:
        with pytest.raises(FilenameInvalidError):
            sanitize_filename(filename)

    def test_names_that_merely_contain_device_names_pass(self) -> None:
        assert sanitize_filename("console.csv") == "console.csv"

    def test_overlong_name_is_rejected(self) -> None:
        with pytest.raises(FilenameInvalidError):
            sanitize_filename("a" * 252 + ".csv")

    def test_traversal_prefix_is_stripped_to_basename(self, validator: UploadValidator) -> None:
        validated = validator.validate(RawUpload(content=CSV_BODY, filename="../../etc/passwd.csv"))
        assert validated.filename == "passwd.csv"

    def test_validator_rejects_bad_filename_after_content_checks(self, validator: UploadValidator) -> None:
        with pytest.raises(FilenameInvalidError) as exc_info:
            validator.validate(RawUpload(content=CSV_BODY, filename="contacts..csv"))
        assert exc_info.value.code == "FILENAME_INVALID"


# ---------------------------------------------------------------------------
# Uniqueness tag
# ---------------------------------------------------------------------------


class TestUniqueFilename:
    def test_format_is_epoch_ms_hex_and_extension(self) -> None:
        moment = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
        name = build_unique_filename("Contacts.CSV", now=moment)
        epoch_ms = int(moment.timestamp() * 1000)
        assert re.fullmatch(rf"{epoch_ms}_[0-9a-f]{{16}}\.csv", name)

    def test_two_names_for_the_same_instant_differ(self) -> None:
        moment = datetime(2026, 10, 16, tzinfo=timezone.utc)
        assert build_unique_filename("a.csv", now=moment) != build_unique_filename("a.csv", now=moment)

    def test_validated_upload_keeps_content_untouched(self, validator: UploadValidator) -> None:
        validated = validator.validate(
            RawUpload(content=CSV_BODY, filename="my contacts.csv", content_type="text/csv")
        )
        assert validated.content == CSV_BODY
        assert validated.filename == "my_contacts.csv"
        assert validated.unique_filename.endswith(".csv")
        assert validated.unique_filename != validated.filename
        assert validated.file_format is FileFormat.CSV
