"""Shared failure code constants for upload pipeline error handling."""

NO_FILE = "NO_FILE"
EMPTY_FILE = "EMPTY_FILE"
FILE_TOO_LARGE = "FILE_TOO_LARGE"
UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
INVALID_FILE_SIGNATURE = "INVALID_FILE_SIGNATURE"
FILENAME_INVALID = "FILENAME_INVALID"

UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
NO_WORKSHEETS = "NO_WORKSHEETS"
EMPTY_WORKSHEET = "EMPTY_WORKSHEET"
MISSING_COLUMNS = "MISSING_COLUMNS"
CSV_PARSE_ERROR = "CSV_PARSE_ERROR"
EXCEL_PARSE_ERROR = "EXCEL_PARSE_ERROR"

INVALID_DATA = "INVALID_DATA"

NO_ACTIVE_AGENTS = "NO_ACTIVE_AGENTS"
INVALID_TARGET_AGENT_COUNT = "INVALID_TARGET_AGENT_COUNT"

INVALID_REQUEST = "INVALID_REQUEST"
UNAUTHORIZED = "UNAUTHORIZED"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"
