"""
app/parsers package marker.
"""

from app.parsers.spreadsheet_parser import SpreadsheetParser, stringify_cell

__all__ = ["SpreadsheetParser", "stringify_cell"]
