"""
Flag framework: flag tables, CSV rows, payload building and the click
registry that turns a flag table into verb commands.
"""

from suitectl.framework.csv_rows import read_rows
from suitectl.framework.field_mask import FieldBinding, Payload, build_payload
from suitectl.framework.flags import Flag, FlagKind, FlagTable, Row, Value

__all__ = [
    "FieldBinding",
    "Flag",
    "FlagKind",
    "FlagTable",
    "Payload",
    "Row",
    "Value",
    "build_payload",
    "read_rows",
]
