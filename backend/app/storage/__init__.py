from .schema import Codec, Column, TableSchema, TEXT, OPTIONAL_TEXT, INTEGER, DATETIME
from .workbook import WorkbookStore, Table

__all__ = [
    'Codec', 'Column', 'TableSchema', 'TEXT', 'OPTIONAL_TEXT', 'INTEGER', 'DATETIME',
    'WorkbookStore', 'Table',
]
