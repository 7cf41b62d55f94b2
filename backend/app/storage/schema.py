# Overview: Column codecs and table schemas that map spreadsheet cells to typed records.

"""
Table schemas

Every sheet in the workbook is declared once as a TableSchema: the sheet
name, the record dataclass, and the ordered columns. Each Column names the
header written to the sheet, the dataclass attribute it fills, and a codec
that decodes a raw cell value (str, int, float, datetime or None, as
openpyxl hands them back) and encodes a Python value for writing.

Decoding happens here, at the store boundary. Services only ever see
dataclass instances.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, TypeVar

from app.time_utils import parse_iso_datetime, to_utc_z


T = TypeVar("T")


class CellDecodeError(ValueError):
    """A cell value could not be decoded with the column's codec."""


@dataclass(frozen=True)
class Codec:
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]
    default: Callable[[], Any]


def _decode_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # Excel turns numeric-looking ids into floats
        return str(int(value))
    return str(value).strip()


def _decode_optional_text(value: Any) -> str | None:
    text = _decode_text(value)
    return text or None


def _decode_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise CellDecodeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise CellDecodeError(f"expected an integer, got {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise CellDecodeError(f"expected an integer, got {value!r}")
        if not number.is_integer():
            raise CellDecodeError(f"expected an integer, got {value!r}")
        return int(number)


def _decode_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        # openpyxl returns naive datetimes for typed date cells; treat as UTC
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise CellDecodeError(f"expected an ISO-8601 datetime, got {value!r}")


TEXT = Codec(decode=_decode_text, encode=lambda v: v if v else None, default=str)
OPTIONAL_TEXT = Codec(decode=_decode_optional_text, encode=lambda v: v or None, default=lambda: None)
INTEGER = Codec(decode=_decode_int, encode=int, default=int)
DATETIME = Codec(decode=_decode_datetime, encode=to_utc_z, default=lambda: None)


@dataclass(frozen=True)
class Column:
    header: str
    attr: str
    codec: Codec = TEXT


@dataclass(frozen=True)
class TableSchema(Generic[T]):
    name: str
    record_type: type
    columns: tuple[Column, ...]

    def __post_init__(self):
        field_names = {f.name for f in dataclasses.fields(self.record_type)}
        missing = [c.attr for c in self.columns if c.attr not in field_names]
        if missing:
            raise TypeError(f"{self.name}: columns {missing} are not fields of {self.record_type.__name__}")

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    def encode(self, record: T) -> list[Any]:
        return [c.codec.encode(getattr(record, c.attr)) for c in self.columns]

    def decode(self, row: dict[str, Any], on_error: Callable[[Column, Any, Exception], None]) -> T:
        """
        Build a record from a {header: cell} mapping.

        Missing headers and undecodable cells take the codec default; the
        latter are reported through `on_error` so the caller can log them.
        """
        values = {}
        for column in self.columns:
            raw = row.get(column.header)
            try:
                values[column.attr] = column.codec.decode(raw)
            except CellDecodeError as exc:
                on_error(column, raw, exc)
                values[column.attr] = column.codec.default()
        return self.record_type(**values)


def schema_map(schemas: Iterable[TableSchema]) -> dict[str, TableSchema]:
    result: dict[str, TableSchema] = {}
    for schema in schemas:
        if schema.name in result:
            raise ValueError(f"Duplicate table name: {schema.name}")
        result[schema.name] = schema
    return result
