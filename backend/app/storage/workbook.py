# Overview: Spreadsheet-backed table store; one .xlsx workbook, one sheet per table.

"""
Workbook Store

A single .xlsx file stands in for a database. Each registered TableSchema
is one sheet: a header row followed by data rows.

Semantics (authoritative):
- Every read loads the whole workbook; every write rewrites the whole file.
  Cost is O(workbook size) per operation.
- read_table never raises. A missing file, missing sheet or unreadable
  workbook is logged and reads as an empty table.
- write_table returns True/False instead of raising, so callers decide
  whether a failed write is fatal. Saves go to a temporary file that is
  then moved over the workbook, so a failed save leaves the previous file
  intact.
- append_table is read + concatenate + write_table. It is NOT atomic:
  two concurrent appenders can each read the same rows and the later
  save drops the earlier appender's rows.

Concurrency:
- `lock` is a process-local re-entrant lock. write_table holds it for the
  load/save cycle; services hold it around read-validate-write sequences.
- Nothing protects against a second process writing the same file. Run a
  single worker.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from typing import Any, Generic, Iterable, TypeVar

from openpyxl import Workbook, load_workbook

from app.errors import StorageInitError
from .schema import Column, TableSchema, schema_map


logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkbookStore:
    def __init__(self, path: str, schemas: Iterable[TableSchema]):
        self.path = os.path.abspath(path)
        self.schemas = schema_map(schemas)
        self.lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<WorkbookStore {self.path} tables={list(self.schemas)}>"

    # -------------------------------------------------------------- helpers

    def _schema(self, name: str) -> TableSchema:
        try:
            return self.schemas[name]
        except KeyError:
            raise KeyError(f"Unknown table: {name}") from None

    def _save(self, workbook: Workbook) -> None:
        directory = os.path.dirname(self.path)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".xlsx", dir=directory)
        os.close(fd)
        try:
            workbook.save(tmp_path)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    @staticmethod
    def _write_sheet(workbook: Workbook, schema: TableSchema, rows: list[list[Any]]) -> None:
        if schema.name in workbook.sheetnames:
            index = workbook.sheetnames.index(schema.name)
            workbook.remove(workbook[schema.name])
            sheet = workbook.create_sheet(schema.name, index)
        else:
            sheet = workbook.create_sheet(schema.name)
        sheet.append(schema.headers)
        for row in rows:
            sheet.append(row)
            # openpyxl turns "=..." into a formula; stored values are always literal text
            for cell in sheet[sheet.max_row]:
                if isinstance(cell.value, str) and cell.value.startswith("="):
                    cell.data_type = "s"

    @staticmethod
    def _is_blank(row: tuple) -> bool:
        return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in row)

    def _label_rows(self, schema: TableSchema, raw_rows: list[tuple]) -> list[dict[str, Any]]:
        """
        Turn raw sheet rows into {header: cell} dicts.

        The first row is the header if it names at least one declared column;
        otherwise the sheet has no header row and the declared headers apply
        positionally to every row.
        """
        raw_rows = [row for row in raw_rows if not self._is_blank(row)]
        if not raw_rows:
            return []

        first = [str(cell).strip() if cell is not None else "" for cell in raw_rows[0]]
        if set(first) & set(schema.headers):
            headers, data = first, raw_rows[1:]
        else:
            logger.warning("Sheet %s has no header row; using declared columns", schema.name)
            headers, data = schema.headers, raw_rows

        labelled = []
        for row in data:
            labelled.append({
                header: row[i] if i < len(row) else None
                for i, header in enumerate(headers)
                if header
            })
        return labelled

    # ----------------------------------------------------------- operations

    def initialize(self) -> None:
        """
        Ensure the data directory, the workbook and every registered sheet exist.

        Sheets that are missing or completely empty get their header row.
        Safe to call on every start-up; a complete workbook is not rewritten.
        """
        directory = os.path.dirname(self.path)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise StorageInitError(f"Cannot create data directory {directory}: {exc}") from exc

        with self.lock:
            if os.path.exists(self.path):
                try:
                    workbook = load_workbook(self.path)
                except Exception as exc:
                    raise StorageInitError(f"Cannot open workbook {self.path}: {exc}") from exc
                created = False
            else:
                workbook = Workbook()
                created = True

            changed = created
            for schema in self.schemas.values():
                if schema.name not in workbook.sheetnames:
                    self._write_sheet(workbook, schema, [])
                    changed = True
                    continue
                sheet = workbook[schema.name]
                if all(self._is_blank(row) for row in sheet.iter_rows(values_only=True)):
                    self._write_sheet(workbook, schema, [])
                    changed = True

            if created:
                # Workbook() starts with a default "Sheet"
                for name in list(workbook.sheetnames):
                    if name not in self.schemas:
                        workbook.remove(workbook[name])

            if not changed:
                logger.info("Workbook %s is up to date", self.path)
                return

            try:
                self._save(workbook)
            except Exception as exc:
                raise StorageInitError(f"Cannot write workbook {self.path}: {exc}") from exc

        logger.info("%s workbook %s", "Created" if created else "Updated", self.path)

    def read_table(self, name: str) -> list:
        schema = self._schema(name)
        if not os.path.exists(self.path):
            logger.error("Workbook %s does not exist; reading %s as empty", self.path, name)
            return []
        try:
            workbook = load_workbook(self.path, read_only=True, data_only=True)
            try:
                if name not in workbook.sheetnames:
                    logger.error("Sheet %s missing from %s", name, self.path)
                    return []
                raw_rows = list(workbook[name].iter_rows(values_only=True))
            finally:
                workbook.close()
        except Exception:
            logger.exception("Error reading %s", name)
            return []

        def _report(column: Column, raw: Any, exc: Exception) -> None:
            logger.warning("%s.%s: %s (using default)", name, column.header, exc)

        return [schema.decode(row, _report) for row in self._label_rows(schema, raw_rows)]

    def write_table(self, name: str, records: Iterable) -> bool:
        schema = self._schema(name)
        try:
            rows = [schema.encode(record) for record in records]
            with self.lock:
                workbook = load_workbook(self.path)
                self._write_sheet(workbook, schema, rows)
                self._save(workbook)
        except Exception:
            logger.exception("Error writing %s", name)
            return False
        logger.info("Updated %s sheet (%d rows)", name, len(rows))
        return True

    def append_table(self, name: str, new_records: Iterable) -> bool:
        """Read-modify-write; see the module docstring for the race this allows."""
        with self.lock:
            existing = self.read_table(name)
            return self.write_table(name, [*existing, *new_records])

    def table(self, schema_or_name: TableSchema[T] | str) -> "Table[T]":
        name = schema_or_name if isinstance(schema_or_name, str) else schema_or_name.name
        return Table(self, self._schema(name))


class Table(Generic[T]):
    """
    Typed view of one sheet.

    load/save_all/append_all carry the same contract as the store's
    read_table/write_table/append_table, including the non-atomic append.
    """

    def __init__(self, store: WorkbookStore, schema: TableSchema[T]):
        self.store = store
        self.schema = schema

    @property
    def name(self) -> str:
        return self.schema.name

    def load(self) -> list[T]:
        return self.store.read_table(self.schema.name)

    def save_all(self, records: Iterable[T]) -> bool:
        return self.store.write_table(self.schema.name, records)

    def append_all(self, records: Iterable[T]) -> bool:
        return self.store.append_table(self.schema.name, records)
