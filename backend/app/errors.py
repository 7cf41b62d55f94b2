# Overview: Error taxonomy shared by the storage layer, services and routes.

from __future__ import annotations

from dataclasses import dataclass


class InventoryError(Exception):
    """Base class for errors surfaced to the user with a readable message."""
    status_code = 400


class ValidationError(InventoryError):
    """400-level input problem (missing or malformed field)."""


class DuplicateNameError(InventoryError):
    """409-level uniqueness violation (medicine or patient name)."""
    status_code = 409


class NotFoundError(InventoryError):
    """Referenced id does not exist."""
    status_code = 404


@dataclass(frozen=True)
class Shortage:
    medicine_id: str
    medicine_name: str
    requested: int
    remaining: int

    def describe(self) -> str:
        return (
            f"Insufficient stock for {self.medicine_name}: "
            f"requested {self.requested}, remaining {self.remaining} only"
        )


class InsufficientStockError(InventoryError):
    """Requested usage exceeds the derived remaining stock of one or more medicines."""
    status_code = 409

    def __init__(self, shortages: list[Shortage]):
        self.shortages = list(shortages)
        super().__init__("; ".join(s.describe() for s in self.shortages))


class StorageError(Exception):
    """Workbook file could not be created, read or written."""
    status_code = 500


class StorageInitError(StorageError):
    pass


class StorageIOError(StorageError):
    pass
