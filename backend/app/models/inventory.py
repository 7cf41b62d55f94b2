from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime

from app.storage import Column, TableSchema, TEXT, OPTIONAL_TEXT, INTEGER, DATETIME
from app.time_utils import to_utc_z


@dataclass
class Medicine:
    """
    Inventory item with an on-hand quantity.

    quantity_on_hand only grows (add + restock). Usage never decrements it;
    remaining stock is quantity_on_hand minus the sum of recorded usage.
    """
    id: str
    name: str
    category: str
    quantity_on_hand: int
    last_updated: datetime | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_updated"] = to_utc_z(self.last_updated)
        return data


@dataclass(frozen=True)
class UsageEvent:
    """Append-only record of medicine consumed by a patient."""
    id: str
    medicine_id: str
    user_id: str
    user_name_snapshot: str
    notes: str
    quantity_used: int
    timestamp: datetime | None
    clinic_id: str | None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = to_utc_z(self.timestamp)
        return data


MEDICINES = TableSchema(
    name="Medicines",
    record_type=Medicine,
    columns=(
        Column("id", "id"),
        Column("name", "name"),
        Column("category", "category"),
        Column("quantity", "quantity_on_hand", INTEGER),
        Column("lastUpdated", "last_updated", DATETIME),
    ),
)

USAGE_EVENTS = TableSchema(
    name="UsageEvents",
    record_type=UsageEvent,
    columns=(
        Column("id", "id"),
        Column("medicineId", "medicine_id"),
        Column("userId", "user_id"),
        Column("userNameSnapshot", "user_name_snapshot"),
        Column("notes", "notes", TEXT),
        Column("quantity", "quantity_used", INTEGER),
        Column("timestamp", "timestamp", DATETIME),
        Column("clinicId", "clinic_id", OPTIONAL_TEXT),
    ),
)
