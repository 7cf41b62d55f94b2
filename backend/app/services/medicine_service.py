# Overview: Service-layer operations for medicines; add, restock and lookup on the Medicines sheet.

from __future__ import annotations

from app.errors import DuplicateNameError, NotFoundError, StorageIOError
from app.models import MEDICINES, Medicine
from app.storage import WorkbookStore
from app.time_utils import utcnow
from app.validation import name_key, parse_positive_int, require_text
from .identifier_service import new_id


def list_medicines(store: WorkbookStore) -> list[Medicine]:
    return store.table(MEDICINES).load()


def get_medicine(store: WorkbookStore, medicine_id: str) -> Medicine | None:
    for medicine in list_medicines(store):
        if medicine.id == medicine_id:
            return medicine
    return None


def add_medicine(store: WorkbookStore, name, category, quantity) -> Medicine:
    name = require_text(name, "Medicine name")
    category = require_text(category, "Category")
    quantity = parse_positive_int(quantity, "Quantity")

    with store.lock:
        medicines = list_medicines(store)
        key = name_key(name)
        if any(name_key(m.name) == key for m in medicines):
            raise DuplicateNameError(f"Medicine already exists: {name}")

        medicine = Medicine(
            id=new_id(),
            name=name,
            category=category,
            quantity_on_hand=quantity,
            last_updated=utcnow(),
        )
        if not store.table(MEDICINES).append_all([medicine]):
            raise StorageIOError("Failed to save the new medicine")
    return medicine


def restock_medicine(store: WorkbookStore, medicine_id: str, quantity) -> Medicine:
    quantity = parse_positive_int(quantity, "Quantity")

    with store.lock:
        medicines = list_medicines(store)
        medicine = next((m for m in medicines if m.id == medicine_id), None)
        if not medicine:
            raise NotFoundError(f"Medicine not found: {medicine_id}")

        medicine.quantity_on_hand += quantity
        medicine.last_updated = utcnow()
        if not store.table(MEDICINES).save_all(medicines):
            raise StorageIOError("Failed to save the restocked quantity")
    return medicine
