# Overview: Service-layer operations for usage; stock checks and append-only usage events.

"""
Usage Invariants (authoritative)

- Remaining stock of a medicine is derived, never stored:
    remaining = quantity_on_hand - SUM(quantity_used over its UsageEvents)
- A batch is accepted only if, for every medicine in it, the batch's total
  requested quantity is <= remaining. One shortfall rejects the whole batch
  and nothing is written.
- Each accepted line becomes one UsageEvent stamped with the patient's
  clinic, name and notes as they are at write time.
- UsageEvents are append-only.

The check and the append run under store.lock, so requests inside one
process cannot interleave between them. A second process writing the same
workbook can still slip in (see app.storage.workbook).
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable

from app.errors import InsufficientStockError, NotFoundError, Shortage, StorageIOError, ValidationError
from app.models import MEDICINES, USAGE_EVENTS, Medicine, UsageEvent
from app.storage import WorkbookStore
from app.time_utils import utcnow
from app.validation import parse_positive_int
from .identifier_service import new_id
from .patient_service import require_user


@dataclass(frozen=True)
class UsageLine:
    medicine_id: str
    quantity: object
    confirmed: bool = True


def list_usage(store: WorkbookStore) -> list[UsageEvent]:
    return store.table(USAGE_EVENTS).load()


def used_by_medicine(events: Iterable[UsageEvent]) -> dict[str, int]:
    totals: dict[str, int] = {}
    for event in events:
        totals[event.medicine_id] = totals.get(event.medicine_id, 0) + event.quantity_used
    return totals


def remaining_stock(store: WorkbookStore, medicine_id: str) -> int:
    medicine = next((m for m in store.table(MEDICINES).load() if m.id == medicine_id), None)
    if not medicine:
        raise NotFoundError(f"Medicine not found: {medicine_id}")
    used = used_by_medicine(list_usage(store)).get(medicine_id, 0)
    return medicine.quantity_on_hand - used


def record_usage(store: WorkbookStore, user_id: str, items: Iterable[UsageLine]) -> list[UsageEvent]:
    confirmed = [item for item in items if item.confirmed]
    if not confirmed:
        raise ValidationError("Select at least one medicine")

    # medicine_id -> total requested, in first-seen order
    requested: "OrderedDict[str, int]" = OrderedDict()
    parsed: list[tuple[str, int]] = []
    for item in confirmed:
        if not item.medicine_id:
            raise ValidationError("Medicine is required")
        quantity = parse_positive_int(item.quantity, "Quantity")
        parsed.append((item.medicine_id, quantity))
        requested[item.medicine_id] = requested.get(item.medicine_id, 0) + quantity

    with store.lock:
        user = require_user(store, user_id)
        medicines: dict[str, Medicine] = {m.id: m for m in store.table(MEDICINES).load()}
        for medicine_id in requested:
            if medicine_id not in medicines:
                raise NotFoundError(f"Medicine not found: {medicine_id}")

        used = used_by_medicine(list_usage(store))
        shortages = []
        for medicine_id, quantity in requested.items():
            medicine = medicines[medicine_id]
            remaining = medicine.quantity_on_hand - used.get(medicine_id, 0)
            if quantity > remaining:
                shortages.append(Shortage(
                    medicine_id=medicine_id,
                    medicine_name=medicine.name,
                    requested=quantity,
                    remaining=max(remaining, 0),
                ))
        if shortages:
            raise InsufficientStockError(shortages)

        now = utcnow()
        events = [
            UsageEvent(
                id=new_id(),
                medicine_id=medicine_id,
                user_id=user.id,
                user_name_snapshot=user.name,
                notes=user.notes,
                quantity_used=quantity,
                timestamp=now,
                clinic_id=user.clinic_id,
            )
            for medicine_id, quantity in parsed
        ]
        if not store.table(USAGE_EVENTS).append_all(events):
            raise StorageIOError("Failed to save usage")
    return events
