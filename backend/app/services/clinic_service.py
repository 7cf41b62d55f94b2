# Overview: Service-layer operations for clinics; seeding and lookups on the Clinics sheet.

from __future__ import annotations

from typing import Iterable

from app.errors import DuplicateNameError, NotFoundError, StorageIOError, ValidationError
from app.models import CLINICS, Clinic
from app.storage import WorkbookStore
from app.validation import name_key, normalize_name, require_text


def list_clinics(store: WorkbookStore) -> list[Clinic]:
    return store.table(CLINICS).load()


def get_clinic(store: WorkbookStore, clinic_id: str | None) -> Clinic | None:
    if not clinic_id:
        return None
    for clinic in list_clinics(store):
        if clinic.id == clinic_id:
            return clinic
    return None


def require_clinic(store: WorkbookStore, clinic_id: str | None) -> Clinic:
    clinic = get_clinic(store, clinic_id)
    if not clinic:
        raise NotFoundError(f"Clinic not found: {clinic_id}")
    return clinic


def clinic_names(store: WorkbookStore) -> dict[str, str]:
    return {clinic.id: clinic.name for clinic in list_clinics(store)}


def add_clinic(store: WorkbookStore, clinic_id: str, name: str) -> Clinic:
    clinic_id = require_text(clinic_id, "Clinic id")
    name = require_text(name, "Clinic name")
    if " " in clinic_id:
        raise ValidationError("Clinic id must not contain spaces")

    with store.lock:
        clinics = list_clinics(store)
        if any(c.id == clinic_id for c in clinics):
            raise DuplicateNameError(f"Clinic id already exists: {clinic_id}")
        if any(name_key(c.name) == name_key(name) for c in clinics):
            raise DuplicateNameError(f"Clinic already exists: {name}")

        clinic = Clinic(id=clinic_id, name=name)
        if not store.table(CLINICS).append_all([clinic]):
            raise StorageIOError("Failed to save clinic")
    return clinic


def seed_default_clinics(store: WorkbookStore, defaults: Iterable[tuple[str, str]]) -> int:
    """
    Add any default clinic whose id is not in the sheet yet.

    Idempotent; returns the number of clinics added.
    """
    with store.lock:
        existing = {c.id for c in list_clinics(store)}
        missing = [
            Clinic(id=clinic_id, name=normalize_name(name))
            for clinic_id, name in defaults
            if clinic_id not in existing
        ]
        if not missing:
            return 0
        if not store.table(CLINICS).append_all(missing):
            raise StorageIOError("Failed to seed default clinics")
    return len(missing)
