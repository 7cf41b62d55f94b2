# Overview: Service-layer operations for patients; add, transfer, delete on the Users sheet.

"""
Patient Service

Patients are the "users" of the original sheets and forms: people who
receive medicine, not staff logins (see auth_service for those).

Deleting a patient does not touch UsageEvents. Their history stays
attributed to the deleted id and reports fall back to the name snapshot
stored on each event.
"""

from __future__ import annotations

from app.errors import DuplicateNameError, NotFoundError, StorageIOError, ValidationError
from app.models import USERS, Patient
from app.storage import WorkbookStore
from app.validation import name_key, optional_text, require_text
from .clinic_service import get_clinic, require_clinic
from .identifier_service import new_id


def list_users(store: WorkbookStore, clinic_id: str | None = None) -> list[Patient]:
    users = store.table(USERS).load()
    if clinic_id is None:
        return users
    return [u for u in users if u.clinic_id == clinic_id]


def get_user(store: WorkbookStore, user_id: str) -> Patient | None:
    for user in store.table(USERS).load():
        if user.id == user_id:
            return user
    return None


def require_user(store: WorkbookStore, user_id: str) -> Patient:
    user = get_user(store, user_id)
    if not user:
        raise NotFoundError(f"User not found: {user_id}")
    return user


def add_user(store: WorkbookStore, name, notes, clinic_id, *, default_clinic_id: str | None = None) -> Patient:
    name = require_text(name, "Name")
    notes = optional_text(notes)
    clinic_id = optional_text(clinic_id) or default_clinic_id
    if not clinic_id:
        raise ValidationError("Clinic is required")

    with store.lock:
        if not get_clinic(store, clinic_id):
            raise ValidationError(f"Unknown clinic: {clinic_id}")

        users = store.table(USERS).load()
        key = name_key(name)
        if any(name_key(u.name) == key for u in users):
            raise DuplicateNameError(f"User already exists: {name}")

        user = Patient(id=new_id(), name=name, notes=notes, clinic_id=clinic_id)
        if not store.table(USERS).append_all([user]):
            raise StorageIOError("Failed to save the new user")
    return user


def transfer_user(store: WorkbookStore, user_id: str, new_clinic_id: str) -> Patient:
    with store.lock:
        users = store.table(USERS).load()
        user = next((u for u in users if u.id == user_id), None)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")
        require_clinic(store, new_clinic_id)

        user.clinic_id = new_clinic_id
        if not store.table(USERS).save_all(users):
            raise StorageIOError("Failed to save the transfer")
    return user


def delete_user(store: WorkbookStore, user_id: str) -> Patient:
    with store.lock:
        users = store.table(USERS).load()
        user = next((u for u in users if u.id == user_id), None)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")

        remaining = [u for u in users if u.id != user_id]
        if not store.table(USERS).save_all(remaining):
            raise StorageIOError("Failed to delete the user")
    return user
