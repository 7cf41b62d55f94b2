from __future__ import annotations

from dataclasses import dataclass, asdict

from app.storage import Column, TableSchema, OPTIONAL_TEXT


@dataclass
class Clinic:
    id: str
    name: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Patient:
    """
    A person who receives medicine ("user" in the sheet and the forms).

    clinic_id changes on transfer. Deleting a patient leaves their usage
    events in place, still pointing at the old id.
    """
    id: str
    name: str
    notes: str
    clinic_id: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


CLINICS = TableSchema(
    name="Clinics",
    record_type=Clinic,
    columns=(
        Column("id", "id"),
        Column("name", "name"),
    ),
)

USERS = TableSchema(
    name="Users",
    record_type=Patient,
    columns=(
        Column("id", "id"),
        Column("name", "name"),
        Column("notes", "notes"),
        Column("clinicId", "clinic_id", OPTIONAL_TEXT),
    ),
)
