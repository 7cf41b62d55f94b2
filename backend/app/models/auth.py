from __future__ import annotations

from dataclasses import dataclass

from app.storage import Column, TableSchema, OPTIONAL_TEXT


ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"
ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)


@dataclass
class AdminAccount:
    """
    Staff login. A superadmin sees every clinic; an admin is scoped to clinic_id.
    """
    username: str
    password_hash: str
    role: str
    clinic_id: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == ROLE_SUPERADMIN

    def to_dict(self) -> dict:
        # Never expose password_hash
        return {
            "username": self.username,
            "role": self.role,
            "clinic_id": self.clinic_id,
        }


ADMINS = TableSchema(
    name="Admins",
    record_type=AdminAccount,
    columns=(
        Column("username", "username"),
        Column("passwordHash", "password_hash"),
        Column("role", "role"),
        Column("clinicId", "clinic_id", OPTIONAL_TEXT),
    ),
)
