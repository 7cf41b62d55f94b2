# Overview: Service-layer operations for admin accounts; bcrypt hashing and login checks.

"""
Admin Authentication Service

Staff logins live in the Admins sheet. Passwords are hashed with bcrypt
(cost factor 12); the sheet never holds a plain password.

Roles:
- superadmin: sees and manages every clinic
- admin: scoped to the clinic in clinic_id
"""

import re

import bcrypt

from app.errors import DuplicateNameError, StorageIOError, ValidationError
from app.models import ADMINS, ROLES, ROLE_SUPERADMIN, AdminAccount
from app.storage import WorkbookStore
from app.validation import name_key, optional_text, require_text
from .clinic_service import get_clinic


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12 (validated first)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in the sheet


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for blank or malformed hashes (e.g. a row typed into the
    sheet by hand with a plain password).
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def list_admins(store: WorkbookStore) -> list[AdminAccount]:
    return store.table(ADMINS).load()


def get_admin(store: WorkbookStore, username: str) -> AdminAccount | None:
    key = name_key(username)
    for admin in list_admins(store):
        if name_key(admin.username) == key:
            return admin
    return None


def create_admin(
    store: WorkbookStore,
    username: str,
    password: str,
    role: str = "admin",
    clinic_id: str | None = None,
) -> AdminAccount:
    username = require_text(username, "Username")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
    clinic_id = optional_text(clinic_id) or None
    if role != ROLE_SUPERADMIN and not clinic_id:
        raise ValidationError("An admin must be assigned to a clinic")

    password_hash = hash_password(password or "")

    with store.lock:
        if clinic_id and not get_clinic(store, clinic_id):
            raise ValidationError(f"Unknown clinic: {clinic_id}")
        if get_admin(store, username):
            raise DuplicateNameError(f"Admin already exists: {username}")

        admin = AdminAccount(
            username=username,
            password_hash=password_hash,
            role=role,
            clinic_id=clinic_id,
        )
        if not store.table(ADMINS).append_all([admin]):
            raise StorageIOError("Failed to save admin account")
    return admin


def authenticate(store: WorkbookStore, username: str, password: str) -> AdminAccount | None:
    """Return the matching admin, or None for an unknown user or wrong password."""
    if not username or not password:
        return None
    admin = get_admin(store, username)
    if not admin:
        return None
    if not verify_password(password, admin.password_hash):
        return None
    return admin
