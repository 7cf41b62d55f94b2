# backend/app/config.py
from __future__ import annotations
import os


_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Workbook stored in backend/data/database.xlsx unless overridden
    DATA_DIR = os.environ.get("DATA_DIR", os.path.join(_BACKEND_DIR, "data"))
    WORKBOOK_PATH = os.environ.get(
        "WORKBOOK_PATH",  # optional alternative location
        os.path.join(DATA_DIR, "database.xlsx"),  # default local location
    )

    PORT = int(os.environ.get("PORT", "3000"))

    # Report boundaries (day/week/month) are computed in this zone
    TIMEZONE = os.environ.get("TIMEZONE", "Africa/Dar_es_Salaam")
    DATE_FORMAT = "%d/%m/%Y"
    TIME_FORMAT = "%H:%M"

    INCLUDE_USERS_WITH_NO_USAGE = _env_flag("INCLUDE_USERS_WITH_NO_USAGE", True)

    # Seeded into the Clinics sheet on first start (id, name)
    DEFAULT_CLINICS = (
        ("main", "Main Clinic"),
        ("branch", "Branch Clinic"),
    )
    DEFAULT_CLINIC_ID = "main"
