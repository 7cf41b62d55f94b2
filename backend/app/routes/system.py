# backend/app/routes/system.py
"""
System health and reference-data endpoints.
"""

import os
import time
from flask import Blueprint, current_app, jsonify
from app.extensions import get_store
from app.models import ALL_TABLES
from app.services import clinic_service
from app.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_workbook_health() -> dict:
    """
    Check the workbook exists and every sheet can be read.

    read_table never raises, so a missing sheet shows up as zero rows;
    the file check is what distinguishes "empty" from "gone".
    """
    start_time = time.time()
    store = get_store()
    if not os.path.exists(store.path):
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Workbook file missing",
        }

    counts = {schema.name: len(store.read_table(schema.name)) for schema in ALL_TABLES}
    elapsed_ms = (time.time() - start_time) * 1000
    return {
        "status": "healthy",
        "latency_ms": round(elapsed_ms, 2),
        "details": counts,
    }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: workbook present
    - 503: workbook missing
    """
    workbook_health = check_workbook_health()
    http_status = 200 if workbook_health["status"] == "healthy" else 503
    if http_status != 200:
        current_app.logger.error("Health check failed: %s", workbook_health.get("error"))

    return {
        "status": workbook_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"workbook": workbook_health},
    }, http_status


@system_bp.get("/clinics")
def list_clinics():
    clinics = clinic_service.list_clinics(get_store())
    return jsonify([clinic.to_dict() for clinic in clinics]), 200
