# Overview: Flask routes for clinic administration; login required, scoped to the admin's clinic.

from flask import Blueprint, current_app, g, jsonify, redirect, request, url_for
from werkzeug.exceptions import Forbidden

from app.decorators import require_login
from app.extensions import get_store
from app.services import clinic_service, patient_service, reporting_service
from .reports import report_filter_from_request


admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def ensure_same_clinic(patient) -> None:
    """A clinic admin may only act on patients currently in their clinic."""
    if g.clinic_id is not None and patient.clinic_id != g.clinic_id:
        raise Forbidden("You can only manage users of your own clinic")


@admin_bp.get("/dashboard")
@require_login
def dashboard():
    store = get_store()
    clinic = clinic_service.get_clinic(store, g.admin.clinic_id)
    return jsonify({
        "admin": g.admin.to_dict(),
        "clinic": clinic.to_dict() if clinic else None,
        "user_count": len(patient_service.list_users(store, clinic_id=g.clinic_id)),
    }), 200


@admin_bp.get("/users")
@require_login
def list_users():
    store = get_store()
    clinics = clinic_service.clinic_names(store)
    users = patient_service.list_users(store, clinic_id=g.clinic_id)
    return jsonify([
        {**user.to_dict(), "clinic_name": clinics.get(user.clinic_id)}
        for user in users
    ]), 200


@admin_bp.post("/transfer")
@require_login
def transfer_user():
    store = get_store()
    user_id = request.form.get("userId", "")
    new_clinic_id = request.form.get("newClinic", "")

    ensure_same_clinic(patient_service.require_user(store, user_id))
    patient_service.transfer_user(store, user_id, new_clinic_id)
    current_app.logger.info("User %s transferred to %s by %s", user_id, new_clinic_id, g.admin.username)
    return redirect(url_for("admin.list_users"))


@admin_bp.get("/statistics")
@require_login
def statistics():
    report = reporting_service.build_clinic_statistics(
        get_store(),
        report_filter_from_request(),
        tz=current_app.config["TIMEZONE"],
        clinic_id=g.clinic_id,
    )
    return jsonify(report), 200
