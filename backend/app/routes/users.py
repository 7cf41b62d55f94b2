# Overview: Flask routes for patients; parses form input and redirects on success.

from flask import Blueprint, current_app, g, jsonify, redirect, request, url_for

from app.decorators import require_login
from app.extensions import get_store
from app.services import patient_service
from .admin import ensure_same_clinic


users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.get("")
def list_users():
    clinic_id = request.args.get("clinic") or None
    users = patient_service.list_users(get_store(), clinic_id=clinic_id)
    return jsonify([user.to_dict() for user in users]), 200


@users_bp.post("/add")
def add_user():
    patient_service.add_user(
        get_store(),
        name=request.form.get("name"),
        notes=request.form.get("notes"),
        clinic_id=request.form.get("clinicId"),
        default_clinic_id=current_app.config["DEFAULT_CLINIC_ID"],
    )
    return redirect(url_for("reports.dashboard"))


@users_bp.post("/<user_id>/delete")
@require_login
def delete_user(user_id: str):
    """
    Remove a patient. Their usage history is kept and still shows up in
    reports under the name recorded on each event.
    """
    store = get_store()
    ensure_same_clinic(patient_service.require_user(store, user_id))
    patient = patient_service.delete_user(store, user_id)
    current_app.logger.info("User %s deleted by %s", patient.id, g.admin.username)
    return redirect(url_for("admin.list_users"))
