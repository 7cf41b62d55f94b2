# Overview: Flask routes for medicines; parses form input and redirects on success.

from flask import Blueprint, jsonify, redirect, request, url_for

from app.extensions import get_store
from app.services import medicine_service


medicines_bp = Blueprint("medicines", __name__, url_prefix="/medicines")


@medicines_bp.get("")
def list_medicines():
    medicines = medicine_service.list_medicines(get_store())
    return jsonify([medicine.to_dict() for medicine in medicines]), 200


@medicines_bp.post("/add")
def add_medicine():
    medicine_service.add_medicine(
        get_store(),
        name=request.form.get("name"),
        category=request.form.get("category"),
        quantity=request.form.get("quantity"),
    )
    return redirect(url_for("reports.dashboard"))


@medicines_bp.post("/<medicine_id>/restock")
def restock_medicine(medicine_id: str):
    medicine_service.restock_medicine(
        get_store(),
        medicine_id,
        quantity=request.form.get("quantity"),
    )
    return redirect(url_for("reports.dashboard"))
