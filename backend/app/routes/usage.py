# Overview: Flask routes for recording medicine usage; parses form input and redirects on success.

from flask import Blueprint, jsonify, redirect, request, url_for

from app.errors import ValidationError
from app.extensions import get_store
from app.services import usage_service
from app.services.usage_service import UsageLine


usage_bp = Blueprint("usage", __name__, url_prefix="/usage")


def _parse_lines(form) -> list[UsageLine]:
    """
    One line per repeated medicineId/quantity pair.

    `confirmed` repeats once per ticked medicine id. A form that sends no
    `confirmed` field at all confirms every line.
    """
    medicine_ids = form.getlist("medicineId")
    quantities = form.getlist("quantity")
    if len(medicine_ids) != len(quantities):
        raise ValidationError("Each medicine needs a quantity")

    if "confirmed" in form:
        confirmed_ids = set(form.getlist("confirmed"))
    else:
        confirmed_ids = set(medicine_ids)

    return [
        UsageLine(medicine_id=medicine_id, quantity=quantity, confirmed=medicine_id in confirmed_ids)
        for medicine_id, quantity in zip(medicine_ids, quantities)
    ]


@usage_bp.get("")
def list_usage():
    events = usage_service.list_usage(get_store())
    return jsonify([event.to_dict() for event in events]), 200


@usage_bp.post("/record")
def record_usage():
    usage_service.record_usage(
        get_store(),
        user_id=request.form.get("userId", ""),
        items=_parse_lines(request.form),
    )
    return redirect(url_for("reports.usage_report"))
