# Overview: Flask routes for admin login/logout using the signed session cookie.

from flask import Blueprint, current_app, redirect, render_template, request, session, url_for

from app.decorators import SESSION_KEY
from app.extensions import get_store
from app.services import auth_service


auth_bp = Blueprint("auth", __name__)


@auth_bp.get("/login")
def login():
    return render_template("login.html", error=None), 200


@auth_bp.post("/login")
def login_submit():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""

    admin = auth_service.authenticate(get_store(), username, password)
    if not admin:
        current_app.logger.warning("Failed admin login for %r", username)
        return render_template("login.html", error="Invalid username or password"), 401

    session.clear()
    session[SESSION_KEY] = {
        "username": admin.username,
        "role": admin.role,
        "clinic_id": admin.clinic_id,
    }
    return redirect(url_for("admin.dashboard"))


@auth_bp.get("/logout")
def logout():
    session.clear()
    return redirect(url_for("auth.login"))
