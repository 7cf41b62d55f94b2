# Overview: Session login decorators for admin routes.

from functools import wraps
from flask import g, redirect, session, url_for

from .extensions import get_store
from .services import auth_service


SESSION_KEY = "admin"


def _load_admin():
    data = session.get(SESSION_KEY)
    if not data:
        return None
    # Re-read so a removed account loses access on its next request
    return auth_service.get_admin(get_store(), data.get("username"))


def require_login(f):
    """
    Require a logged-in admin.

    Sets g.admin (AdminAccount) and g.clinic_id (None for a superadmin).
    Redirects to the login page otherwise.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        admin = _load_admin()
        if not admin:
            session.pop(SESSION_KEY, None)
            return redirect(url_for("auth.login"))

        g.admin = admin
        g.clinic_id = None if admin.is_superadmin else admin.clinic_id
        return f(*args, **kwargs)

    return decorated_function
