"""
Pytest fixtures for the clinic inventory backend tests.

Every test gets its own workbook under tmp_path, an app bound to it, and
a test client.
"""

from datetime import datetime

import pytest

from app import create_app
from app.extensions import get_store
from app.models import USAGE_EVENTS, UsageEvent
from app.services import auth_service, medicine_service, patient_service


TEST_CLINICS = (
    ("main", "Main Clinic"),
    ("branch", "Branch Clinic"),
)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'DATA_DIR': str(tmp_path),
        'WORKBOOK_PATH': str(tmp_path / "database.xlsx"),
        'TIMEZONE': 'UTC',
        'DEFAULT_CLINICS': TEST_CLINICS,
        'DEFAULT_CLINIC_ID': 'main',
    })
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def store(app):
    return get_store()


@pytest.fixture(scope='function')
def paracetamol(store):
    return medicine_service.add_medicine(store, "Paracetamol", "Painkiller", 10)


@pytest.fixture(scope='function')
def amoxicillin(store):
    return medicine_service.add_medicine(store, "Amoxicillin", "Antibiotic", 20)


@pytest.fixture(scope='function')
def patient(store):
    return patient_service.add_user(store, "Asha Mwita", "allergic to penicillin", "main")


@pytest.fixture(scope='function')
def other_patient(store):
    return patient_service.add_user(store, "Juma Ali", "", "branch")


@pytest.fixture(scope='function')
def superadmin(store):
    return auth_service.create_admin(store, "boss", "Password123", role="superadmin")


@pytest.fixture(scope='function')
def clinic_admin(store):
    return auth_service.create_admin(store, "nurse", "Password123", role="admin", clinic_id="main")


def add_event(store, *, medicine, user, quantity, timestamp: datetime, clinic_id=None, event_id=None):
    """Append a usage event with a fixed timestamp (bypasses the stock check)."""
    event = UsageEvent(
        id=event_id or f"evt-{timestamp.isoformat()}-{medicine.id}",
        medicine_id=medicine.id,
        user_id=user.id,
        user_name_snapshot=user.name,
        notes=user.notes,
        quantity_used=quantity,
        timestamp=timestamp,
        clinic_id=clinic_id if clinic_id is not None else user.clinic_id,
    )
    assert store.table(USAGE_EVENTS).append_all([event])
    return event


def login(client, username: str, password: str = "Password123"):
    """Helper to log in through the form."""
    return client.post('/login', data={'username': username, 'password': password})
