"""
Admin login and clinic-scoped administration tests.
"""

import pytest

from app.errors import DuplicateNameError, ValidationError
from app.services import auth_service, patient_service, usage_service
from app.services.auth_service import PasswordValidationError

from conftest import login


class TestAuthService:
    def test_password_is_hashed(self, store, superadmin):
        stored = auth_service.get_admin(store, "boss")
        assert stored.password_hash != "Password123"
        assert auth_service.verify_password("Password123", stored.password_hash)

    def test_authenticate(self, store, superadmin):
        assert auth_service.authenticate(store, "BOSS", "Password123").username == "boss"
        assert auth_service.authenticate(store, "boss", "wrong-pass1") is None
        assert auth_service.authenticate(store, "nobody", "Password123") is None

    def test_plain_text_hash_never_matches(self):
        assert auth_service.verify_password("secret", "secret") is False
        assert auth_service.verify_password("secret", "") is False

    def test_weak_password(self, store):
        with pytest.raises(PasswordValidationError):
            auth_service.create_admin(store, "weak", "short", role="superadmin")

    def test_admin_needs_known_clinic(self, store):
        with pytest.raises(ValidationError):
            auth_service.create_admin(store, "nurse", "Password123", role="admin")
        with pytest.raises(ValidationError):
            auth_service.create_admin(store, "nurse", "Password123", role="admin", clinic_id="nowhere")
        with pytest.raises(ValidationError):
            auth_service.create_admin(store, "nurse", "Password123", role="owner", clinic_id="main")

    def test_duplicate_username(self, store, superadmin):
        with pytest.raises(DuplicateNameError):
            auth_service.create_admin(store, "Boss", "Password123", role="superadmin")


class TestLogin:
    def test_login_page(self, client):
        resp = client.get("/login")
        assert resp.status_code == 200
        assert b"Admin login" in resp.data

    def test_bad_credentials_render_in_place(self, client, superadmin):
        resp = login(client, "boss", "wrong-pass1")
        assert resp.status_code == 401
        assert b"Invalid username or password" in resp.data

    def test_login_then_logout(self, client, superadmin):
        resp = login(client, "boss")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/admin/dashboard")
        assert client.get("/admin/dashboard").status_code == 200

        client.get("/logout")
        resp = client.get("/admin/dashboard")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/login")


class TestAdminRoutes:
    def test_superadmin_sees_every_user(self, client, patient, other_patient, superadmin):
        login(client, "boss")
        users = client.get("/admin/users").json
        assert {u["id"] for u in users} == {patient.id, other_patient.id}

    def test_clinic_admin_sees_own_clinic(self, client, patient, other_patient, clinic_admin):
        login(client, "nurse")
        users = client.get("/admin/users").json
        assert [u["id"] for u in users] == [patient.id]
        assert users[0]["clinic_name"] == "Main Clinic"

    def test_transfer(self, client, store, patient, superadmin):
        login(client, "boss")
        resp = client.post("/admin/transfer", data={"userId": patient.id, "newClinic": "branch"})

        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/admin/users")
        assert patient_service.get_user(store, patient.id).clinic_id == "branch"

    def test_transfer_unknown_clinic(self, client, store, patient, superadmin):
        login(client, "boss")
        resp = client.post("/admin/transfer", data={"userId": patient.id, "newClinic": "nowhere"})

        assert resp.status_code == 404
        assert b"Clinic not found" in resp.data

    def test_transfer_unknown_user(self, client, superadmin):
        login(client, "boss")
        resp = client.post("/admin/transfer", data={"userId": "missing", "newClinic": "branch"})
        assert resp.status_code == 404

    def test_clinic_admin_cannot_touch_other_clinic(self, client, store, other_patient, clinic_admin):
        login(client, "nurse")
        resp = client.post("/admin/transfer", data={"userId": other_patient.id, "newClinic": "main"})

        assert resp.status_code == 403
        assert patient_service.get_user(store, other_patient.id).clinic_id == "branch"

    def test_statistics_scoped_to_clinic(self, client, store, patient, other_patient, amoxicillin, clinic_admin):
        usage_service.record_usage(store, other_patient.id, [usage_service.UsageLine(amoxicillin.id, 9)])

        login(client, "nurse")
        stats = client.get("/admin/statistics?mode=month").json

        assert [row["clinic_id"] for row in stats["clinics"]] == ["main"]
        assert stats["mode"] == "month"
        assert stats["top_medicines"] == []
        assert (stats["total_quantity"], stats["total_users"], stats["active_users"]) == (0, 1, 0)

    def test_superadmin_statistics_cover_every_clinic(self, client, store, other_patient, amoxicillin, superadmin):
        usage_service.record_usage(store, other_patient.id, [usage_service.UsageLine(amoxicillin.id, 9)])

        login(client, "boss")
        stats = client.get("/admin/statistics").json

        assert {row["clinic_id"] for row in stats["clinics"]} == {"main", "branch"}
        assert [(m["name"], m["quantity"]) for m in stats["top_medicines"]] == [("Amoxicillin", 9)]

    def test_requires_login(self, client):
        for path in ["/admin/dashboard", "/admin/users", "/admin/statistics"]:
            resp = client.get(path)
            assert resp.status_code == 302, path
