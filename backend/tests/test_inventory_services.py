"""
Repository rule tests: medicines, patients, clinics.
"""

import pytest

from app.errors import DuplicateNameError, NotFoundError, StorageIOError, ValidationError
from app.models import USAGE_EVENTS
from app.services import clinic_service, medicine_service, patient_service, usage_service
from app.services.usage_service import UsageLine


class TestAddMedicine:
    def test_distinct_names_are_accepted(self, store):
        for name in ["Paracetamol", "Ibuprofen", "Amoxicillin", "Zinc"]:
            medicine_service.add_medicine(store, name, "General", 5)

        medicines = medicine_service.list_medicines(store)
        assert [m.name for m in medicines] == ["Paracetamol", "Ibuprofen", "Amoxicillin", "Zinc"]
        assert len({m.id for m in medicines}) == 4
        assert all(m.last_updated is not None for m in medicines)

    @pytest.mark.parametrize("clash", ["paracetamol", "PARACETAMOL", "  Paracetamol ", "ParaCetamol"])
    def test_case_insensitive_duplicate(self, store, paracetamol, clash):
        with pytest.raises(DuplicateNameError):
            medicine_service.add_medicine(store, clash, "Painkiller", 3)
        assert len(medicine_service.list_medicines(store)) == 1

    def test_inner_whitespace_is_collapsed(self, store):
        medicine = medicine_service.add_medicine(store, "  Vitamin   C ", "Supplement", 3)
        assert medicine.name == "Vitamin C"
        with pytest.raises(DuplicateNameError):
            medicine_service.add_medicine(store, "vitamin c", "Supplement", 1)

    @pytest.mark.parametrize("quantity", [0, -1, "0", "abc", "", None, "2.5", "1e3", 2.0, True])
    def test_rejects_bad_quantity(self, store, quantity):
        with pytest.raises(ValidationError):
            medicine_service.add_medicine(store, "Zinc", "Supplement", quantity)

    @pytest.mark.parametrize("name,category", [("", "General"), ("   ", "General"), ("Zinc", ""), (None, "X")])
    def test_rejects_blank_fields(self, store, name, category):
        with pytest.raises(ValidationError):
            medicine_service.add_medicine(store, name, category, 1)

    def test_string_quantity_from_form(self, store):
        medicine = medicine_service.add_medicine(store, "Zinc", "Supplement", " 12 ")
        assert medicine.quantity_on_hand == 12

    def test_formula_like_names_keep_their_text(self, store):
        medicine_service.add_medicine(store, "=1+1 syrup", "Syrup", 5)
        medicine_service.add_medicine(store, "=2+2 syrup", "Syrup", 5)

        assert [m.name for m in medicine_service.list_medicines(store)] == ["=1+1 syrup", "=2+2 syrup"]
        with pytest.raises(DuplicateNameError):
            medicine_service.add_medicine(store, "=1+1 SYRUP", "Syrup", 1)

    def test_write_failure_is_surfaced(self, store, monkeypatch):
        monkeypatch.setattr(store, "write_table", lambda name, records: False)
        with pytest.raises(StorageIOError):
            medicine_service.add_medicine(store, "Zinc", "Supplement", 1)


class TestRestock:
    def test_increases_quantity(self, store, paracetamol):
        medicine_service.restock_medicine(store, paracetamol.id, "5")

        reloaded = medicine_service.get_medicine(store, paracetamol.id)
        assert reloaded.quantity_on_hand == 15
        assert reloaded.last_updated is not None

    def test_unknown_medicine(self, store):
        with pytest.raises(NotFoundError):
            medicine_service.restock_medicine(store, "missing", 5)

    def test_rejects_non_positive(self, store, paracetamol):
        with pytest.raises(ValidationError):
            medicine_service.restock_medicine(store, paracetamol.id, 0)


class TestPatients:
    def test_add_user(self, store):
        user = patient_service.add_user(store, "Asha", "  note ", "branch")
        assert user.clinic_id == "branch"
        assert user.notes == "note"
        assert patient_service.get_user(store, user.id) == user

    def test_formula_like_name_and_notes(self, store):
        user = patient_service.add_user(store, "=A1", "=cmd|' /C calc'!A0", "main")
        assert patient_service.get_user(store, user.id) == user
        assert [u.name for u in patient_service.list_users(store)] == ["=A1"]

    def test_control_characters_are_dropped(self, store):
        user = patient_service.add_user(store, "Asha\x01 Mwita", "pasted\x0bnote\x02", "main")
        assert (user.name, user.notes) == ("Asha Mwita", "pastednote")
        assert patient_service.get_user(store, user.id) == user

    def test_blank_clinic_uses_default(self, store):
        user = patient_service.add_user(store, "Asha", "", "", default_clinic_id="main")
        assert user.clinic_id == "main"

    def test_unknown_clinic(self, store):
        with pytest.raises(ValidationError):
            patient_service.add_user(store, "Asha", "", "nowhere")

    def test_duplicate_name(self, store, patient):
        with pytest.raises(DuplicateNameError):
            patient_service.add_user(store, "asha MWITA", "", "branch")

    def test_list_by_clinic(self, store, patient, other_patient):
        assert [u.id for u in patient_service.list_users(store, clinic_id="branch")] == [other_patient.id]
        assert len(patient_service.list_users(store)) == 2

    def test_transfer(self, store, patient):
        patient_service.transfer_user(store, patient.id, "branch")
        assert patient_service.get_user(store, patient.id).clinic_id == "branch"

    def test_transfer_unknown_user_or_clinic(self, store, patient):
        with pytest.raises(NotFoundError):
            patient_service.transfer_user(store, "missing", "branch")
        with pytest.raises(NotFoundError):
            patient_service.transfer_user(store, patient.id, "nowhere")
        assert patient_service.get_user(store, patient.id).clinic_id == "main"

    def test_transfer_then_usage_stamps_new_clinic(self, store, patient, paracetamol):
        usage_service.record_usage(store, patient.id, [UsageLine(paracetamol.id, 1)])
        patient_service.transfer_user(store, patient.id, "branch")
        usage_service.record_usage(store, patient.id, [UsageLine(paracetamol.id, 2)])

        events = usage_service.list_usage(store)
        assert [e.clinic_id for e in events] == ["main", "branch"]

    def test_delete_keeps_usage_events(self, store, patient, other_patient, paracetamol):
        usage_service.record_usage(store, patient.id, [UsageLine(paracetamol.id, 3)])
        before = store.table(USAGE_EVENTS).load()

        patient_service.delete_user(store, patient.id)

        assert patient_service.get_user(store, patient.id) is None
        assert [u.id for u in patient_service.list_users(store)] == [other_patient.id]
        assert store.table(USAGE_EVENTS).load() == before

    def test_delete_unknown(self, store):
        with pytest.raises(NotFoundError):
            patient_service.delete_user(store, "missing")


class TestClinics:
    def test_defaults_seeded_once(self, app, store):
        assert [c.id for c in clinic_service.list_clinics(store)] == ["main", "branch"]
        assert clinic_service.seed_default_clinics(store, app.config["DEFAULT_CLINICS"]) == 0
        assert len(clinic_service.list_clinics(store)) == 2

    def test_add_clinic(self, store):
        clinic = clinic_service.add_clinic(store, "north", "North Clinic")
        assert clinic_service.get_clinic(store, "north") == clinic

    def test_add_clinic_duplicates(self, store):
        with pytest.raises(DuplicateNameError):
            clinic_service.add_clinic(store, "main", "Another")
        with pytest.raises(DuplicateNameError):
            clinic_service.add_clinic(store, "other", "main clinic")
        with pytest.raises(ValidationError):
            clinic_service.add_clinic(store, "has space", "Spaced")
