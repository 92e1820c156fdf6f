# -*- coding: utf-8 -*-
import asyncio
import datetime as dt

from conftest import applicant, documents, manual_entry

from iti_admissions.db import crud
from iti_admissions.db.models import Student
from iti_admissions.services.console import build_edit_payload, edit_form_state

BASE = "/v1"


def submit(client, fields=None, files=None):
    return client.post(f"{BASE}/admissions", data=fields or applicant(), files=files or documents())


# ---------------------------
# Wizard submission
# ---------------------------
def test_submit_application_stores_derived_fields(client):
    r = submit(client)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["application_id"] == f"ITI-{dt.datetime.now(dt.timezone.utc).year}-{body['db_id']:04d}"

    app = client.get(f"{BASE}/admin/admissions/{body['db_id']}").json()
    assert app["status"] == "pending"
    assert app["class_10th_percentage"] == "85.00"
    assert app["class_12th_percentage"] is None
    assert app["registration_type"] == "Regular"
    assert app["qualification"] == "10th from High School Maner"
    assert app["student_credit_card_details"] is None
    assert set(app["documents"]) == {"photo", "aadhaar", "marksheet", "student_credit_card_doc"}
    assert app["documents"]["student_credit_card_doc"] is None


def test_submit_with_credit_card_nests_bank_details(client):
    fields = applicant(student_credit_card="Yes", student_credit_card_bank="SBI",
                       student_credit_card_account="00112233")
    r = submit(client, fields, documents(with_scc=True))
    assert r.status_code == 200, r.text
    app = client.get(f"{BASE}/admin/admissions/{r.json()['db_id']}").json()
    assert app["registration_type"] == "Student Credit Card"
    assert app["student_credit_card_details"] == {"bank_name": "SBI", "account_number": "00112233"}
    assert app["documents"]["student_credit_card_doc"]


def test_submit_with_credit_card_and_bank_only(client):
    fields = applicant(student_credit_card="Yes", student_credit_card_bank="SBI", student_credit_card_account="")
    r = submit(client, fields)
    assert r.status_code == 200, r.text
    app = client.get(f"{BASE}/admin/admissions/{r.json()['db_id']}").json()
    assert app["registration_type"] == "Student Credit Card"
    assert app["student_credit_card_details"] == {"bank_name": "SBI", "account_number": None}


def test_submit_with_zero_totals(client):
    r = submit(client, applicant(class_12th_marks_obtained="0", class_12th_total_marks="0"))
    assert r.status_code == 200, r.text
    app = client.get(f"{BASE}/admin/admissions/{r.json()['db_id']}").json()
    assert app["class_12th_total_marks"] == 0
    assert app["class_12th_percentage"] is None


def test_submit_ignores_client_percentage(client):
    r = submit(client, applicant(class_10th_percentage="99.99"))
    app = client.get(f"{BASE}/admin/admissions/{r.json()['db_id']}").json()
    assert app["class_10th_percentage"] == "85.00"


def test_submit_stores_outside_event_loop(client, monkeypatch):
    seen = []
    create = crud.create_application

    def recording_create(db, payload, documents=None):
        try:
            asyncio.get_running_loop()
            seen.append("loop")
        except RuntimeError:
            seen.append("worker")
        return create(db, payload, documents=documents)

    monkeypatch.setattr(crud, "create_application", recording_create)
    assert submit(client).status_code == 200
    assert seen == ["worker"]


def test_submit_requires_documents(client):
    files = documents()
    files.pop("aadhaar")
    r = submit(client, files=files)
    assert r.status_code == 400
    assert r.json()["detail"] == "All documents are required"


def test_submit_rejects_bad_extension(client, upload_dir):
    files = documents()
    files["photo"] = ("photo.exe", b"MZ", "application/octet-stream")
    r = submit(client, files=files)
    assert r.status_code == 400
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_submit_validation_errors(client):
    assert submit(client, applicant(mobile="12345")).status_code == 422
    assert submit(client, applicant(pincode="8011")).status_code == 422
    assert submit(client, applicant(declaration="false")).status_code == 422
    assert submit(client, applicant(class_10th_marks_obtained="600")).status_code == 422
    assert submit(client, applicant(trade="Plumber")).status_code == 422


def test_submit_requires_active_session(client):
    r = submit(client, applicant(session="2023-24"))
    assert r.status_code == 400


# ---------------------------
# UIDAI uniqueness
# ---------------------------
def test_duplicate_uidai_is_rejected(client):
    assert submit(client).status_code == 200
    r = submit(client, applicant(mobile="9000000001"))
    assert r.status_code == 409
    assert r.json()["detail"]["field"] == "uidai_number"

    listing = client.get(f"{BASE}/admin/admissions").json()
    assert listing["total"] == 1


def test_check_uidai(client):
    free = client.get(f"{BASE}/admissions/check-uidai/123456789012").json()
    assert free["available"] is True
    submit(client)
    taken = client.get(f"{BASE}/admissions/check-uidai/123456789012").json()
    assert taken["available"] is False
    assert "already registered" in taken["message"]
    assert client.get(f"{BASE}/admissions/check-uidai/12345").status_code == 422


def test_edit_to_taken_uidai_conflicts(client):
    submit(client)
    other = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry()).json()
    body = manual_entry(uidai_number="123456789012")
    r = client.put(f"{BASE}/admin/admissions/{other['db_id']}", json=body)
    assert r.status_code == 409


def test_edit_keeping_own_uidai_is_allowed(client):
    created = submit(client).json()
    app = client.get(f"{BASE}/admin/admissions/{created['db_id']}").json()
    body = manual_entry(name="Ravi K", father_name=app["father_name"], mobile=app["mobile"],
                        trade=app["trade"], qualification=app["qualification"], category=app["category"],
                        uidai_number=app["uidai_number"])
    r = client.put(f"{BASE}/admin/admissions/{created['db_id']}", json=body)
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Ravi K"


# ---------------------------
# Status lifecycle
# ---------------------------
def test_status_transitions(client, db):
    db_id = submit(client).json()["db_id"]
    for target in ("Approved", "rejected", "PENDING", "approved"):
        r = client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": target})
        assert r.status_code == 200, r.text
        assert r.json()["application"]["status"] == target.lower()

    r = client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "archived"})
    assert r.status_code == 400
    assert client.get(f"{BASE}/admin/admissions/{db_id}").json()["status"] == "approved"
    assert client.put(f"{BASE}/admin/admissions/9999/status", json={"status": "approved"}).status_code == 404


def test_approval_creates_one_student(client, db):
    db_id = submit(client).json()["db_id"]
    first = client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "approved"}).json()
    assert first["student_id"]
    client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "pending"})
    again = client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "approved"}).json()
    assert again["student_id"] == first["student_id"]

    student = db.get(Student, first["student_id"])
    assert student.admission_id == db_id
    assert student.uidai_number == "123456789012"
    assert student.mis_iti_code == "PR10001156"
    assert student.status == "Active"


def test_approved_edit_refreshes_student(client, db):
    db_id = submit(client).json()["db_id"]
    student_id = client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "approved"}).json()["student_id"]

    app = client.get(f"{BASE}/admin/admissions/{db_id}").json()
    body = build_edit_payload(edit_form_state(app))
    body.update(uidai_number="999988887777", mother_name="Sunita Kumari", shift="Evening")
    r = client.put(f"{BASE}/admin/admissions/{db_id}", json=body)
    assert r.status_code == 200, r.text

    student = db.get(Student, student_id)
    db.refresh(student)
    assert student.uidai_number == "999988887777"
    assert student.mother_name == "Sunita Kumari"
    assert student.shift == "Evening"
    assert student.session == "2024-25"
    assert client.get(f"{BASE}/admissions/check-uidai/123456789012").json()["available"] is True


def test_uidai_held_by_student_blocks_new_application(client):
    db_id = submit(client).json()["db_id"]
    client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "approved"})
    client.put(f"{BASE}/admin/admissions/{db_id}/status", json={"status": "pending"})
    # no longer approved, so the enrolled student keeps the old number
    body = manual_entry(name="Ravi Kumar", father_name="Suresh Kumar", mobile="9876543210",
                        trade="Electrician", category="OBC", uidai_number="999988887777")
    assert client.put(f"{BASE}/admin/admissions/{db_id}", json=body).status_code == 200

    r = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(uidai_number="123456789012"))
    assert r.status_code == 409
    assert "student records" in r.json()["detail"]["message"]


# ---------------------------
# Manual entry and edit
# ---------------------------
def test_manual_entry(client):
    r = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(category="General"))
    assert r.status_code == 200, r.text
    app = client.get(f"{BASE}/admin/admissions/{r.json()['db_id']}").json()
    assert app["category"] == "GEN"
    assert app["status"] == "pending"
    assert app["documents"]["photo"] is None

    approved = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(mobile="9123456781", status="Approved"))
    assert approved.json()["student_id"]


def test_manual_entry_requires_fields(client):
    body = manual_entry()
    body.pop("qualification")
    assert client.post(f"{BASE}/admin/admissions/manual", json=body).status_code == 422
    assert client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(mobile="98765")).status_code == 422


def test_turning_credit_card_off_clears_details(client):
    fields = applicant(student_credit_card="Yes", student_credit_card_bank="SBI",
                       student_credit_card_account="00112233")
    db_id = submit(client, fields, documents(with_scc=True)).json()["db_id"]
    app = client.get(f"{BASE}/admin/admissions/{db_id}").json()

    body = {k: app[k] for k in ("name", "father_name", "mobile", "trade", "qualification", "category",
                                "uidai_number", "class_10th_marks_obtained", "class_10th_total_marks")}
    body.update(student_credit_card="No",
                student_credit_card_details={"bank_name": "SBI", "account_number": "00112233"})
    r = client.put(f"{BASE}/admin/admissions/{db_id}", json=body)
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["student_credit_card"] == "No"
    assert out["student_credit_card_details"] is None
    assert out["registration_type"] == "Regular"


def test_console_edit_of_credit_card_entry_without_bank(client):
    created = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(student_credit_card="Yes")).json()
    app = client.get(f"{BASE}/admin/admissions/{created['db_id']}").json()
    assert app["student_credit_card_details"] is None

    r = client.put(f"{BASE}/admin/admissions/{created['db_id']}", json=build_edit_payload(edit_form_state(app)))
    assert r.status_code == 200, r.text
    assert r.json()["student_credit_card"] == "Yes"
    assert r.json()["student_credit_card_details"] is None


def test_edit_recomputes_percentage_and_toggles_documents(client):
    db_id = submit(client).json()["db_id"]
    body = manual_entry(name="Ravi Kumar", father_name="Suresh Kumar", mobile="9876543210",
                        trade="Electrician", category="OBC", uidai_number="123456789012",
                        class_10th_marks_obtained=300, class_10th_total_marks=400,
                        class_12th_marks_obtained=350, class_12th_total_marks=500,
                        has_photo=False, has_aadhaar=True)
    out = client.put(f"{BASE}/admin/admissions/{db_id}", json=body).json()
    assert out["class_10th_percentage"] == "75.00"
    assert out["class_12th_percentage"] == "70.00"
    assert out["documents"]["photo"] is None
    assert out["documents"]["aadhaar"] and out["documents"]["aadhaar"] != "manual_verified"

    manual = client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(mobile="9000000002")).json()
    out = client.put(f"{BASE}/admin/admissions/{manual['db_id']}",
                     json=manual_entry(mobile="9000000002", has_marksheet=True)).json()
    assert out["documents"]["marksheet"] == "manual_verified"


# ---------------------------
# Listing
# ---------------------------
def test_list_filters_and_search(client):
    submit(client)
    client.post(f"{BASE}/admin/admissions/manual", json=manual_entry())
    client.post(f"{BASE}/admin/admissions/manual",
                json=manual_entry(name="Mohan Lal", mobile="9123456782", status="rejected"))

    everything = client.get(f"{BASE}/admin/admissions").json()
    assert everything["total"] == 3
    assert everything["items"][0]["name"] == "Mohan Lal"  # newest first

    assert client.get(f"{BASE}/admin/admissions", params={"status": "rejected"}).json()["total"] == 1
    assert client.get(f"{BASE}/admin/admissions", params={"status": "all"}).json()["total"] == 3
    assert client.get(f"{BASE}/admin/admissions", params={"trade": "Fitter"}).json()["total"] == 2
    assert client.get(f"{BASE}/admin/admissions", params={"q": "ravi"}).json()["total"] == 1
    assert client.get(f"{BASE}/admin/admissions", params={"q": "91234567"}).json()["total"] == 2
    today = dt.datetime.now(dt.timezone.utc).date().isoformat()
    assert client.get(f"{BASE}/admin/admissions", params={"date": today}).json()["total"] == 3
    assert client.get(f"{BASE}/admin/admissions", params={"status": "open"}).status_code == 400


def test_search_wildcards_match_literally(client):
    client.post(f"{BASE}/admin/admissions/manual", json=manual_entry())
    client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(name="Mohan Lal", mobile="9123456782"))
    for q in ("%", "_", "a_i", "100%"):
        assert client.get(f"{BASE}/admin/admissions", params={"q": q}).json()["total"] == 0, q
    client.post(f"{BASE}/admin/admissions/manual",
                json=manual_entry(name="Ravi_100%", mobile="9123456783"))
    assert client.get(f"{BASE}/admin/admissions", params={"q": "_100%"}).json()["total"] == 1


def test_list_pagination(client):
    for i in range(12):
        client.post(f"{BASE}/admin/admissions/manual", json=manual_entry(mobile=f"90000000{i:02d}"))
    first = client.get(f"{BASE}/admin/admissions", params={"page": 1}).json()
    second = client.get(f"{BASE}/admin/admissions", params={"page": 2}).json()
    assert first["total"] == 12 and first["total_pages"] == 2
    assert len(first["items"]) == 10 and len(second["items"]) == 2


# ---------------------------
# Documents
# ---------------------------
def test_document_download(client):
    db_id = submit(client).json()["db_id"]
    stored = client.get(f"{BASE}/admin/admissions/{db_id}").json()["documents"]["aadhaar"]
    r = client.get(f"{BASE}/admin/admissions/documents/{stored}")
    assert r.status_code == 200
    assert r.content == b"%PDF-aadhaar"
    assert client.get(f"{BASE}/admin/admissions/documents/missing.pdf").status_code == 404
    assert client.get(f"{BASE}/admin/admissions/documents/manual_verified").status_code == 404


def test_get_unknown_admission(client):
    assert client.get(f"{BASE}/admin/admissions/4242").status_code == 404


# ---------------------------
# Sessions and site
# ---------------------------
def test_sessions(client):
    active = client.get(f"{BASE}/sessions/active").json()
    assert [s["session_name"] for s in active] == ["2024-25"]

    created = client.post(f"{BASE}/sessions", json={"session_name": "2025-26", "start_year": 2025, "end_year": 2026})
    assert created.status_code == 200
    assert client.post(f"{BASE}/sessions",
                       json={"session_name": "2025-26", "start_year": 2025, "end_year": 2026}).status_code == 400

    sid = created.json()["id"]
    closed = client.put(f"{BASE}/sessions/{sid}", json={"is_active": False}).json()
    assert closed["is_active"] is False
    assert len(client.get(f"{BASE}/sessions").json()) == 3
    assert client.put(f"{BASE}/sessions/999", json={"is_active": True}).status_code == 404


def test_site_content(client, monkeypatch):
    monkeypatch.setenv("SITE_PHONE", "+91-1111111111")
    site = client.get(f"{BASE}/site").json()
    assert site["phone"] == "+91-1111111111"
    assert site["institute_name"] == "Maner Pvt ITI"
