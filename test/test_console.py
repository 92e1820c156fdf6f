# -*- coding: utf-8 -*-
from iti_admissions.services.console import (
    build_edit_payload, detail_view, document_status, edit_form_state, page_stats, validate_manual_entry,
)

APP = {
    "db_id": 3, "application_id": "ITI-2024-0003", "status": "approved", "name": "Ravi Kumar",
    "father_name": "Suresh Kumar", "mobile": "9876543210", "trade": "Electrician",
    "qualification": "10th Pass", "category": "OBC", "dob": "2006-04-12",
    "class_10th_marks_obtained": 425.0, "class_10th_total_marks": 500.0,
    "pwd_claim": "No", "student_credit_card": "Yes",
    "student_credit_card_details": {"bank_name": "SBI", "account_number": "0011"},
    "documents": {"photo": "p.jpg", "aadhaar": "manual_verified", "marksheet": None,
                  "student_credit_card_doc": None},
}


def test_page_stats_counts_loaded_page():
    items = [{"status": "pending"}, {"status": "Approved"}, {"status": "approved"}, {"status": "rejected"}]
    assert page_stats(items, 42) == {"pending": 1, "approved": 2, "rejected": 1, "total": 42}


def test_document_status():
    docs = {d["slot"]: d for d in document_status(APP)}
    assert docs["photo"]["downloadable"]
    assert docs["aadhaar"]["present"] and not docs["aadhaar"]["downloadable"]
    assert not docs["marksheet"]["present"]


def test_detail_view_shows_bank_only_for_credit_card():
    labels = [label for _, rows in detail_view(APP) for label, _ in rows]
    assert "Bank Name" in labels
    regular = dict(APP, student_credit_card="No", student_credit_card_details=None)
    labels = [label for _, rows in detail_view(regular) for label, _ in rows]
    assert "Bank Name" not in labels
    marks = dict(dict(detail_view(APP))["Education"])["10th Marks"]
    assert marks == "425 / 500"


def test_edit_round_trip_keeps_bank_details():
    state = edit_form_state(APP)
    assert state["student_credit_card_bank"] == "SBI"
    assert state["has_photo"] and state["has_aadhaar"] and not state["has_marksheet"]
    payload = build_edit_payload(state)
    assert payload["student_credit_card_details"] == {"bank_name": "SBI", "account_number": "0011"}
    assert payload["status"] == "approved"
    assert payload["has_marksheet"] is False


def test_edit_payload_drops_bank_details_when_card_is_off():
    state = edit_form_state(APP)
    state["student_credit_card"] = "No"
    state["pwd_category"] = "Visual"
    payload = build_edit_payload(state)
    assert payload["student_credit_card_details"] is None
    assert payload["pwd_category"] is None


def test_validate_manual_entry():
    entry = {k: APP[k] for k in ("name", "father_name", "mobile", "trade", "qualification", "category")}
    assert validate_manual_entry(entry) is None
    assert validate_manual_entry(dict(entry, qualification=" ")) == "Please fill in all required fields"
    assert validate_manual_entry(dict(entry, mobile="12345")) == "Please enter a valid 10-digit mobile number"


def test_edit_payload_without_bank_details_sends_none():
    state = edit_form_state(dict(APP, student_credit_card_details=None))
    assert state["student_credit_card_bank"] == ""
    assert build_edit_payload(state)["student_credit_card_details"] is None

    state["student_credit_card_bank"] = "SBI"
    assert build_edit_payload(state)["student_credit_card_details"] == {"bank_name": "SBI", "account_number": None}
