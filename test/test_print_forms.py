# -*- coding: utf-8 -*-
import datetime as dt

from iti_admissions.config import SiteConfig
from iti_admissions.services.print_forms import admission_form_html, document_badge, receipt_html

APP = {
    "application_id": "ITI-2024-0001",
    "name": "Ravi <b>Kumar</b>",
    "father_name": "Suresh Kumar",
    "uidai_number": "123456789012",
    "class_10th_marks_obtained": 425.0,
    "class_10th_total_marks": 500.0,
    "class_10th_percentage": "85.00",
    "trade": "Electrician",
    "status": "approved",
    "student_credit_card": "Yes",
    "student_credit_card_details": {"bank_name": "SBI", "account_number": "00112233"},
    "documents": {"photo": "1700-1.jpg", "aadhaar": "manual_verified", "marksheet": None},
}


def test_document_badge_states():
    assert "Not Submitted" in document_badge(None)
    assert "Verified Manually" in document_badge("manual_verified")
    assert "Submitted" in document_badge("x.pdf") and "Not" not in document_badge("x.pdf")


def test_admission_form():
    page = admission_form_html(APP, SiteConfig())
    assert "Maner Pvt ITI" in page
    assert "ITI-2024-0001" in page
    assert "Ravi &lt;b&gt;Kumar&lt;/b&gt;" in page
    assert "<b>Kumar</b>" not in page
    assert "425 / 500" in page
    assert "SBI" in page and "00112233" in page
    assert "APPROVED" in page
    assert "Verified Manually" in page and "Not Submitted" in page
    assert "window.print()" in page


def test_admission_form_missing_values():
    page = admission_form_html({"application_id": "ITI-2024-0002", "name": "A"}, SiteConfig())
    assert "N/A" in page


def test_receipt():
    receipt = {
        "application_id": "ITI-2024-0009", "name": "Ravi Kumar", "trade": "Fitter",
        "class_10th_percentage": "85.00", "registration_type": "Regular",
        "documents": {"photo": "photo.jpg", "aadhaar": "a.pdf", "marksheet": "m.pdf"},
    }
    site = SiteConfig(phone="+91-2222222222", session_label="2025-26")
    page = receipt_html(receipt, site, dt.datetime(2024, 6, 1, 14, 30))
    assert "ITI-2024-0009" in page
    assert "MANER PVT ITI" in page
    assert "Session 2025-26" in page
    assert "+91-2222222222" in page
    assert "01 June 2024, 02:30 PM" in page
