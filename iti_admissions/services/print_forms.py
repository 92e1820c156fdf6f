# -*- coding: utf-8 -*-
"""Printable HTML for the applicant receipt and the staff admission form.

Both are plain string transforms of data the caller already holds; every
value is HTML-escaped before it is placed in the page.
"""
import datetime as dt
import html
from typing import Any, Mapping, Optional, Sequence, Tuple

from iti_admissions.config import SiteConfig
from iti_admissions.services.storage import DOCUMENT_SLOTS, MANUAL_VERIFIED

DOCUMENT_LABELS = {
    "photo": "Passport Photo",
    "aadhaar": "Aadhaar Card",
    "marksheet": "10th Marksheet",
    "student_credit_card_doc": "Student Credit Card Document",
}

_FORM_CSS = """
@media print { @page { margin: 10mm; size: A4 portrait; } }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; padding: 8px; line-height: 1.25; font-size: 10px; }
.header { text-align: center; border-bottom: 2px solid #195de6; padding-bottom: 5px; margin-bottom: 7px; }
.header h1 { margin: 0 0 2px 0; font-size: 19px; color: #195de6; }
.header p { margin: 1px 0; font-size: 8px; color: #555; }
.header .form-title { font-size: 12px; font-weight: bold; color: #333; }
.form-section { margin-bottom: 6px; page-break-inside: avoid; }
.form-section h3 { background: #195de6; color: white; padding: 3px 7px; margin: 0 0 4px 0; font-size: 9.5px; }
.form-row { display: flex; margin-bottom: 4px; gap: 7px; }
.form-field { flex: 1; }
.form-label { font-weight: 600; color: #333; display: block; font-size: 7.5px; text-transform: uppercase; }
.form-value { padding: 3px 5px; background: #f8f9fa; border: 1px solid #dee2e6; min-height: 15px; font-size: 9px; }
.badge { display: inline-block; padding: 2px 6px; border-radius: 10px; font-size: 8.5px; font-weight: 600; }
.badge-ok { background: #d4edda; color: #155724; }
.badge-missing { background: #f8d7da; color: #721c24; }
.declaration-box { background: #fff8dc; border: 1px solid #ffd700; padding: 5px 7px; margin-top: 6px; font-size: 8.5px; }
.signature-section { margin-top: 10px; display: flex; justify-content: space-between; }
.signature-box { width: 45%; text-align: center; }
.signature-line { border-top: 1px solid #000; margin-top: 20px; padding-top: 3px; font-weight: 600; font-size: 9px; }
.footer { margin-top: 8px; text-align: center; font-size: 7.5px; color: #666; border-top: 1px solid #ddd; padding-top: 4px; }
"""

_RECEIPT_CSS = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; padding: 40px; background: #fff; }
.receipt-container { max-width: 800px; margin: 0 auto; border: 2px solid #195de6; border-radius: 12px; overflow: hidden; }
.receipt-header { background: #195de6; color: white; padding: 30px; text-align: center; }
.receipt-body { padding: 30px; }
.app-id-box { background: #f0f9ff; border: 2px dashed #195de6; border-radius: 8px; padding: 20px; text-align: center; margin-bottom: 30px; }
.app-id-label { font-size: 12px; color: #666; text-transform: uppercase; letter-spacing: 2px; }
.app-id-value { font-size: 32px; font-weight: 800; color: #195de6; }
.section-title { font-size: 16px; font-weight: 700; color: #195de6; border-bottom: 2px solid #e5e7eb; padding-bottom: 8px; margin: 20px 0 12px; }
.info-item { display: flex; justify-content: space-between; padding: 8px 0; border-bottom: 1px solid #f3f4f6; font-size: 14px; }
.info-label { color: #6b7280; }
.info-value { font-weight: 600; color: #111827; }
.status-badge { display: inline-block; background: #dcfce7; color: #166534; padding: 6px 16px; border-radius: 20px; font-weight: 600; margin-top: 10px; }
.receipt-footer { background: #f9fafb; padding: 20px 30px; text-align: center; border-top: 1px solid #e5e7eb; font-size: 12px; color: #6b7280; }
.note { color: #dc2626; font-weight: 600; }
"""

_AUTO_PRINT = "<script>window.onload = function () { window.print(); };</script>"


def _v(data: Mapping[str, Any], key: str, default: str = "N/A") -> str:
    value = data.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, float):
        value = f"{value:g}"
    return html.escape(str(value))


def _field(label: str, value: str) -> str:
    return (f'<div class="form-field"><span class="form-label">{html.escape(label)}:</span>'
            f'<div class="form-value">{value}</div></div>')


def _section(title: str, pairs: Sequence[Tuple[str, str]]) -> str:
    rows = []
    for i in range(0, len(pairs), 2):
        rows.append('<div class="form-row">' + "".join(_field(label, value) for label, value in pairs[i:i + 2]) + "</div>")
    return f'<div class="form-section"><h3>{html.escape(title)}</h3>{"".join(rows)}</div>'


def document_badge(filename: Optional[str]) -> str:
    if not filename:
        return '<span class="badge badge-missing">&#10007; Not Submitted</span>'
    if filename == MANUAL_VERIFIED:
        return '<span class="badge badge-ok">&#10003; Verified Manually</span>'
    return '<span class="badge badge-ok">&#10003; Submitted</span>'


def _credit_card(data: Mapping[str, Any]) -> Mapping[str, Any]:
    details = data.get("student_credit_card_details")
    if details:
        return details
    # wizard receipts keep the flat form fields
    return {"bank_name": data.get("student_credit_card_bank"),
            "account_number": data.get("student_credit_card_account")}


def admission_form_html(app: Mapping[str, Any], site: SiteConfig) -> str:
    """Full admission form for staff printing, built from a loaded application."""
    docs = app.get("documents") or {}
    card = _credit_card(app)
    sections = [
        _section("Personal Information", [
            ("Full Name", _v(app, "name")), ("Father's Name", _v(app, "father_name")),
            ("Mother's Name", _v(app, "mother_name")), ("UIDAI No (Aadhaar)", _v(app, "uidai_number")),
            ("Mobile Number", _v(app, "mobile")), ("Email", _v(app, "email")),
            ("Date of Birth", _v(app, "dob")), ("Gender", _v(app, "gender")),
            ("Category", _v(app, "category")), ("PWD Claim", _v(app, "pwd_claim", "No")),
            ("PWD Category", _v(app, "pwd_category")),
        ]),
        _section("Address Information", [
            ("Village/Town/City", _v(app, "village_town_city")), ("Nearby", _v(app, "nearby")),
            ("Police Station", _v(app, "police_station")), ("Post Office", _v(app, "post_office")),
            ("Block", _v(app, "block")), ("District", _v(app, "district")),
            ("State", _v(app, "state")), ("Pincode", _v(app, "pincode")),
        ]),
        _section("Educational Qualification", [
            ("10th School", _v(app, "class_10th_school")), ("10th Subject", _v(app, "class_10th_subject")),
            ("10th Marks", f'{_v(app, "class_10th_marks_obtained")} / {_v(app, "class_10th_total_marks")}'),
            ("10th Percentage", _v(app, "class_10th_percentage")),
            ("12th School", _v(app, "class_12th_school")), ("12th Subject", _v(app, "class_12th_subject")),
            ("12th Marks", f'{_v(app, "class_12th_marks_obtained")} / {_v(app, "class_12th_total_marks")}'),
            ("12th Percentage", _v(app, "class_12th_percentage")),
        ]),
        _section("Admission Details", [
            ("Trade", _v(app, "trade")), ("Qualification", _v(app, "qualification")),
            ("Session", _v(app, "session")), ("Shift", _v(app, "shift")),
            ("Registration Type", _v(app, "registration_type", "Regular")),
            ("Student Credit Card", _v(app, "student_credit_card", "No")),
            ("Bank Name", _v(card, "bank_name")), ("Account Number", _v(card, "account_number")),
            ("Status", _v(app, "status").upper()), ("Date Submitted", _v(app, "date_submitted")),
        ]),
        _section("Documents", [(DOCUMENT_LABELS[s], document_badge(docs.get(s))) for s in DOCUMENT_SLOTS]),
    ]
    return f"""<!DOCTYPE html>
<html>
  <head>
    <title>Admission Form - {_v(app, "name")}</title>
    <style>{_FORM_CSS}</style>
  </head>
  <body>
    <div class="header">
      <h1>{html.escape(site.institute_name)}</h1>
      <p>{html.escape(site.address)}</p>
      <p>Contact: {html.escape(site.phone)} | Email: {html.escape(site.email)}</p>
      <p class="form-title">Student Admission Form</p>
      <p>Application ID: {_v(app, "application_id")}</p>
    </div>
    {"".join(sections)}
    <div class="declaration-box">
      I hereby declare that all the information provided above is true to the best of my knowledge.
    </div>
    <div class="signature-section">
      <div class="signature-box"><div class="signature-line">Signature of Applicant</div></div>
      <div class="signature-box"><div class="signature-line">Signature of Principal</div></div>
    </div>
    <div class="footer">Printed on {dt.date.today().strftime("%d %b %Y")}</div>
    {_AUTO_PRINT}
  </body>
</html>"""


def _info(label: str, value: str) -> str:
    return (f'<div class="info-item"><span class="info-label">{html.escape(label)}</span>'
            f'<span class="info-value">{value}</span></div>')


def receipt_html(receipt: Mapping[str, Any], site: SiteConfig,
                 submitted_at: Optional[dt.datetime] = None) -> str:
    """Applicant receipt rendered from the wizard's in-memory copy of the submission."""
    submitted_at = submitted_at or dt.datetime.now()
    docs = receipt.get("documents") or {}
    personal = "".join(_info(label, _v(receipt, key)) for label, key in (
        ("Name", "name"), ("Father's Name", "father_name"), ("Mother's Name", "mother_name"),
        ("Mobile", "mobile"), ("Email", "email"), ("Date of Birth", "dob"),
        ("Category", "category"), ("UIDAI Number", "uidai_number"),
    ))
    admission = "".join(_info(label, _v(receipt, key)) for label, key in (
        ("Trade", "trade"), ("Session", "session"), ("Shift", "shift"),
        ("10th Percentage", "class_10th_percentage"), ("Registration Type", "registration_type"),
    ))
    documents = "".join(_info(DOCUMENT_LABELS[s], document_badge(docs.get(s))) for s in DOCUMENT_SLOTS)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <title>Application Receipt - {_v(receipt, "application_id")}</title>
    <style>{_RECEIPT_CSS}</style>
  </head>
  <body>
    <div class="receipt-container">
      <div class="receipt-header">
        <h1>{html.escape(site.institute_name.upper())}</h1>
        <p>Admission Application Receipt - Session {html.escape(site.session_label)}</p>
      </div>
      <div class="receipt-body">
        <div class="app-id-box">
          <div class="app-id-label">Application ID</div>
          <div class="app-id-value">{_v(receipt, "application_id")}</div>
          <div class="status-badge">Submitted - Pending Review</div>
        </div>
        <div class="section-title">Personal Details</div>{personal}
        <div class="section-title">Admission Details</div>{admission}
        <div class="section-title">Documents</div>{documents}
      </div>
      <div class="receipt-footer">
        <p>Submitted on {submitted_at.strftime("%d %B %Y, %I:%M %p")}</p>
        <p class="note">Please keep this receipt for future reference.</p>
        <p>Contact: {html.escape(site.phone)} | {html.escape(site.email)}</p>
      </div>
    </div>
    {_AUTO_PRINT}
  </body>
</html>"""
