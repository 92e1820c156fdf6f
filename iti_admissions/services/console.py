# -*- coding: utf-8 -*-
"""Review-console helpers that work on the JSON the admin API returns."""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from iti_admissions.services import fields as F
from iti_admissions.services.print_forms import DOCUMENT_LABELS
from iti_admissions.services.storage import DOCUMENT_SLOTS, MANUAL_VERIFIED

MANUAL_REQUIRED = ("name", "father_name", "mobile", "trade", "qualification", "category")

EDITABLE_FIELDS = (
    "name", "father_name", "mother_name", "mobile", "email", "dob", "gender", "category",
    "uidai_number", "village_town_city", "nearby", "police_station", "post_office", "block",
    "district", "state", "pincode",
    "class_10th_school", "class_10th_subject", "class_10th_marks_obtained", "class_10th_total_marks",
    "class_12th_school", "class_12th_subject", "class_12th_marks_obtained", "class_12th_total_marks",
    "trade", "qualification", "session", "shift", "pwd_claim", "pwd_category", "student_credit_card",
)


def page_stats(items: List[Mapping[str, Any]], total: int) -> Dict[str, int]:
    """Counts for the stat cards; status counts cover the loaded page only."""
    stats = {status: 0 for status in F.STATUSES}
    for item in items:
        status = str(item.get("status") or "").lower()
        if status in stats:
            stats[status] += 1
    stats["total"] = int(total or 0)
    return stats


def document_status(app: Mapping[str, Any]) -> List[Dict[str, Any]]:
    docs = app.get("documents") or {}
    out = []
    for slot in DOCUMENT_SLOTS:
        name = docs.get(slot)
        out.append({
            "slot": slot,
            "label": DOCUMENT_LABELS[slot],
            "present": bool(name),
            "filename": name,
            "downloadable": bool(name) and name != MANUAL_VERIFIED,
        })
    return out


def detail_view(app: Mapping[str, Any]) -> List[Tuple[str, List[Tuple[str, str]]]]:
    """Read-only projection of an application as (section, [(label, value)]) blocks."""
    def v(key: str, default: str = "N/A") -> str:
        value = app.get(key)
        if value is None or value == "":
            return default
        return f"{value:g}" if isinstance(value, float) else str(value)

    card = app.get("student_credit_card_details") or {}
    sections = [
        ("Application", [
            ("Application ID", v("application_id")), ("Status", v("status").capitalize()),
            ("Date Submitted", v("date_submitted")), ("Registration Type", v("registration_type", F.REGULAR)),
        ]),
        ("Personal", [
            ("Name", v("name")), ("Father's Name", v("father_name")), ("Mother's Name", v("mother_name")),
            ("Mobile", v("mobile")), ("Email", v("email")), ("Date of Birth", v("dob")),
            ("Gender", v("gender")), ("Category", v("category")), ("UIDAI Number", v("uidai_number")),
            ("PWD Claim", v("pwd_claim", "No")), ("PWD Category", v("pwd_category")),
        ]),
        ("Address", [
            ("Village/Town/City", v("village_town_city")), ("Nearby", v("nearby")),
            ("Police Station", v("police_station")), ("Post Office", v("post_office")),
            ("Block", v("block")), ("District", v("district")), ("State", v("state")),
            ("Pincode", v("pincode")),
        ]),
        ("Education", [
            ("10th School", v("class_10th_school")), ("10th Subject", v("class_10th_subject")),
            ("10th Marks", f"{v('class_10th_marks_obtained')} / {v('class_10th_total_marks')}"),
            ("10th Percentage", v("class_10th_percentage")),
            ("12th School", v("class_12th_school")), ("12th Subject", v("class_12th_subject")),
            ("12th Marks", f"{v('class_12th_marks_obtained')} / {v('class_12th_total_marks')}"),
            ("12th Percentage", v("class_12th_percentage")),
        ]),
        ("Admission", [
            ("Trade", v("trade")), ("Qualification", v("qualification")),
            ("Session", v("session")), ("Shift", v("shift")),
            ("Student Credit Card", v("student_credit_card", "No")),
        ]),
    ]
    if app.get("student_credit_card") == "Yes":
        sections[-1][1].extend([
            ("Bank Name", str(card.get("bank_name") or "N/A")),
            ("Account Number", str(card.get("account_number") or "N/A")),
        ])
    return sections


def edit_form_state(app: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a loaded application into the edit form's fields."""
    state: Dict[str, Any] = {k: app.get(k) for k in EDITABLE_FIELDS}
    card = app.get("student_credit_card_details") or {}
    state["student_credit_card_bank"] = card.get("bank_name") or ""
    state["student_credit_card_account"] = card.get("account_number") or ""
    state["status"] = F.normalize_status(app.get("status") or "pending")
    docs = app.get("documents") or {}
    for slot in ("photo", "aadhaar", "marksheet"):
        state[f"has_{slot}"] = bool(docs.get(slot))
    return state


def build_edit_payload(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Edit form -> PUT body; credit card detail only travels while the flag is Yes."""
    payload = {k: F.blank_to_none(state.get(k)) for k in EDITABLE_FIELDS}
    if payload.get("dob") is not None:
        payload["dob"] = str(payload["dob"])
    card = {
        "bank_name": F.blank_to_none(state.get("student_credit_card_bank")),
        "account_number": F.blank_to_none(state.get("student_credit_card_account")),
    }
    has_card = payload.get("student_credit_card") == "Yes" and any(card.values())
    payload["student_credit_card_details"] = card if has_card else None
    if payload.get("pwd_claim") != "Yes":
        payload["pwd_category"] = None
    payload["status"] = F.normalize_status(state.get("status") or "pending")
    for slot in ("photo", "aadhaar", "marksheet"):
        key = f"has_{slot}"
        if key in state:
            payload[key] = bool(state[key])
    return payload


def validate_manual_entry(fields: Mapping[str, Any]) -> Optional[str]:
    if not all(F.blank_to_none(fields.get(k)) for k in MANUAL_REQUIRED):
        return "Please fill in all required fields"
    if not F.is_valid_mobile(str(fields.get("mobile") or "").strip()):
        return "Please enter a valid 10-digit mobile number"
    return None
