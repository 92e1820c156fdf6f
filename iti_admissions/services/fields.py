# -*- coding: utf-8 -*-
"""Field-level rules shared by the API, the wizard and the review console."""
import re
from typing import Any, Optional

STATUSES = ("pending", "approved", "rejected")
CATEGORIES = ("GEN", "OBC", "SC", "ST", "EWS")
CATEGORY_ALIASES = {"GENERAL": "GEN"}
YES_NO = ("Yes", "No")

REGULAR = "Regular"
STUDENT_CREDIT_CARD = "Student Credit Card"

MOBILE_RE = re.compile(r"^\d{10}$")
PINCODE_RE = re.compile(r"^\d{6}$")
UIDAI_RE = re.compile(r"^\d{12}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def to_float(x: Any) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    try:
        return float(str(x).strip())
    except ValueError:
        return None


def calc_percentage(marks: Any, total: Any) -> str:
    """marks/total*100 with two decimals, or "" when it cannot be computed."""
    m, t = to_float(marks), to_float(total)
    if m is None or t is None or t <= 0:
        return ""
    return f"{m / t * 100:.2f}"


def csv_escape(value: Any) -> str:
    if value is None:
        return ""
    s = str(value)
    if any(ch in s for ch in (",", '"', "\n", "\r")):
        return '"' + s.replace('"', '""') + '"'
    return s


def is_valid_mobile(v: Optional[str]) -> bool:
    return bool(v) and bool(MOBILE_RE.match(v))


def is_valid_pincode(v: Optional[str]) -> bool:
    return bool(v) and bool(PINCODE_RE.match(v))


def is_valid_uidai(v: Optional[str]) -> bool:
    return bool(v) and bool(UIDAI_RE.match(v))


def is_valid_email(v: Optional[str]) -> bool:
    return bool(v) and bool(EMAIL_RE.match(v))


def normalize_status(value: Optional[str]) -> str:
    """Map any casing of pending/approved/rejected to the stored lowercase form."""
    s = (value or "").strip().lower()
    if s not in STATUSES:
        raise ValueError(f"Invalid status: {value!r}")
    return s


def normalize_category(value: Optional[str]) -> str:
    s = (value or "").strip().upper()
    s = CATEGORY_ALIASES.get(s, s)
    if s not in CATEGORIES:
        raise ValueError(f"Category must be one of {', '.join(CATEGORIES)}")
    return s


def normalize_yes_no(value: Any, default: str = "No") -> str:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return "Yes" if value else "No"
    s = str(value).strip().capitalize()
    if s not in YES_NO:
        raise ValueError("Must be Yes or No")
    return s


def registration_type_for(student_credit_card: Optional[str]) -> str:
    return STUDENT_CREDIT_CARD if student_credit_card == "Yes" else REGULAR


def format_application_no(prefix: str, year: int, db_id: int) -> str:
    return f"{prefix}-{year}-{db_id:04d}"


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value
