# -*- coding: utf-8 -*-
"""
Six-step admission application wizard.

The engine holds the form state and enforces the step contract; the
Streamlit page only renders it. Validation is a pure function of the
current data so a step can be re-checked any number of times.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

from iti_admissions.services import fields as F
from iti_admissions.services.storage import DOCUMENT_SLOTS, REQUIRED_SLOTS


class Step(IntEnum):
    PERSONAL = 1
    ADDRESS = 2
    EDUCATION = 3
    PREFERENCES = 4
    DOCUMENTS = 5
    REVIEW = 6


class Icon(str, Enum):
    USER = "User"
    FILE_TEXT = "FileText"
    GRADUATION_CAP = "GraduationCap"
    CHECK_CIRCLE = "CheckCircle"
    UPLOAD = "Upload"
    CHECK = "Check"


# every Icon must resolve; Icon("Unknown") raises ValueError
ICON_REGISTRY: Dict[Icon, str] = {
    Icon.USER: ":material/person:",
    Icon.FILE_TEXT: ":material/description:",
    Icon.GRADUATION_CAP: ":material/school:",
    Icon.CHECK_CIRCLE: ":material/task_alt:",
    Icon.UPLOAD: ":material/upload:",
    Icon.CHECK: ":material/check:",
}


def icon_for(name: "str | Icon") -> str:
    return ICON_REGISTRY[Icon(name)]


@dataclass(frozen=True)
class StepInfo:
    step: Step
    title: str
    subtitle: str
    icon: Icon


STEPS: Tuple[StepInfo, ...] = (
    StepInfo(Step.PERSONAL, "Personal", "Basic", Icon.USER),
    StepInfo(Step.ADDRESS, "Address", "Location", Icon.FILE_TEXT),
    StepInfo(Step.EDUCATION, "Education", "Qualification", Icon.GRADUATION_CAP),
    StepInfo(Step.PREFERENCES, "Admission", "Preferences", Icon.CHECK_CIRCLE),
    StepInfo(Step.DOCUMENTS, "Documents", "Upload", Icon.UPLOAD),
    StepInfo(Step.REVIEW, "Submit", "Final", Icon.CHECK),
)

REQUIRED: Dict[Step, Tuple[str, ...]] = {
    Step.PERSONAL: ("name", "father_name", "mother_name", "mobile", "email",
                    "dob", "gender", "category", "uidai_number"),
    Step.ADDRESS: ("village_town_city", "police_station", "post_office",
                   "block", "district", "state", "pincode"),
    Step.EDUCATION: ("class_10th_school", "class_10th_marks_obtained", "class_10th_total_marks"),
    Step.PREFERENCES: ("trade", "session"),
    Step.DOCUMENTS: REQUIRED_SLOTS,
    Step.REVIEW: (),
}

MISSING_MSG = {
    Step.PERSONAL: "Please fill all required fields",
    Step.ADDRESS: "Please fill all required address fields",
    Step.EDUCATION: "Please fill all required 10th class details",
    Step.PREFERENCES: "Please fill all required admission details",
    Step.DOCUMENTS: "Please upload all required documents",
}

TEXT_FIELDS: Tuple[str, ...] = (
    "name", "father_name", "mother_name", "mobile", "email", "dob", "gender", "category",
    "uidai_number", "pwd_claim", "pwd_category",
    "village_town_city", "nearby", "police_station", "post_office", "block", "district",
    "state", "pincode",
    "class_10th_school", "class_10th_subject", "class_10th_marks_obtained",
    "class_10th_total_marks", "class_10th_percentage",
    "class_12th_school", "class_12th_subject", "class_12th_marks_obtained",
    "class_12th_total_marks", "class_12th_percentage",
    "trade", "session", "shift",
    "student_credit_card", "student_credit_card_bank", "student_credit_card_account",
)

DERIVED = {
    "class_10th_marks_obtained": "class_10th",
    "class_10th_total_marks": "class_10th",
    "class_12th_marks_obtained": "class_12th",
    "class_12th_total_marks": "class_12th",
}

UIDAI_DUPLICATE_MSG = "Please use a different UIDAI/Aadhaar number. This one is already registered."


@dataclass
class DocumentFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class UidaiCheck:
    """Ticket for one availability lookup; only the latest ticket may change state."""
    seq: int
    number: str


class SubmissionError(Exception):
    pass


def blank_form() -> Dict[str, Any]:
    data: Dict[str, Any] = {k: "" for k in TEXT_FIELDS}
    data.update(pwd_claim="No", student_credit_card="No", declaration=False)
    data.update({slot: None for slot in DOCUMENT_SLOTS})
    return data


def _filled(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def step_errors(data: Dict[str, Any], step: Step, uidai_error: Optional[str] = None) -> List[str]:
    """All reasons `step` cannot be left; empty when it is complete."""
    step = Step(step)
    errors: List[str] = []
    if not all(_filled(data.get(f)) for f in REQUIRED[step]):
        errors.append(MISSING_MSG[step])

    if step == Step.PERSONAL:
        mobile = str(data.get("mobile") or "")
        uidai = str(data.get("uidai_number") or "")
        email = str(data.get("email") or "")
        if mobile and not F.is_valid_mobile(mobile):
            errors.append("Please enter a valid 10-digit mobile number")
        if uidai and not F.is_valid_uidai(uidai):
            errors.append("UIDAI/Aadhaar number must be 12 digits")
        if uidai_error:
            errors.append(UIDAI_DUPLICATE_MSG)
        if email and not F.is_valid_email(email):
            errors.append("Please enter a valid email address")
        if data.get("pwd_claim") == "Yes" and not _filled(data.get("pwd_category")):
            errors.append("Please select a PWD category")

    elif step == Step.ADDRESS:
        pincode = str(data.get("pincode") or "")
        if pincode and not F.is_valid_pincode(pincode):
            errors.append("Please enter a valid 6-digit pincode")

    elif step == Step.EDUCATION:
        for block in ("class_10th", "class_12th"):
            obtained = data.get(f"{block}_marks_obtained")
            total = data.get(f"{block}_total_marks")
            if not (_filled(obtained) or _filled(total)):
                continue
            m, t = F.to_float(obtained), F.to_float(total)
            if (_filled(obtained) and m is None) or (_filled(total) and t is None):
                errors.append("Marks must be numbers")
            elif m is not None and t is not None and m > t:
                errors.append("Marks obtained cannot exceed total marks")

    return errors


class ApplicationWizard:
    def __init__(self):
        self.data: Dict[str, Any] = blank_form()
        self.step: Step = Step.PERSONAL
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.uidai_error: Optional[str] = None
        self.uidai_checking = False
        self._uidai_seq = 0
        self.submitting = False
        self.submitted = False
        self.application_id: Optional[str] = None
        self.receipt: Optional[Dict[str, Any]] = None

    # ---------- field change ----------
    def update(self, field: str, value: Any) -> Optional[UidaiCheck]:
        if field not in self.data:
            raise KeyError(field)
        if self.submitted:
            return None
        self.data[field] = value

        block = DERIVED.get(field)
        if block:
            self.data[f"{block}_percentage"] = F.calc_percentage(
                self.data.get(f"{block}_marks_obtained"), self.data.get(f"{block}_total_marks"))

        if field == "uidai_number":
            # any edit invalidates the previous lookup and its verdict
            self.uidai_error = None
            self._uidai_seq += 1
            self.uidai_checking = len(str(value or "")) == 12
            if self.uidai_checking:
                return UidaiCheck(self._uidai_seq, str(value))
        return None

    def resolve_uidai_check(self, check: UidaiCheck, available: bool, message: str = "") -> bool:
        """Apply a lookup result. Returns False when the ticket is stale and was ignored."""
        if check.seq != self._uidai_seq or check.number != self.data.get("uidai_number"):
            return False
        self.uidai_checking = False
        self.uidai_error = None if available else (message or UIDAI_DUPLICATE_MSG)
        return True

    # ---------- navigation ----------
    def validate_step(self, step: Optional[int] = None) -> bool:
        step = Step(step or self.step)
        self.errors = step_errors(self.data, step, self.uidai_error)
        self.warnings = []
        if step == Step.PREFERENCES and self.data.get("student_credit_card") == "Yes" and not (
                _filled(self.data.get("student_credit_card_bank")) and _filled(self.data.get("student_credit_card_account"))):
            self.warnings.append("Bank name and account number for the Student Credit Card are incomplete")
        if step == Step.DOCUMENTS and self.data.get("student_credit_card") == "Yes" \
                and self.data.get("student_credit_card_doc") is None:
            self.warnings.append("Student Credit Card document is recommended but not attached")
        return not self.errors

    def next(self) -> bool:
        if self.submitted or not self.validate_step():
            return False
        self.step = Step(min(self.step + 1, Step.REVIEW))
        return True

    def previous(self) -> None:
        if self.submitted:
            return
        self.errors = []
        self.step = Step(max(self.step - 1, Step.PERSONAL))

    # ---------- submission ----------
    def build_payload(self) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes, str]]]:
        d = self.data
        fields = {k: str(d[k]) for k in TEXT_FIELDS
                  if k not in ("student_credit_card_bank", "student_credit_card_account",
                               "class_10th_percentage", "class_12th_percentage")
                  and _filled(d[k])}
        if d.get("student_credit_card") == "Yes":
            fields["student_credit_card_bank"] = str(d.get("student_credit_card_bank") or "")
            fields["student_credit_card_account"] = str(d.get("student_credit_card_account") or "")
        fields["declaration"] = "true" if d.get("declaration") else "false"
        files = {slot: (doc.filename, doc.content, doc.content_type)
                 for slot in DOCUMENT_SLOTS if (doc := d.get(slot)) is not None}
        return fields, files

    def submit(self, send: Callable[[Dict[str, str], Dict[str, Tuple[str, bytes, str]]], Dict[str, Any]]) -> bool:
        """Send the bundle through `send`; on failure nothing entered is lost."""
        if self.submitted:
            return True
        if self.step != Step.REVIEW:
            self.errors = ["Please complete all steps before submitting"]
            return False
        if not self.data.get("declaration"):
            self.errors = ["Please accept the declaration"]
            return False

        fields, files = self.build_payload()
        self.submitting = True
        try:
            result = send(fields, files)
        except SubmissionError as e:
            self.errors = [str(e) or "Failed to submit application"]
            return False
        finally:
            self.submitting = False

        self.errors = []
        self.application_id = str(result.get("application_id") or "")
        receipt = {k: v for k, v in copy.deepcopy(self.data).items() if k not in DOCUMENT_SLOTS}
        receipt["documents"] = {slot: (d.filename if (d := self.data.get(slot)) else None) for slot in DOCUMENT_SLOTS}
        receipt["application_id"] = self.application_id
        receipt["registration_type"] = F.registration_type_for(self.data.get("student_credit_card"))
        self.receipt = receipt
        self.submitted = True
        return True
