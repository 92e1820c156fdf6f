import datetime as dt
from typing import Optional, Literal, Dict, List, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from iti_admissions.config import settings
from iti_admissions.services import fields as F


class CreditCardDetails(BaseModel):
    """Bank detail for a Student Credit Card; either part may still be missing."""
    bank_name: Optional[str] = Field(default=None, max_length=120)
    account_number: Optional[str] = Field(default=None, max_length=40)

    @field_validator("bank_name", "account_number", mode="before")
    def blank_text(cls, v):
        return F.blank_to_none(v)


class _ApplicationFields(BaseModel):
    """Everything an application can carry; subclasses decide what is required."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[dt.date] = None
    gender: Optional[str] = None
    category: Optional[str] = None
    uidai_number: Optional[str] = None

    village_town_city: Optional[str] = None
    nearby: Optional[str] = None
    police_station: Optional[str] = None
    post_office: Optional[str] = None
    block: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    class_10th_school: Optional[str] = None
    class_10th_subject: Optional[str] = None
    class_10th_marks_obtained: Optional[float] = Field(default=None, ge=0)
    class_10th_total_marks: Optional[float] = Field(default=None, ge=0)
    class_12th_school: Optional[str] = None
    class_12th_subject: Optional[str] = None
    class_12th_marks_obtained: Optional[float] = Field(default=None, ge=0)
    class_12th_total_marks: Optional[float] = Field(default=None, ge=0)

    trade: Optional[str] = None
    qualification: Optional[str] = None
    session: Optional[str] = None
    shift: Optional[str] = None

    pwd_claim: str = "No"
    pwd_category: Optional[str] = None
    student_credit_card: str = "No"
    student_credit_card_details: Optional[CreditCardDetails] = None

    @model_validator(mode="before")
    @classmethod
    def blanks_are_missing(cls, data: Any):
        if isinstance(data, dict):
            return {k: F.blank_to_none(v) for k, v in data.items()}
        return data

    @field_validator("mobile")
    def check_mobile(cls, v):
        if v is not None and not F.is_valid_mobile(v):
            raise ValueError("Please enter a valid 10-digit mobile number")
        return v

    @field_validator("email")
    def check_email(cls, v):
        if v is not None and not F.is_valid_email(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("uidai_number")
    def check_uidai(cls, v):
        if v is not None and not F.is_valid_uidai(v):
            raise ValueError("UIDAI/Aadhaar number must be 12 digits")
        return v

    @field_validator("pincode")
    def check_pincode(cls, v):
        if v is not None and not F.is_valid_pincode(v):
            raise ValueError("Please enter a valid 6-digit pincode")
        return v

    @field_validator("category")
    def check_category(cls, v):
        return None if v is None else F.normalize_category(v)

    @field_validator("trade")
    def check_trade(cls, v):
        if v is not None and v not in settings.TRADES:
            raise ValueError(f"Trade must be one of {', '.join(settings.TRADES)}")
        return v

    @field_validator("shift")
    def check_shift(cls, v):
        if v is not None and v not in settings.SHIFTS:
            raise ValueError(f"Shift must be one of {', '.join(settings.SHIFTS)}")
        return v

    @field_validator("pwd_claim", "student_credit_card", mode="before")
    def yes_no(cls, v):
        return F.normalize_yes_no(v)

    @model_validator(mode="after")
    def dependent_fields(self):
        for block in ("class_10th", "class_12th"):
            obtained = getattr(self, f"{block}_marks_obtained")
            total = getattr(self, f"{block}_total_marks")
            if obtained is not None and total is not None and obtained > total:
                raise ValueError(f"{block} marks obtained cannot exceed total marks")
        if self.pwd_claim != "Yes":
            self.pwd_category = None
        if self.student_credit_card != "Yes":
            self.student_credit_card_details = None
        return self


class ApplicationIn(_ApplicationFields):
    """Wizard submission. Mirrors the six step checks plus the declaration."""
    name: str
    father_name: str
    mother_name: str
    mobile: str
    email: str
    dob: dt.date
    gender: str
    category: str
    uidai_number: str

    village_town_city: str
    police_station: str
    post_office: str
    block: str
    district: str
    state: str
    pincode: str

    class_10th_school: str
    class_10th_marks_obtained: float = Field(ge=0)
    class_10th_total_marks: float = Field(ge=0)

    trade: str
    session: str

    declaration: bool

    @field_validator("declaration")
    def must_declare(cls, v):
        if not v:
            raise ValueError("Please accept the declaration")
        return v


class ManualApplicationIn(_ApplicationFields):
    """Staff entry; same required set as the edit form."""
    name: str
    father_name: str
    mobile: str
    trade: str
    qualification: str
    category: str
    status: str = "pending"

    @field_validator("status")
    def check_status(cls, v):
        return F.normalize_status(v)


class ApplicationUpdate(ManualApplicationIn):
    status: Optional[str] = None
    has_photo: Optional[bool] = None
    has_aadhaar: Optional[bool] = None
    has_marksheet: Optional[bool] = None

    @field_validator("status")
    def check_status(cls, v):
        return None if v is None else F.normalize_status(v)


class ApplicationOut(BaseModel):
    db_id: int
    application_id: str
    date_submitted: dt.datetime
    status: Literal["pending", "approved", "rejected"]

    name: str
    father_name: str
    mother_name: Optional[str] = None
    mobile: str
    email: Optional[str] = None
    dob: Optional[dt.date] = None
    gender: Optional[str] = None
    category: str
    uidai_number: Optional[str] = None

    village_town_city: Optional[str] = None
    nearby: Optional[str] = None
    police_station: Optional[str] = None
    post_office: Optional[str] = None
    block: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    class_10th_school: Optional[str] = None
    class_10th_subject: Optional[str] = None
    class_10th_marks_obtained: Optional[float] = None
    class_10th_total_marks: Optional[float] = None
    class_10th_percentage: Optional[str] = None
    class_12th_school: Optional[str] = None
    class_12th_subject: Optional[str] = None
    class_12th_marks_obtained: Optional[float] = None
    class_12th_total_marks: Optional[float] = None
    class_12th_percentage: Optional[str] = None

    trade: str
    qualification: str
    session: Optional[str] = None
    shift: Optional[str] = None
    pwd_claim: str = "No"
    pwd_category: Optional[str] = None
    student_credit_card: str = "No"
    student_credit_card_details: Optional[CreditCardDetails] = None
    registration_type: str = F.REGULAR
    documents: Dict[str, Optional[str]] = {}

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, rec) -> "ApplicationOut":
        data = {k: getattr(rec, k) for k in cls.model_fields if hasattr(rec, k)}
        data.update(
            db_id=rec.id,
            application_id=rec.application_no,
            date_submitted=rec.created_at,
            documents=dict(rec.documents or {}),
        )
        return cls.model_validate(data)


class ApplicationPage(BaseModel):
    items: List[ApplicationOut]
    total: int
    total_pages: int
    page: int


class ApplicationCreated(BaseModel):
    message: str
    application_id: str
    db_id: int
    student_id: Optional[int] = None


class StatusUpdateIn(BaseModel):
    status: str


class StatusUpdateOut(BaseModel):
    message: str
    application: ApplicationOut
    student_id: Optional[int] = None


class UidaiAvailability(BaseModel):
    available: bool
    message: str


class SessionIn(BaseModel):
    session_name: str = Field(min_length=1, max_length=40)
    start_year: int
    end_year: int
    is_active: bool = True

    @model_validator(mode="after")
    def years_in_order(self):
        if self.end_year < self.start_year:
            raise ValueError("end_year must not be before start_year")
        return self


class SessionUpdate(BaseModel):
    session_name: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    is_active: Optional[bool] = None


class SessionOut(BaseModel):
    id: int
    session_name: str
    start_year: int
    end_year: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
