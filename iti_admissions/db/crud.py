import datetime as dt
import logging
import math
from typing import Optional, Any, Dict, Tuple, List

from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query

from iti_admissions.config import settings
from iti_admissions.db.models import Application, AcademicSession, Student
from iti_admissions.services import fields as F
from iti_admissions.services.storage import DOCUMENT_SLOTS, MANUAL_VERIFIED

logger = logging.getLogger(__name__)

DUPLICATE_UIDAI_MSG = (
    "This UIDAI/Aadhaar number is already registered. Each UIDAI number can only be used once."
)
DUPLICATE_UIDAI_STUDENT_MSG = (
    "This UIDAI/Aadhaar number is already registered in student records."
)


class DuplicateUidaiError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------------------------
# UIDAI uniqueness
# ---------------------------
def uidai_conflict(db: Session, number: Optional[str], exclude_id: Optional[int] = None) -> Optional[str]:
    """Return the reason a UIDAI number is unavailable, or None when it is free."""
    if not number:
        return None
    q = db.query(Application.id).filter(Application.uidai_number == number)
    if exclude_id is not None:
        q = q.filter(Application.id != exclude_id)
    if q.first():
        return DUPLICATE_UIDAI_MSG
    s = db.query(Student.id).filter(Student.uidai_number == number)
    if exclude_id is not None:
        s = s.filter(Student.admission_id != exclude_id)
    if s.first():
        return DUPLICATE_UIDAI_STUDENT_MSG
    return None


def _check_uidai(db: Session, number: Optional[str], exclude_id: Optional[int] = None):
    reason = uidai_conflict(db, number, exclude_id)
    if reason:
        logger.info("Rejected duplicate UIDAI ending %s", (number or "")[-4:])
        raise DuplicateUidaiError(reason)


# ---------------------------
# Applications
# ---------------------------
def _apply_fields(rec: Application, data: Dict[str, Any]) -> None:
    for key, value in data.items():
        if hasattr(Application, key) and key not in ("id", "application_no", "created_at", "documents", "status"):
            setattr(rec, key, value)
    if rec.pwd_claim != "Yes":
        rec.pwd_category = None
    if rec.student_credit_card != "Yes":
        rec.student_credit_card_details = None
    rec.registration_type = F.registration_type_for(rec.student_credit_card)
    rec.class_10th_percentage = F.calc_percentage(
        rec.class_10th_marks_obtained, rec.class_10th_total_marks) or None
    rec.class_12th_percentage = F.calc_percentage(
        rec.class_12th_marks_obtained, rec.class_12th_total_marks) or None


def _commit(db: Session, rec) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "uidai" in str(e.orig).lower():
            raise DuplicateUidaiError(DUPLICATE_UIDAI_MSG) from e
        raise
    db.refresh(rec)


def create_application(db: Session, data: Dict[str, Any], documents: Optional[Dict[str, Optional[str]]] = None,
                       status: str = "pending") -> Application:
    _check_uidai(db, data.get("uidai_number"))
    rec = Application(status=F.normalize_status(status),
                      created_at=dt.datetime.now(dt.timezone.utc).replace(tzinfo=None),
                      documents={slot: (documents or {}).get(slot) for slot in DOCUMENT_SLOTS})
    _apply_fields(rec, data)
    db.add(rec)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUidaiError(DUPLICATE_UIDAI_MSG) from e
    rec.application_no = F.format_application_no(settings.APPLICATION_PREFIX, rec.created_at.year, rec.id)
    _commit(db, rec)
    logger.info("Created application %s (status=%s, type=%s)", rec.application_no, rec.status, rec.registration_type)
    return rec


def get_application(db: Session, app_id: int) -> Application | None:
    return db.get(Application, app_id)


def filtered_query(db: Session, status: Optional[str] = None, trade: Optional[str] = None,
                   date: Optional[dt.date] = None, search: Optional[str] = None) -> Query:
    q = db.query(Application)
    if status:
        q = q.filter(Application.status == F.normalize_status(status))
    if trade:
        q = q.filter(Application.trade == trade)
    if date:
        start = dt.datetime.combine(date, dt.time.min)
        q = q.filter(Application.created_at >= start, Application.created_at < start + dt.timedelta(days=1))
    if search:
        term = search.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        like = f"%{term}%"
        q = q.filter(or_(
            func.lower(Application.name).like(like, escape="\\"),
            func.lower(Application.application_no).like(like, escape="\\"),
            Application.mobile.like(like, escape="\\"),
            func.lower(Application.email).like(like, escape="\\"),
        ))
    return q.order_by(Application.created_at.desc(), Application.id.desc())


def list_applications(db: Session, page: int = 1, limit: Optional[int] = None,
                      **filters) -> Tuple[List[Application], int, int]:
    limit = limit or settings.PAGE_SIZE
    q = filtered_query(db, **filters)
    total = q.count()
    items = q.offset((page - 1) * limit).limit(limit).all()
    return items, total, math.ceil(total / limit)


def _toggle_documents(current: Dict[str, Optional[str]], toggles: Dict[str, Optional[bool]]) -> Dict[str, Optional[str]]:
    docs = {slot: current.get(slot) for slot in DOCUMENT_SLOTS}
    for slot, keep in toggles.items():
        if keep is None:
            continue
        docs[slot] = (docs.get(slot) or MANUAL_VERIFIED) if keep else None
    return docs


def update_application(db: Session, rec: Application, data: Dict[str, Any], status: Optional[str] = None,
                       document_toggles: Optional[Dict[str, Optional[bool]]] = None) -> Tuple[Application, Optional[Student]]:
    """Full-field replacement; `data` is expected to carry every editable field."""
    _check_uidai(db, data.get("uidai_number"), exclude_id=rec.id)
    _apply_fields(rec, data)
    if document_toggles:
        rec.documents = _toggle_documents(rec.documents or {}, document_toggles)
    if status:
        rec.status = F.normalize_status(status)
    db.add(rec)
    _commit(db, rec)
    logger.info("Updated application %s", rec.application_no)
    student = ensure_student(db, rec) if rec.status == "approved" else None
    return rec, student


def set_status(db: Session, rec: Application, status: str) -> Tuple[Application, Optional[Student]]:
    previous = rec.status
    rec.status = F.normalize_status(status)
    db.add(rec); db.commit(); db.refresh(rec)
    logger.info("Application %s status %s -> %s", rec.application_no, previous, rec.status)
    student = ensure_student(db, rec) if rec.status == "approved" else None
    return rec, student


# ---------------------------
# Students
# ---------------------------
def ensure_student(db: Session, rec: Application) -> Student:
    """Create the enrollment record for an approved application, or refresh it."""
    student = db.query(Student).filter(Student.admission_id == rec.id).first()
    docs = rec.documents or {}
    photo = docs.get("photo") if docs.get("photo") != MANUAL_VERIFIED else None
    if student is None:
        today = dt.date.today()
        student = Student(
            admission_id=rec.id,
            admission_date=today,
            academic_year=f"{today.year}-{today.year + 1}",
            mis_iti_code=settings.MIS_ITI_CODE,
            status="Active",
            session=f"{today.year}-{today.year + 1}",
        )
        logger.info("Enrolling student for approved application %s", rec.application_no)
    student.student_name = rec.name
    student.uidai_number = rec.uidai_number
    student.mother_name = rec.mother_name
    student.session = rec.session or student.session
    student.shift = rec.shift
    student.father_name = rec.father_name
    student.mobile = rec.mobile
    student.email = rec.email
    student.trade = rec.trade
    student.qualification = rec.qualification
    student.category = rec.category
    student.photo = photo
    db.add(student); db.commit(); db.refresh(student)
    return student


# ---------------------------
# Sessions
# ---------------------------
def list_sessions(db: Session, active_only: bool = False) -> List[AcademicSession]:
    q = db.query(AcademicSession)
    if active_only:
        q = q.filter(AcademicSession.is_active.is_(True))
    return q.order_by(AcademicSession.start_year.desc()).all()


def get_session(db: Session, session_id: int) -> AcademicSession | None:
    return db.get(AcademicSession, session_id)


def is_active_session(db: Session, session_name: Optional[str]) -> bool:
    if not session_name:
        return False
    return db.query(AcademicSession.id).filter(
        AcademicSession.session_name == session_name,
        AcademicSession.is_active.is_(True),
    ).first() is not None


def create_session(db: Session, **kwargs) -> AcademicSession:
    rec = AcademicSession(**kwargs)
    db.add(rec); db.commit(); db.refresh(rec)
    return rec


def update_session(db: Session, rec: AcademicSession, **changes) -> AcademicSession:
    for key, value in changes.items():
        if value is not None:
            setattr(rec, key, value)
    db.add(rec); db.commit(); db.refresh(rec)
    return rec
