from sqlalchemy import Column, Integer, Float, String, Boolean, Date, DateTime, ForeignKey
from sqlalchemy import JSON as SAJSON
from sqlalchemy.orm import relationship
import datetime as dt
from iti_admissions.db.session import Base


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Application(Base):
    __tablename__ = "applications"
    id = Column(Integer, primary_key=True, index=True)                 # dbId
    application_no = Column(String(32), unique=True, index=True)       # applicationId, set after insert
    created_at = Column(DateTime, default=_utcnow, nullable=False)     # dateSubmitted
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # personal
    name = Column(String(120), nullable=False, index=True)
    father_name = Column(String(120), nullable=False)
    mother_name = Column(String(120), nullable=True)
    mobile = Column(String(10), nullable=False, index=True)
    email = Column(String(160), nullable=True)
    dob = Column(Date, nullable=True)
    gender = Column(String(16), nullable=True)
    category = Column(String(8), nullable=False)                       # GEN/OBC/SC/ST/EWS
    uidai_number = Column(String(12), unique=True, nullable=True)

    # address
    village_town_city = Column(String(120), nullable=True)
    nearby = Column(String(120), nullable=True)
    police_station = Column(String(120), nullable=True)
    post_office = Column(String(120), nullable=True)
    block = Column(String(120), nullable=True)
    district = Column(String(120), nullable=True)
    state = Column(String(120), nullable=True)
    pincode = Column(String(6), nullable=True)

    # education (percentages are derived, never written by clients)
    class_10th_school = Column(String(200), nullable=True)
    class_10th_subject = Column(String(120), nullable=True)
    class_10th_marks_obtained = Column(Float, nullable=True)
    class_10th_total_marks = Column(Float, nullable=True)
    class_10th_percentage = Column(String(8), nullable=True)
    class_12th_school = Column(String(200), nullable=True)
    class_12th_subject = Column(String(120), nullable=True)
    class_12th_marks_obtained = Column(Float, nullable=True)
    class_12th_total_marks = Column(Float, nullable=True)
    class_12th_percentage = Column(String(8), nullable=True)

    # preferences
    trade = Column(String(80), nullable=False, index=True)
    qualification = Column(String(200), nullable=False)
    session = Column(String(40), nullable=True)
    shift = Column(String(16), nullable=True)

    pwd_claim = Column(String(3), default="No", nullable=False)
    pwd_category = Column(String(80), nullable=True)

    student_credit_card = Column(String(3), default="No", nullable=False)
    student_credit_card_details = Column(SAJSON, nullable=True)       # {bank_name, account_number}
    registration_type = Column(String(32), default="Regular", nullable=False)

    documents = Column(SAJSON, nullable=False, default=dict)           # photo/aadhaar/marksheet/student_credit_card_doc
    status = Column(String(16), default="pending", nullable=False, index=True)

    student = relationship("Student", back_populates="admission", uselist=False)


class AcademicSession(Base):
    __tablename__ = "sessions"
    id = Column(Integer, primary_key=True, index=True)
    session_name = Column(String(40), unique=True, nullable=False)
    start_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Student(Base):
    __tablename__ = "students"
    id = Column(Integer, primary_key=True, index=True)
    admission_id = Column(Integer, ForeignKey("applications.id"), unique=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    student_name = Column(String(120), nullable=False)
    father_name = Column(String(120), nullable=True)
    mother_name = Column(String(120), nullable=True)
    mobile = Column(String(10), nullable=True)
    email = Column(String(160), nullable=True)
    trade = Column(String(80), nullable=True)
    qualification = Column(String(200), nullable=True)
    category = Column(String(8), nullable=True)
    uidai_number = Column(String(12), unique=True, nullable=True)
    session = Column(String(40), nullable=True)
    shift = Column(String(16), nullable=True)
    photo = Column(String(200), nullable=True)

    enrollment_number = Column(String(40), nullable=True)             # assigned by staff later
    admission_date = Column(Date, nullable=False)
    academic_year = Column(String(9), nullable=False)
    mis_iti_code = Column(String(20), nullable=True)
    status = Column(String(16), default="Active", nullable=False)

    admission = relationship("Application", back_populates="student")
