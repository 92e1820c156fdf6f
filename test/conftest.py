# -*- coding: utf-8 -*-
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from iti_admissions.api.deps import get_db
from iti_admissions.config import settings
from iti_admissions.db import crud
from iti_admissions.db.session import init_db
from iti_admissions.main import app


@pytest.fixture()
def db_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with factory() as db:
        crud.create_session(db, session_name="2024-25", start_year=2024, end_year=2025, is_active=True)
        crud.create_session(db, session_name="2023-24", start_year=2023, end_year=2024, is_active=False)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(db_factory):
    with db_factory() as session:
        yield session


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture()
def client(db_factory, upload_dir):
    def _get_db():
        db = db_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def applicant(**overrides):
    """Form fields for a complete wizard submission."""
    fields = {
        "name": "Ravi Kumar",
        "father_name": "Suresh Kumar",
        "mother_name": "Sunita Devi",
        "mobile": "9876543210",
        "email": "ravi@example.com",
        "dob": "2006-04-12",
        "gender": "Male",
        "category": "OBC",
        "uidai_number": "123456789012",
        "pwd_claim": "No",
        "village_town_city": "Maner",
        "police_station": "Maner",
        "post_office": "Maner",
        "block": "Maner",
        "district": "Patna",
        "state": "Bihar",
        "pincode": "801108",
        "class_10th_school": "High School Maner",
        "class_10th_subject": "Science",
        "class_10th_marks_obtained": "425",
        "class_10th_total_marks": "500",
        "trade": "Electrician",
        "session": "2024-25",
        "shift": "Morning",
        "student_credit_card": "No",
        "declaration": "true",
    }
    fields.update(overrides)
    return fields


def documents(with_scc: bool = False):
    files = {
        "photo": ("photo.jpg", b"\xff\xd8photo", "image/jpeg"),
        "aadhaar": ("aadhaar.pdf", b"%PDF-aadhaar", "application/pdf"),
        "marksheet": ("marks.png", b"\x89PNGmarks", "image/png"),
    }
    if with_scc:
        files["student_credit_card_doc"] = ("scc.pdf", b"%PDF-scc", "application/pdf")
    return files


def manual_entry(**overrides):
    body = {
        "name": "Anita Kumari",
        "father_name": "Ram Prasad",
        "mobile": "9123456780",
        "trade": "Fitter",
        "qualification": "10th Pass",
        "category": "SC",
    }
    body.update(overrides)
    return body
