from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from iti_admissions.api.deps import get_db
from iti_admissions.db import crud
from iti_admissions.db.schemas import SessionIn, SessionOut, SessionUpdate

router = APIRouter(tags=["sessions"])


@router.get("/sessions/active", response_model=List[SessionOut])
def active_sessions(db: Session = Depends(get_db)):
    return [SessionOut.model_validate(s) for s in crud.list_sessions(db, active_only=True)]


@router.get("/sessions", response_model=List[SessionOut])
def all_sessions(db: Session = Depends(get_db)):
    return [SessionOut.model_validate(s) for s in crud.list_sessions(db)]


@router.post("/sessions", response_model=SessionOut)
def create_session(session_in: SessionIn, db: Session = Depends(get_db)):
    try:
        rec = crud.create_session(db, **session_in.model_dump())
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Session already exists")
    return SessionOut.model_validate(rec)


@router.put("/sessions/{session_id}", response_model=SessionOut)
def update_session(session_id: int, changes: SessionUpdate, db: Session = Depends(get_db)):
    rec = crud.get_session(db, session_id)
    if not rec:
        raise HTTPException(404, "Session not found")
    try:
        rec = crud.update_session(db, rec, **changes.model_dump())
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Session already exists")
    return SessionOut.model_validate(rec)
