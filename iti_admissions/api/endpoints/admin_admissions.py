import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session
from iti_admissions.api.deps import get_db
from iti_admissions.api.endpoints.admissions import duplicate_uidai
from iti_admissions.config import settings
from iti_admissions.db import crud
from iti_admissions.db.schemas import (
    ApplicationOut, ApplicationPage, ApplicationCreated, ApplicationUpdate,
    ManualApplicationIn, StatusUpdateIn, StatusUpdateOut,
)
from iti_admissions.services import export, storage
from iti_admissions.services.fields import normalize_status

router = APIRouter(prefix="/admin/admissions", tags=["admin-admissions"])


def _status_filter(status: Optional[str]) -> Optional[str]:
    if not status or status == "all":
        return None
    try:
        return normalize_status(status)
    except ValueError:
        raise HTTPException(400, "Invalid status")


def _get_or_404(db: Session, db_id: int):
    rec = crud.get_application(db, db_id)
    if not rec:
        raise HTTPException(404, "Admission not found")
    return rec


@router.get("", response_model=ApplicationPage)
def list_admissions(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.EXPORT_LIMIT),
    status: Optional[str] = None,
    trade: Optional[str] = None,
    date: Optional[dt.date] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
):
    items, total, total_pages = crud.list_applications(
        db, page=page, limit=limit,
        status=_status_filter(status), trade=None if trade == "all" else trade, date=date, search=q,
    )
    return ApplicationPage(
        items=[ApplicationOut.from_record(r) for r in items],
        total=total, total_pages=total_pages, page=page,
    )


@router.get("/export")
def export_admissions(
    filter_type: export.ExportFilter = export.ExportFilter.ALL,
    status: Optional[str] = None,
    trade: Optional[str] = None,
    db: Session = Depends(get_db),
):
    rows = crud.filtered_query(db, status=_status_filter(status), trade=None if trade == "all" else trade) \
        .limit(settings.EXPORT_LIMIT).all()
    content = export.build_csv(export.apply_filter(rows, filter_type))
    filename = export.export_filename(filter_type)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/documents/{filename}")
def download_document(filename: str):
    try:
        path = storage.resolve_document(filename)
    except storage.DocumentNotFound:
        raise HTTPException(404, "File not found")
    return FileResponse(path, filename=filename)


@router.post("/manual", response_model=ApplicationCreated)
def create_manual_admission(app_in: ManualApplicationIn, db: Session = Depends(get_db)):
    try:
        rec = crud.create_application(db, app_in.model_dump(exclude={"status"}), status=app_in.status)
    except crud.DuplicateUidaiError as e:
        raise duplicate_uidai(e.message)
    student = crud.ensure_student(db, rec) if rec.status == "approved" else None
    return ApplicationCreated(
        message="Admission created and approved! Student record created." if student
        else "Admission created successfully",
        application_id=rec.application_no,
        db_id=rec.id,
        student_id=student.id if student else None,
    )


@router.get("/{db_id}", response_model=ApplicationOut)
def get_admission(db_id: int, db: Session = Depends(get_db)):
    return ApplicationOut.from_record(_get_or_404(db, db_id))


@router.put("/{db_id}", response_model=ApplicationOut)
def update_admission(db_id: int, changes: ApplicationUpdate, db: Session = Depends(get_db)):
    rec = _get_or_404(db, db_id)
    toggles = {"photo": changes.has_photo, "aadhaar": changes.has_aadhaar, "marksheet": changes.has_marksheet}
    data = changes.model_dump(exclude={"status", "has_photo", "has_aadhaar", "has_marksheet"})
    try:
        rec, _ = crud.update_application(db, rec, data, status=changes.status, document_toggles=toggles)
    except crud.DuplicateUidaiError as e:
        raise duplicate_uidai(e.message)
    return ApplicationOut.from_record(rec)


@router.put("/{db_id}/status", response_model=StatusUpdateOut)
def update_admission_status(db_id: int, body: StatusUpdateIn, db: Session = Depends(get_db)):
    rec = _get_or_404(db, db_id)
    try:
        status = normalize_status(body.status)
    except ValueError:
        raise HTTPException(400, "Invalid status")
    rec, student = crud.set_status(db, rec, status)
    message = "Admission approved successfully! Student record ready." if student else "Status updated successfully"
    return StatusUpdateOut(
        message=message,
        application=ApplicationOut.from_record(rec),
        student_id=student.id if student else None,
    )
