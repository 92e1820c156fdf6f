import logging
from typing import Dict
from fastapi import APIRouter, Depends, HTTPException, Path, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from iti_admissions.api.deps import get_db
from iti_admissions.db import crud
from iti_admissions.db.schemas import ApplicationIn, ApplicationCreated, UidaiAvailability
from iti_admissions.services import storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admissions"])


def duplicate_uidai(message: str) -> HTTPException:
    return HTTPException(409, {"message": message, "field": "uidai_number"})


@router.get("/admissions/check-uidai/{number}", response_model=UidaiAvailability)
def check_uidai(number: str = Path(pattern=r"^\d{12}$"), db: Session = Depends(get_db)):
    reason = crud.uidai_conflict(db, number)
    if reason:
        return UidaiAvailability(available=False, message=reason)
    return UidaiAvailability(available=True, message="UIDAI number is available")


@router.post("/admissions", response_model=ApplicationCreated)
async def apply_admission(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    data = {k: v for k, v in form.multi_items() if isinstance(v, str)}
    uploads = {k: v for k, v in form.multi_items() if not isinstance(v, str) and k in storage.DOCUMENT_SLOTS}
    # database work and file copies block, keep them off the event loop
    return await run_in_threadpool(_submit_application, db, data, uploads)


def _submit_application(db: Session, data: Dict[str, str], uploads: Dict[str, UploadFile]) -> ApplicationCreated:
    # bank/account arrive as flat fields and become the nested detail record
    bank = data.pop("student_credit_card_bank", None)
    account = data.pop("student_credit_card_account", None)
    if str(data.get("student_credit_card", "")).capitalize() == "Yes":
        data["student_credit_card_details"] = {"bank_name": bank or "", "account_number": account or ""}
    for derived in ("class_10th_percentage", "class_12th_percentage", "registration_type", "status"):
        data.pop(derived, None)

    try:
        app_in = ApplicationIn.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    if any(not getattr(uploads.get(slot), "filename", None) for slot in storage.REQUIRED_SLOTS):
        raise HTTPException(400, "All documents are required")
    if not crud.is_active_session(db, app_in.session):
        raise HTTPException(400, "Selected session is not open for admissions")
    reason = crud.uidai_conflict(db, app_in.uidai_number)
    if reason:
        raise duplicate_uidai(reason)

    stored = {}
    try:
        for slot, upload in uploads.items():
            if upload.filename:
                stored[slot] = storage.save_upload(upload.filename, upload.file)
    except storage.UploadRejected as e:
        storage.discard(stored.values())
        logger.info("Rejected submission upload: %s", e)
        raise HTTPException(400, str(e))

    payload = app_in.model_dump(exclude={"declaration"})
    payload["qualification"] = f"10th from {app_in.class_10th_school}"
    try:
        rec = crud.create_application(db, payload, documents=stored)
    except crud.DuplicateUidaiError as e:
        storage.discard(stored.values())
        raise duplicate_uidai(e.message)

    return ApplicationCreated(
        message="Application submitted successfully",
        application_id=rec.application_no,
        db_id=rec.id,
    )
