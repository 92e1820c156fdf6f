# -*- coding: utf-8 -*-
import logging
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Optional

from iti_admissions.config import settings

logger = logging.getLogger(__name__)

DOCUMENT_SLOTS = ("photo", "aadhaar", "marksheet", "student_credit_card_doc")
REQUIRED_SLOTS = ("photo", "aadhaar", "marksheet")
MANUAL_VERIFIED = "manual_verified"

_CHUNK = 1024 * 1024


class UploadRejected(Exception):
    pass


class DocumentNotFound(Exception):
    pass


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _extension(filename: Optional[str]) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix.lstrip(".") not in settings.ALLOWED_EXTENSIONS:
        raise UploadRejected("Only PDF and image files are allowed")
    return suffix


def save_upload(filename: Optional[str], stream: BinaryIO) -> str:
    """Copy an uploaded file into the upload directory and return its stored name."""
    ext = _extension(filename)
    stored = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    target = upload_dir() / stored
    limit = settings.MAX_UPLOAD_MB * 1024 * 1024
    written = 0
    with target.open("wb") as out:
        while True:
            chunk = stream.read(_CHUNK)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                out.close()
                target.unlink(missing_ok=True)
                logger.warning("Rejected upload %s: larger than %s MB", filename, settings.MAX_UPLOAD_MB)
                raise UploadRejected(
                    f"File too large. Maximum file size is {settings.MAX_UPLOAD_MB}MB."
                )
            out.write(chunk)
    logger.info("Stored upload %s as %s (%d bytes)", filename, stored, written)
    return stored


def discard(stored_names) -> None:
    for name in stored_names:
        if name:
            (upload_dir() / name).unlink(missing_ok=True)


def resolve_document(filename: str) -> Path:
    base = upload_dir().resolve()
    path = (base / filename).resolve()
    if path.parent != base or not path.is_file():
        raise DocumentNotFound(filename)
    return path
