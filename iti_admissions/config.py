# iti_admissions/config.py
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _csv_env(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Settings:
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./admissions.db")
    API_V1_STR: str = "/v1"
    CORS_ORIGINS: list[str] = _csv_env("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # uploads
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "./uploads")
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "50"))
    ALLOWED_EXTENSIONS: set[str] = {"jpg", "jpeg", "png", "pdf"}

    # review console
    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "10"))
    EXPORT_LIMIT: int = int(os.getenv("EXPORT_LIMIT", "10000"))

    # institution-defined vocabularies
    TRADES: list[str] = _csv_env("TRADES", "Electrician,Fitter")
    QUALIFICATIONS: list[str] = ["10th Pass", "12th Pass", "Graduate", "Other"]
    SHIFTS: list[str] = ["Morning", "Evening"]
    APPLICATION_PREFIX: str = os.getenv("APPLICATION_PREFIX", "ITI")
    MIS_ITI_CODE: str = os.getenv("MIS_ITI_CODE", "PR10001156")


settings = Settings()


class SiteConfig(BaseModel):
    """Public-site content with hard-coded fallbacks.

    Loaded once; anything the content endpoint does not return keeps its
    default so pages stay usable when that endpoint is down.
    """
    institute_name: str = "Maner Pvt ITI"
    address: str = "Maner Mahinawan, Near Vishwakarma Mandir, Maner, Patna - 801108"
    phone: str = "+91-9155401839"
    email: str = "manerpvtiti@gmail.com"
    session_label: str = "2024-25"

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "SiteConfig":
        if not overrides:
            return self
        known = {
            k: v for k, v in overrides.items()
            if k in type(self).model_fields and v not in (None, "")
        }
        return self.model_copy(update=known)


def load_site_config() -> SiteConfig:
    return SiteConfig().with_overrides({
        "institute_name": os.getenv("SITE_INSTITUTE_NAME"),
        "address": os.getenv("SITE_ADDRESS"),
        "phone": os.getenv("SITE_PHONE"),
        "email": os.getenv("SITE_EMAIL"),
        "session_label": os.getenv("SITE_SESSION_LABEL"),
    })
