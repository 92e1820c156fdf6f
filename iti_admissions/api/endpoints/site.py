from fastapi import APIRouter
from iti_admissions.config import SiteConfig, load_site_config

router = APIRouter(tags=["site"])


@router.get("/site", response_model=SiteConfig)
def site_content():
    return load_site_config()
