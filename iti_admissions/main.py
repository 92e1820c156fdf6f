# iti_admissions/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from iti_admissions.config import settings
from iti_admissions.db.session import init_db
from iti_admissions.api.endpoints import admissions, admin_admissions, sessions, site


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="ITI Admissions API", version="1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    # Routers (versioned)
    app.include_router(admissions.router, prefix=settings.API_V1_STR)
    app.include_router(admin_admissions.router, prefix=settings.API_V1_STR)
    app.include_router(sessions.router, prefix=settings.API_V1_STR)
    app.include_router(site.router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    def on_startup():
        init_db()

    return app

app = create_app()
