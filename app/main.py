import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.admin.router import router as admin_router
from app.api.approval.router import router as approval_router
from app.api.auth.router import router as auth_router
from app.api.content.router import gallery_router, jobs_router, news_router
from app.api.directory.router import dashboard_router, router as directory_router
from app.api.events.router import router as events_router
from app.api.imports.router import router as imports_router
from app.api.invites.router import router as invites_router
from app.api.notifications.router import router as notifications_router
from app.api.og.router import router as og_router
from app.api.profile.router import router as profile_router
from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Alumni Directory Backend")

    # CORS: allow the web client to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(approval_router)
    app.include_router(imports_router)
    app.include_router(invites_router)
    app.include_router(directory_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)
    app.include_router(events_router)
    app.include_router(jobs_router)
    app.include_router(news_router)
    app.include_router(gallery_router)
    app.include_router(notifications_router)
    app.include_router(og_router)

    return app


app = create_app()
