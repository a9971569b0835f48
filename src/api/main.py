"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from access.presentation import router as access_router
from infrastructure.database import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_auth_settings, get_settings
from infrastructure.version import __version__


@asynccontextmanager
async def access_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    settings = get_settings()
    configure_logging(debug=settings.debug)
    probe = DefaultStartupProbe()
    if not get_auth_settings().jwt_secret.get_secret_value():
        probe.auth_secret_missing()
    probe.application_started(app_name=settings.app_name, version=__version__)

    yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title="Access API",
    description="Tenant hierarchy, registration codes, roles, audit log and onboarding",
    version=__version__,
    lifespan=access_lifespan,
)

app.include_router(access_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
