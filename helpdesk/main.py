import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from helpdesk.core.config import APP_NAME, DATABASE_URL, IS_PROD, SESSION_SECRET
from helpdesk.core.database import init_db
from helpdesk.core.error_handlers import install_error_handlers
from helpdesk.core.logging_setup import configure_logging
from helpdesk.middleware.request_context import RequestContextMiddleware
from helpdesk.routers.pages import router as pages_router
from helpdesk.routers.sessions import router as sessions_router
from helpdesk.routers.tickets import router as tickets_router
from helpdesk.routers.users import router as users_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def _startup_tasks() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", STARTUP_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")
    if not SESSION_SECRET:
        logger.critical("%s SESSION_SECRET is not configured", STARTUP_PREFIX)
        raise RuntimeError("SESSION_SECRET is required")

    init_db()
    logger.info("%s database schema ready", STARTUP_PREFIX)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title=APP_NAME,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

install_error_handlers(app)
app.add_middleware(RequestContextMiddleware)

app.include_router(pages_router)
app.include_router(sessions_router)
app.include_router(users_router)
app.include_router(tickets_router)
