"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models
from .auth import router as auth_router
from .config import configure_logging, get_settings
from .database import engine
from .errors import register_exception_handlers
from .routers.categories import router as categories_router
from .routers.requests import router as requests_router

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="LeaveDesk Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(auth_router)
app.include_router(categories_router)
app.include_router(requests_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Ensure database tables exist."""

    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    logger.info("LeaveDesk backend ready")


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple readiness probe for uptime checks."""

    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the API with uvicorn."""

    import uvicorn

    uvicorn.run("leavedesk.main:app", host="0.0.0.0", port=8000)
