"""FastAPI application entry point for Member Import."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from memberimport import __version__
from memberimport.config import settings
from memberimport.database import close_db, init_db

logger = logging.getLogger(__name__)


def _validate_remote_configuration() -> None:
    """Warn at startup when imports cannot reach the member API."""
    if not settings.organisation_id or not settings.branch_id:
        logger.warning(
            "No organisation/branch configured for the member API. "
            "Uploads and previews work, processing will be refused. "
            "Set MEMBERIMPORT_ORGANISATION_ID and MEMBERIMPORT_BRANCH_ID."
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    _validate_remote_configuration()
    await init_db()
    logger.info("Member Import %s started", __version__)

    yield

    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Bulk member import from CSV and Excel spreadsheets",
    version=__version__,
    lifespan=lifespan,
)

# Only allow origins from the whitelist; empty list means same-origin only
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
        max_age=600,
    )


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": __version__,
            "app_name": settings.app_name,
        }
    )


from memberimport.routers import import_router  # noqa: E402

app.include_router(import_router.router, prefix="/api/import", tags=["Import"])
