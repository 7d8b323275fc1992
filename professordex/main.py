import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from professordex.api import (
    cards_router,
    collections_router,
    decks_router,
    health_router,
    master_sets_router,
    owned_cards_router,
)
from professordex.config import settings
from professordex.db.database import init_db
from professordex.models.failure import ApiResponse, ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("professordex"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(collections_router)
app.include_router(decks_router)
app.include_router(health_router)
app.include_router(master_sets_router)
app.include_router(owned_cards_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a refusal or known failure with the status code the error carries."""
    logger.info(
        "%s %s %s: %s (%s)",
        request.method,
        request.url.path,
        exc.outcome.value,
        exc.message,
        exc.kind.value,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ApiResponse.unknown_failure(detail=type(exc).__name__).model_dump(mode="json"),
    )
