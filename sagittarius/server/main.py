"""
Server app factory and entry point.

Startup is fail-fast: a missing API_SECRET or an unusable database stops
the lifespan, so the server never starts serving.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sagittarius.server.routes import Unauthorized, router, secret_matches
from sagittarius.server.settings import Settings, get_settings
from sagittarius.server.store import StatsStore, StoreError

logger = logging.getLogger(__name__)

UNAUTHORIZED_BODY = {"error": "Unauthorized - Invalid or missing API secret"}


def _has_valid_secret(request: Request) -> bool:
    return secret_matches(request.headers.get("X-API-Secret"), request.app.state.settings.api_secret)


async def unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
    logger.warning("Rejected %s %s: bad or missing API secret", request.method, request.url.path)
    return JSONResponse(status_code=401, content=UNAUTHORIZED_BODY)


async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # A body that fails to parse must not reveal anything to an unauthenticated caller
    if not _has_valid_secret(request):
        return await unauthorized_handler(request, Unauthorized())
    logger.warning("Rejected malformed stats payload: %s", exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid stats payload", "details": jsonable_encoder(exc.errors())},
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Database operation failed"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    store = StatsStore(settings.db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        settings.validate()
        store.init_schema()
        logger.info("Endpoints:")
        logger.info("   POST /api/stats  - Receive and update stats")
        logger.info("   GET  /api/stats  - Get all stats")
        logger.info("   GET  /health     - Health check")
        yield

    app = FastAPI(title="Sagittarius Stats API", version="0.3.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_allow_origin],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Secret"],
        max_age=3600,
    )

    app.add_exception_handler(Unauthorized, unauthorized_handler)
    app.add_exception_handler(RequestValidationError, validation_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(router)
    return app


def run() -> None:
    """Console entry point: sagittarius-server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    settings = get_settings()
    logger.info("Database: %s", settings.database_url)
    logger.info("Server starting on http://%s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
