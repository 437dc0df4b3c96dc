"""
Stats API routes.

  POST /api/stats — merge an agent snapshot into the counters
  GET  /api/stats — aggregated counters + sync timestamps
  GET  /health    — liveness, no auth

The secret check is a route dependency, so it runs before the body is
used and before any transaction is opened.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, Request

from sagittarius.server.schemas import (
    HealthResponse,
    IngestResponse,
    StatsPayload,
    StatsResponse,
)
from sagittarius.server.settings import Settings
from sagittarius.server.store import StatsStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "sagittarius-server"


class Unauthorized(Exception):
    """Missing or wrong X-API-Secret."""


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> StatsStore:
    return request.app.state.store


def secret_matches(supplied: str | None, expected: str) -> bool:
    """Constant-time comparison of a supplied X-API-Secret against the configured one."""
    return supplied is not None and hmac.compare_digest(supplied.encode(), expected.encode())


def require_secret(
    x_api_secret: str | None = Header(default=None, alias="X-API-Secret"),
    settings: Settings = Depends(get_settings),
) -> None:
    if not secret_matches(x_api_secret, settings.api_secret):
        raise Unauthorized()


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", service=SERVICE_NAME)


@router.post(
    "/api/stats",
    response_model=IngestResponse,
    dependencies=[Depends(require_secret)],
)
def receive_stats(
    stats: StatsPayload,
    store: StatsStore = Depends(get_store),
) -> IngestResponse:
    processed = store.merge(stats.events)
    logger.info(
        "Stats updated: %d keys, %d clicks, %d scrolls (%d events)%s",
        stats.total_keys,
        stats.total_clicks,
        stats.total_wheels,
        processed,
        f" from {stats.hostname}" if stats.hostname else "",
    )
    return IngestResponse(events_processed=processed)


@router.get(
    "/api/stats",
    response_model=StatsResponse,
    dependencies=[Depends(require_secret)],
)
def get_stats(store: StatsStore = Depends(get_store)) -> StatsResponse:
    return StatsResponse(**store.aggregate())
