"""Wire schemas for the stats API."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

# SQLite INTEGER is a signed 64-bit value
SQLITE_MAX_INT = 2**63 - 1

Count = Annotated[int, Field(ge=0, le=SQLITE_MAX_INT, strict=True)]
EventName = Annotated[str, Field(min_length=1, max_length=128)]


class StatsPayload(BaseModel):
    """Snapshot pushed by an agent. Totals are informational only."""

    total_keys: Count
    total_clicks: Count
    total_wheels: Count
    events: dict[EventName, Count]
    timestamp: str | None = None
    hostname: str | None = None


class IngestResponse(BaseModel):
    success: bool = True
    message: str = "Stats updated successfully"
    events_processed: int


class EventCount(BaseModel):
    name: str
    type: Literal["KEY", "CLICK", "WHEEL", "OTHER"]
    count: int


class StatsResponse(BaseModel):
    total_keys: int
    total_clicks: int
    total_wheels: int
    last_sync: str | None
    first_sync: str | None
    events: list[EventCount]


class HealthResponse(BaseModel):
    status: str
    service: str
