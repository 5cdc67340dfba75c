"""
app/schemas/manual_input.py

Request/response schemas for manual metric entry.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.base import CamelModel


class ManualInputCreateRequest(CamelModel):
    # Presence is checked by the service so the error message matches the
    # one returned for empty values.
    metric_id: str | None = None
    value: Any = None
    date: str | None = None
    notes: str | None = None


class ManualInputUpdateRequest(CamelModel):
    id: int | None = None
    value: Any = None
    notes: str | None = None


class MetricObservationResponse(CamelModel):
    id: int
    user_id: uuid.UUID
    metric_id: str
    value: str
    date: datetime
    notes: str | None = None
    source: str
    upload_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class MetricObservationEnvelope(CamelModel):
    success: bool = True
    data: MetricObservationResponse


class MetricObservationListResponse(CamelModel):
    data: list[MetricObservationResponse] = Field(default_factory=list)


class SuccessResponse(CamelModel):
    success: bool = True
