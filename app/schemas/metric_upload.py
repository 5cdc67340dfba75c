"""
app/schemas/metric_upload.py

Request/response schemas for CSV metric upload endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class CSVUploadResponse(CamelModel):
    """
    API response model for one accepted upload.

    errors is omitted when no row failed and holds at most the configured
    number of messages otherwise.
    """

    success: bool = True
    upload_id: uuid.UUID
    rows_processed: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    errors: list[str] | None = None


class DuplicateUploadResponse(CamelModel):
    error: str
    upload_id: uuid.UUID


class DataUploadResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    file_name: str
    file_size: int
    file_hash: str
    upload_status: str
    metrics_mapped: dict[str, str]
    rows_processed: int
    rows_failed: int
    error_log: list[str]
    uploaded_at: datetime


class DataUploadListResponse(CamelModel):
    uploads: list[DataUploadResponse] = Field(default_factory=list)
