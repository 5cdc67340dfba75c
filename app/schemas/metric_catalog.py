"""
app/schemas/metric_catalog.py

Response schemas for the metric catalog endpoint.
"""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel


class MetricDefinitionResponse(CamelModel):
    id: int
    metric_id: str
    metric_name: str
    category: str
    description: str | None = None
    unit: str | None = None
    data_type: str
    is_available_for_custom: bool


class MetricCatalogResponse(CamelModel):
    success: bool = True
    metrics: list[MetricDefinitionResponse] = Field(default_factory=list)
    count: int = Field(..., ge=0)
