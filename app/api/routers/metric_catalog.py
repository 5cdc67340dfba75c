"""
app/api/routers/metric_catalog.py

Metric catalog endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.metric_catalog import MetricCatalogResponse, MetricDefinitionResponse
from app.services.metric_catalog_service import MetricCatalogService, get_metric_catalog_service
from db.session import get_db

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/available-metrics", response_model=MetricCatalogResponse)
def list_available_metrics(
    db: Session = Depends(get_db),
    catalog: MetricCatalogService = Depends(get_metric_catalog_service),
) -> MetricCatalogResponse:
    metrics = [
        MetricDefinitionResponse.model_validate(definition)
        for definition in catalog.list_available_metrics(db=db)
    ]
    return MetricCatalogResponse(metrics=metrics, count=len(metrics))
