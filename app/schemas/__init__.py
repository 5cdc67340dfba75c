"""
app/schemas package marker.
"""

from app.schemas.manual_input import (
    ManualInputCreateRequest,
    ManualInputUpdateRequest,
    MetricObservationEnvelope,
    MetricObservationListResponse,
    MetricObservationResponse,
    SuccessResponse,
)
from app.schemas.metric_catalog import MetricCatalogResponse, MetricDefinitionResponse
from app.schemas.metric_upload import (
    CSVUploadResponse,
    DataUploadListResponse,
    DataUploadResponse,
    DuplicateUploadResponse,
)

__all__ = [
    "CSVUploadResponse",
    "DataUploadListResponse",
    "DataUploadResponse",
    "DuplicateUploadResponse",
    "ManualInputCreateRequest",
    "ManualInputUpdateRequest",
    "MetricCatalogResponse",
    "MetricDefinitionResponse",
    "MetricObservationEnvelope",
    "MetricObservationListResponse",
    "MetricObservationResponse",
    "SuccessResponse",
]
