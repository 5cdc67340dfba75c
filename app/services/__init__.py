"""
app/services package marker.
"""

from app.services.csv_upload_service import (
    CSVUploadError,
    CSVUploadService,
    DuplicateUploadError,
    EmptyOrInvalidFileError,
    UploadPersistenceError,
    get_csv_upload_service,
)
from app.services.manual_input_service import (
    ManualInputError,
    ManualInputService,
    MetricInputValidationError,
    MetricObservationNotFoundError,
    get_manual_input_service,
)
from app.services.metric_catalog_service import MetricCatalogService, get_metric_catalog_service
from app.services.user_profile_service import UserProfileService, get_user_profile_service

__all__ = [
    "CSVUploadError",
    "CSVUploadService",
    "DuplicateUploadError",
    "EmptyOrInvalidFileError",
    "UploadPersistenceError",
    "get_csv_upload_service",
    "ManualInputError",
    "ManualInputService",
    "MetricInputValidationError",
    "MetricObservationNotFoundError",
    "get_manual_input_service",
    "MetricCatalogService",
    "get_metric_catalog_service",
    "UserProfileService",
    "get_user_profile_service",
]
