"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.data_upload import DataUpload, UploadStatus
from db.models.metric_definition import MetricDataType, MetricDefinition
from db.models.metric_observation import MetricObservation, ObservationSource
from db.models.user_profile import UserProfile

__all__ = [
    "DataUpload",
    "MetricDataType",
    "MetricDefinition",
    "MetricObservation",
    "ObservationSource",
    "UploadStatus",
    "UserProfile",
]
