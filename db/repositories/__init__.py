"""
Repository layer exports.
"""

from db.repositories.data_upload_repository import DataUploadRepository
from db.repositories.errors import RepositoryError, UserProfileNotFoundError
from db.repositories.metric_definition_repository import MetricDefinitionRepository
from db.repositories.metric_observation_repository import MetricObservationRepository
from db.repositories.user_profile_repository import UserProfileRepository

__all__ = [
    "DataUploadRepository",
    "MetricDefinitionRepository",
    "MetricObservationRepository",
    "UserProfileRepository",
    "RepositoryError",
    "UserProfileNotFoundError",
]
