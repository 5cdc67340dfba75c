"""
app/services/manual_input_service.py

Manual metric entry: owner-scoped create, list, update and delete of
metric observations.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.validators.csv_validator import parse_observation_date
from db.base import utc_now
from db.models.metric_observation import MetricObservation, ObservationSource
from db.repositories.metric_observation_repository import MetricObservationRepository

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100


class ManualInputError(Exception):
    """
    Base exception for manual metric entry failures.
    """


class MetricInputValidationError(ManualInputError):
    """
    Raised when a manual entry is missing fields or carries an invalid date.
    """


class MetricObservationNotFoundError(ManualInputError):
    """
    Raised when an observation does not exist or belongs to another owner.
    """

    def __init__(self, observation_id: int) -> None:
        super().__init__("Metric data not found")
        self.observation_id = observation_id


class MetricObservationPersistenceError(ManualInputError):
    """
    Raised when a manual entry cannot be written.
    """


class ManualInputService:
    """
    Records and edits hand-entered metric observations.
    """

    def create_observation(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        metric_id: str | None,
        value: Any,
        date: str | None,
        notes: str | None = None,
    ) -> MetricObservation:
        if not metric_id or value is None or value == "" or not date:
            raise MetricInputValidationError("Missing required fields: metricId, value, date")

        observation_date = parse_observation_date(str(date))
        if observation_date is None:
            raise MetricInputValidationError("Invalid date format")

        repository = MetricObservationRepository(db)
        try:
            observation = repository.add(
                user_id=owner_id,
                metric_id=metric_id,
                value=str(value),
                date=observation_date,
                notes=notes or None,
                source=ObservationSource.MANUAL,
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise MetricObservationPersistenceError("Failed to save metric data.") from exc

        logger.info(
            "Manual metric recorded owner=%s metric=%r observation=%s",
            owner_id,
            metric_id,
            observation.id,
        )
        return observation

    def list_observations(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        metric_id: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[MetricObservation]:
        return MetricObservationRepository(db).list_for_user(
            user_id=owner_id,
            metric_id=metric_id,
            limit=limit,
        )

    def update_observation(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        observation_id: int,
        value: Any = None,
        notes: str | None = None,
    ) -> MetricObservation:
        """
        Change value and/or notes of one owned observation.

        Fields passed as None are left as they are.
        """

        repository = MetricObservationRepository(db)
        observation = repository.get_for_user(user_id=owner_id, observation_id=observation_id)
        if observation is None:
            raise MetricObservationNotFoundError(observation_id)

        if value is not None:
            observation.value = str(value)
        if notes is not None:
            observation.notes = notes
        observation.updated_at = utc_now()

        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise MetricObservationPersistenceError("Failed to update metric data.") from exc
        return observation

    def delete_observation(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        observation_id: int,
    ) -> None:
        repository = MetricObservationRepository(db)
        observation = repository.get_for_user(user_id=owner_id, observation_id=observation_id)
        if observation is None:
            raise MetricObservationNotFoundError(observation_id)

        try:
            repository.delete(observation)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise MetricObservationPersistenceError("Failed to delete metric data.") from exc

        logger.info("Manual metric deleted owner=%s observation=%s", owner_id, observation_id)


@lru_cache(maxsize=1)
def get_manual_input_service() -> ManualInputService:
    return ManualInputService()
