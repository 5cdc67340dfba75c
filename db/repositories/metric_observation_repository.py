"""
Repository for metric observation writes and owner-scoped lookups.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.metric_observation import MetricObservation, ObservationSource


class MetricObservationRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self,
        *,
        user_id: uuid.UUID,
        metric_id: str,
        value: str,
        date: datetime,
        source: str = ObservationSource.MANUAL,
        upload_id: uuid.UUID | None = None,
        notes: str | None = None,
    ) -> MetricObservation:
        observation = MetricObservation(
            user_id=user_id,
            metric_id=metric_id,
            value=value,
            date=date,
            notes=notes,
            source=source,
            upload_id=upload_id,
        )
        self._session.add(observation)
        self._session.flush()
        return observation

    def get_for_user(
        self,
        *,
        user_id: uuid.UUID,
        observation_id: int,
    ) -> MetricObservation | None:
        stmt = select(MetricObservation).where(
            MetricObservation.id == observation_id,
            MetricObservation.user_id == user_id,
        )
        return self._session.scalars(stmt).first()

    def list_for_user(
        self,
        *,
        user_id: uuid.UUID,
        metric_id: str | None = None,
        limit: int = 100,
    ) -> list[MetricObservation]:
        stmt: Select[tuple[MetricObservation]] = select(MetricObservation).where(
            MetricObservation.user_id == user_id
        )
        if metric_id:
            stmt = stmt.where(MetricObservation.metric_id == metric_id)

        stmt = stmt.order_by(MetricObservation.date.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def list_for_upload(self, upload_id: uuid.UUID) -> list[MetricObservation]:
        stmt = (
            select(MetricObservation)
            .where(MetricObservation.upload_id == upload_id)
            .order_by(MetricObservation.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def delete(self, observation: MetricObservation) -> None:
        self._session.delete(observation)
        self._session.flush()
