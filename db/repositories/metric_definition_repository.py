"""
Repository for the metric catalog.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.metric_definition import MetricDefinition


class MetricDefinitionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[MetricDefinition]:
        stmt = select(MetricDefinition).order_by(
            MetricDefinition.category.asc(),
            MetricDefinition.id.asc(),
        )
        return list(self._session.scalars(stmt).all())

    def get_by_metric_id(self, metric_id: str) -> MetricDefinition | None:
        stmt = select(MetricDefinition).where(MetricDefinition.metric_id == metric_id)
        return self._session.scalars(stmt).first()

    def insert_missing(self, definitions: Iterable[Mapping[str, Any]]) -> int:
        """
        Insert catalog entries whose metric_id is not present yet.

        Returns the number of rows added. Existing entries are left untouched.
        """

        existing = set(self._session.scalars(select(MetricDefinition.metric_id)).all())
        inserted = 0
        for definition in definitions:
            metric_id = definition["metric_id"]
            if metric_id in existing:
                continue
            self._session.add(MetricDefinition(**definition))
            existing.add(metric_id)
            inserted += 1
        self._session.flush()
        return inserted
