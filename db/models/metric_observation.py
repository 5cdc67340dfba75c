"""
db/models/metric_observation.py

Metric observation: one value for one metric, for one tenant, on one date.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.data_upload import DataUpload
    from db.models.user_profile import UserProfile


class ObservationSource:
    MANUAL = "manual"
    CSV = "csv"
    API = "api"


class MetricObservation(Base, TimestampMixin):
    """
    Append-only time series entry.

    metric_id is deliberately not a foreign key to the metric catalog:
    uploads may reference metric ids the catalog does not know.
    (user_id, metric_id, date) is not unique.
    """

    __tablename__ = "custom_metric_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )

    metric_id: Mapped[str] = mapped_column(String(120), nullable=False)

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Raw value; interpreted per the metric's declared data type",
    )

    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    source: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ObservationSource.MANUAL,
        comment="manual, csv, api",
    )

    upload_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("data_uploads.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    user: Mapped["UserProfile"] = relationship(
        "UserProfile",
        back_populates="observations",
    )

    upload: Mapped[Optional["DataUpload"]] = relationship(
        "DataUpload",
        back_populates="observations",
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_custom_metric_data_user_metric_date", "user_id", "metric_id", "date"),
        Index("ix_custom_metric_data_upload_id", "upload_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<MetricObservation id={self.id} metric_id={self.metric_id!r} "
            f"date={self.date} source={self.source!r}>"
        )
