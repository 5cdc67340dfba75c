"""
db/models/data_upload.py

Upload ledger: one row per ingested CSV file, keyed by its content digest.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, PortableJSON, TimestampMixin, utc_now

if TYPE_CHECKING:
    from db.models.metric_observation import MetricObservation
    from db.models.user_profile import UserProfile


class UploadStatus:
    """
    Upload lifecycle: processing → completed.

    Row failures do not produce a distinct terminal state; they are reported
    through rows_failed and error_log.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"


class DataUpload(Base, TimestampMixin):
    """
    Represents one uploaded CSV file and the outcome of ingesting it.

    file_hash is the SHA-256 digest of the raw bytes. The unique constraint on
    it is what ultimately guarantees a file is never ingested twice, even when
    two identical submissions race past the application-level lookup.
    """

    __tablename__ = "data_uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)

    file_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Declared byte size of the uploaded file",
    )

    file_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hex digest of the raw file bytes",
    )

    upload_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UploadStatus.PROCESSING,
        comment="processing → completed",
    )

    metrics_mapped: Mapped[dict[str, str]] = mapped_column(
        PortableJSON,
        nullable=False,
        default=dict,
        comment="Declared column → metric id mapping",
    )

    rows_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    error_log: Mapped[list[str]] = mapped_column(
        PortableJSON,
        nullable=False,
        default=list,
        comment="Every row-level error message, untruncated",
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    user: Mapped["UserProfile"] = relationship(
        "UserProfile",
        back_populates="uploads",
    )

    observations: Mapped[list["MetricObservation"]] = relationship(
        "MetricObservation",
        back_populates="upload",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        UniqueConstraint("file_hash", name="uq_data_uploads_file_hash"),
        Index("ix_data_uploads_user_id", "user_id"),
        Index("ix_data_uploads_user_uploaded_at", "user_id", "uploaded_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<DataUpload id={self.id} file_name={self.file_name!r} "
            f"status={self.upload_status!r}>"
        )
