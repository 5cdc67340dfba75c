"""
db/models/user_profile.py

User profile model: the tenant that owns uploads and metric observations.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, PortableJSON, TimestampMixin

if TYPE_CHECKING:
    from db.models.data_upload import DataUpload
    from db.models.metric_observation import MetricObservation


class UserProfile(Base, TimestampMixin):
    """
    One organization (or individual) tracking impact metrics.

    external_user_id is the identity issued by the authentication provider;
    the API resolves requests to a profile through it.
    """

    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    external_user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Identity issued by the authentication provider",
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="individual, nonprofit, enterprise",
    )

    selected_profile: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Dashboard template: education, food, esg, custom",
    )

    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)

    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    custom_metrics: Mapped[list[str] | None] = mapped_column(
        PortableJSON,
        nullable=True,
        comment="Metric ids selected for the custom dashboard",
    )

    data_input_method: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="manual, csv, both",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    uploads: Mapped[list["DataUpload"]] = relationship(
        "DataUpload",
        back_populates="user",
        passive_deletes=True,
    )

    observations: Mapped[list["MetricObservation"]] = relationship(
        "MetricObservation",
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} external_user_id={self.external_user_id!r}>"
