"""
db/models/metric_definition.py

Catalog of metrics organizations can track.
"""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class MetricDataType:
    NUMBER = "number"
    PERCENTAGE = "percentage"
    TEXT = "text"


class MetricDefinition(Base):
    __tablename__ = "available_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metric_id: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    metric_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="education, human_constitution, food, environmental, social, governance",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    data_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MetricDataType.NUMBER,
    )
    is_available_for_custom: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<MetricDefinition metric_id={self.metric_id!r} category={self.category!r}>"
