"""
app/validators package marker.
"""

from app.validators.csv_validator import (
    CSVRowValidator,
    RowDateError,
    parse_observation_date,
)

__all__ = [
    "CSVRowValidator",
    "RowDateError",
    "parse_observation_date",
]
