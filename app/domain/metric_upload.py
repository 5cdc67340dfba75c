"""
app/domain/metric_upload.py

Domain models used by the CSV metric upload flow.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ParsedCSV:
    """
    Header plus raw data records of a delimited text file.

    Records are kept unsplit so each row is split inside its own failure
    boundary during ingestion.
    """

    headers: tuple[str, ...]
    records: tuple[str, ...]


@dataclass(frozen=True)
class RowFailure:
    """
    One failed data row. row_number counts the header as row 1.
    """

    row_number: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.message}"


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of one accepted upload, as returned to the caller.
    """

    upload_id: uuid.UUID
    rows_processed: int
    rows_failed: int
    errors: list[str] = field(default_factory=list)
