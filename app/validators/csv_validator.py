"""
app/validators/csv_validator.py

Record splitting and date resolution for CSV metric uploads.

The splitter is intentionally naive: records are separated by newlines and
fields by commas, with no quoting or escaping. A field that contains the
delimiter shifts every following field of its row one column to the right.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from app.domain.metric_upload import ParsedCSV

RECORD_DELIMITER = "\n"
FIELD_DELIMITER = ","

DATE_COLUMNS: tuple[str, ...] = ("date", "Date", "DATE")

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
)

DATE_COLUMN_NOT_FOUND = "Date column not found"


class RowDateError(ValueError):
    """
    Raised when a data row carries no usable date.
    """


def parse_observation_date(raw: str) -> datetime | None:
    """
    Parse a calendar date or timestamp into a timezone-aware datetime.

    ISO-8601 values are tried first (a trailing ``Z`` means UTC), then the
    explicit DATE_FORMATS. Naive values are read as UTC. Returns None when
    nothing matches.
    """

    value = raw.strip()
    if not value:
        return None

    normalized = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        parsed = None

    if parsed is None:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CSVRowValidator:
    """
    Splits raw upload text into records and data rows into header-aligned cells.
    """

    def __init__(
        self,
        *,
        field_delimiter: str = FIELD_DELIMITER,
        date_columns: tuple[str, ...] = DATE_COLUMNS,
    ) -> None:
        self._field_delimiter = field_delimiter
        self._date_columns = date_columns

    def parse(self, text: str) -> ParsedCSV:
        """
        Split text into a header and data records.

        Records that are blank after stripping are dropped before anything
        else, so they neither count as rows nor shift row numbers. An input
        with no records yields an empty header.
        """

        records = [line for line in text.split(RECORD_DELIMITER) if line.strip()]
        if not records:
            return ParsedCSV(headers=(), records=())

        headers = tuple(self._split_fields(records[0]))
        return ParsedCSV(headers=headers, records=tuple(records[1:]))

    def split_row(self, record: str, headers: tuple[str, ...]) -> dict[str, str]:
        """
        Align one data record with the header by position.

        Missing trailing fields become empty strings and surplus fields are
        dropped. With duplicate header names the right-most column wins.
        """

        values = self._split_fields(record)
        row: dict[str, str] = {}
        for index, header in enumerate(headers):
            row[header] = values[index] if index < len(values) else ""
        return row

    def resolve_date(self, row: Mapping[str, str]) -> datetime:
        """
        Return the row's observation date.

        The first non-empty value among the date columns is used.
        Raises RowDateError with the message recorded against the row.
        """

        raw_date = next(
            (row[column] for column in self._date_columns if row.get(column)),
            None,
        )
        if raw_date is None:
            raise RowDateError(DATE_COLUMN_NOT_FOUND)

        parsed = parse_observation_date(raw_date)
        if parsed is None:
            raise RowDateError(f"Invalid date format: {raw_date}")
        return parsed

    def _split_fields(self, record: str) -> list[str]:
        return [field.strip() for field in record.split(self._field_delimiter)]
