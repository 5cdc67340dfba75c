"""
app/services/csv_upload_service.py

Service layer for CSV metric uploads.

An upload is accepted once per distinct byte content. Accepted files are
recorded in the upload ledger, then every data row is turned into metric
observations, one per non-empty mapped column. Rows are independent: a bad
row is logged against the upload and counted, and processing moves on.

Transaction contract:
  - The ledger row is committed before any row is processed.
  - Each observation insert is committed on its own. A failing row keeps
    whatever observations it had already written.
  - The final status update is a separate commit. If it fails the ledger row
    stays in `processing`.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from collections.abc import Mapping
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_csv_upload_settings
from app.domain.metric_upload import ParsedCSV, RowFailure, UploadResult
from app.validators.csv_validator import CSVRowValidator
from db.models.data_upload import DataUpload
from db.models.metric_observation import ObservationSource
from db.repositories.data_upload_repository import DataUploadRepository
from db.repositories.metric_observation_repository import MetricObservationRepository

logger = logging.getLogger(__name__)

_UNKNOWN_ROW_ERROR = "Unknown error"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVUploadError(Exception):
    """
    Base exception for CSV upload failures surfaced to the caller.
    """


class DuplicateUploadError(CSVUploadError):
    """
    Raised when byte-identical content has already been ingested.
    """

    def __init__(self, upload_id: uuid.UUID) -> None:
        super().__init__("This file has already been uploaded")
        self.upload_id = upload_id


class EmptyOrInvalidFileError(CSVUploadError):
    """
    Raised when the file has no header or no data rows, or is not UTF-8.
    """


class UploadPersistenceError(CSVUploadError):
    """
    Raised when the upload ledger cannot be written.
    """


def compute_content_digest(content: bytes) -> str:
    """
    Return the SHA-256 hex digest used as the upload's natural key.
    """

    return hashlib.sha256(content).hexdigest()


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVUploadService:
    """
    Coordinates duplicate detection, parsing, row ingestion and the ledger.
    """

    def __init__(
        self,
        *,
        max_returned_errors: int,
        log_row_errors: bool,
        validator: CSVRowValidator | None = None,
    ) -> None:
        self._max_returned_errors = max(1, max_returned_errors)
        self._log_row_errors = log_row_errors
        self._validator = validator or CSVRowValidator()

    def submit_upload(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        content: bytes,
        file_name: str,
        file_size: int,
        column_mapping: Mapping[str, str],
    ) -> UploadResult:
        """
        Ingest one CSV file for one owner.

        Args:
            db:              Active SQLAlchemy session (caller owns lifecycle).
            owner_id:        User profile id the observations are recorded for.
            content:         Raw file bytes; the digest is taken over these.
            file_name:       Declared file name, stored on the ledger row.
            file_size:       Declared byte size, stored on the ledger row.
            column_mapping:  Header cell → metric id. Not checked against the
                             metric catalog.

        Raises:
            DuplicateUploadError:     the same bytes were ingested before.
            EmptyOrInvalidFileError:  no header plus data row, or not UTF-8.
            UploadPersistenceError:   the ledger row could not be written.
        """

        digest = compute_content_digest(content)
        uploads = DataUploadRepository(db)

        existing = uploads.get_by_hash(digest)
        if existing is not None:
            logger.info(
                "Duplicate CSV upload rejected owner=%s file=%r existing_upload=%s",
                owner_id,
                file_name,
                existing.id,
            )
            raise DuplicateUploadError(existing.id)

        parsed = self._parse(content)

        upload_id = self._create_upload_record(
            db=db,
            uploads=uploads,
            owner_id=owner_id,
            digest=digest,
            file_name=file_name,
            file_size=file_size,
            column_mapping=column_mapping,
        )
        logger.info(
            "CSV upload accepted upload=%s owner=%s file=%r rows=%d mapped_columns=%d",
            upload_id,
            owner_id,
            file_name,
            len(parsed.records),
            len(column_mapping),
        )

        rows_processed = 0
        failures: list[RowFailure] = []
        observations = MetricObservationRepository(db)

        for row_number, record in enumerate(parsed.records, start=2):
            try:
                self._ingest_row(
                    db=db,
                    observations=observations,
                    owner_id=owner_id,
                    upload_id=upload_id,
                    headers=parsed.headers,
                    record=record,
                    column_mapping=column_mapping,
                )
            except Exception as exc:  # noqa: BLE001
                db.rollback()
                self._record_failure(
                    failures,
                    RowFailure(row_number=row_number, message=str(exc) or _UNKNOWN_ROW_ERROR),
                    upload_id=upload_id,
                )
                continue
            rows_processed += 1

        error_log = [str(failure) for failure in failures]
        try:
            uploads.mark_completed(
                upload_id=upload_id,
                rows_processed=rows_processed,
                rows_failed=len(failures),
                error_log=error_log,
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise UploadPersistenceError("Failed to finalize upload record.") from exc

        logger.info(
            "CSV upload completed upload=%s rows_processed=%d rows_failed=%d",
            upload_id,
            rows_processed,
            len(failures),
        )

        return UploadResult(
            upload_id=upload_id,
            rows_processed=rows_processed,
            rows_failed=len(failures),
            errors=error_log[: self._max_returned_errors],
        )

    def list_uploads(self, *, db: Session, owner_id: uuid.UUID) -> list[DataUpload]:
        """
        Return every upload of one owner, oldest first.
        """

        return DataUploadRepository(db).list_for_user(owner_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse(self, content: bytes) -> ParsedCSV:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise EmptyOrInvalidFileError("CSV must be UTF-8 encoded.") from exc

        parsed = self._validator.parse(text)
        if not parsed.headers or not parsed.records:
            raise EmptyOrInvalidFileError("CSV file is empty or invalid")
        return parsed

    def _create_upload_record(
        self,
        *,
        db: Session,
        uploads: DataUploadRepository,
        owner_id: uuid.UUID,
        digest: str,
        file_name: str,
        file_size: int,
        column_mapping: Mapping[str, str],
    ) -> uuid.UUID:
        try:
            upload = uploads.create_processing(
                user_id=owner_id,
                file_name=file_name,
                file_size=file_size,
                file_hash=digest,
                metrics_mapped=column_mapping,
            )
            upload_id = upload.id
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            # A concurrent submission of the same bytes won the unique digest.
            winner = uploads.get_by_hash(digest)
            if winner is not None:
                logger.info(
                    "Duplicate CSV upload rejected by storage owner=%s existing_upload=%s",
                    owner_id,
                    winner.id,
                )
                raise DuplicateUploadError(winner.id) from exc
            raise UploadPersistenceError("Failed to create upload record.") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise UploadPersistenceError("Failed to create upload record.") from exc
        return upload_id

    def _ingest_row(
        self,
        *,
        db: Session,
        observations: MetricObservationRepository,
        owner_id: uuid.UUID,
        upload_id: uuid.UUID,
        headers: tuple[str, ...],
        record: str,
        column_mapping: Mapping[str, str],
    ) -> None:
        row = self._validator.split_row(record, headers)
        row_date = self._validator.resolve_date(row)

        for column, metric_id in column_mapping.items():
            value = row.get(column)
            if not value:
                continue
            observations.add(
                user_id=owner_id,
                metric_id=metric_id,
                value=value,
                date=row_date,
                source=ObservationSource.CSV,
                upload_id=upload_id,
            )
            db.commit()

    def _record_failure(
        self,
        failures: list[RowFailure],
        failure: RowFailure,
        *,
        upload_id: uuid.UUID,
    ) -> None:
        if self._log_row_errors:
            logger.warning(
                "CSV row failed upload=%s row=%s message=%s",
                upload_id,
                failure.row_number,
                failure.message,
            )
        failures.append(failure)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_upload_service() -> CSVUploadService:
    """
    Build and cache the upload service with env-driven settings.
    """

    settings = get_csv_upload_settings()
    return CSVUploadService(
        max_returned_errors=settings.max_returned_errors,
        log_row_errors=settings.log_row_errors,
    )
