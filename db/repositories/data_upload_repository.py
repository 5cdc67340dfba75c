"""
Repository for the upload ledger: digest lookup, lifecycle updates, listing.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.data_upload import DataUpload, UploadStatus


class DataUploadRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, upload_id: uuid.UUID) -> DataUpload | None:
        return self._session.get(DataUpload, upload_id)

    def get_by_hash(self, file_hash: str) -> DataUpload | None:
        stmt = select(DataUpload).where(DataUpload.file_hash == file_hash).limit(1)
        return self._session.scalars(stmt).first()

    def create_processing(
        self,
        *,
        user_id: uuid.UUID,
        file_name: str,
        file_size: int,
        file_hash: str,
        metrics_mapped: Mapping[str, str],
    ) -> DataUpload:
        """
        Insert a ledger row in the `processing` state and flush it.

        The flush surfaces a digest unique-constraint violation immediately as
        an IntegrityError; the caller owns commit and rollback.
        """

        upload = DataUpload(
            user_id=user_id,
            file_name=file_name,
            file_size=file_size,
            file_hash=file_hash,
            upload_status=UploadStatus.PROCESSING,
            metrics_mapped=dict(metrics_mapped),
            rows_processed=0,
            rows_failed=0,
            error_log=[],
        )
        self._session.add(upload)
        self._session.flush()
        self._session.refresh(upload)
        return upload

    def mark_completed(
        self,
        *,
        upload_id: uuid.UUID,
        rows_processed: int,
        rows_failed: int,
        error_log: Sequence[str],
    ) -> DataUpload | None:
        upload = self.get(upload_id)
        if upload is None:
            return None
        upload.upload_status = UploadStatus.COMPLETED
        upload.rows_processed = rows_processed
        upload.rows_failed = rows_failed
        upload.error_log = list(error_log)
        return upload

    def list_for_user(self, user_id: uuid.UUID) -> list[DataUpload]:
        stmt = (
            select(DataUpload)
            .where(DataUpload.user_id == user_id)
            .order_by(DataUpload.uploaded_at.asc())
        )
        return list(self._session.scalars(stmt).all())
