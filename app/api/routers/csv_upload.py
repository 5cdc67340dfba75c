"""
app/api/routers/csv_upload.py

CSV metric upload HTTP endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import (
    UploadedFile,
    get_authenticated_owner_id,
    get_column_mapping,
    get_owner_id,
    read_uploaded_file,
)
from app.schemas.metric_upload import (
    CSVUploadResponse,
    DataUploadListResponse,
    DataUploadResponse,
    DuplicateUploadResponse,
)
from app.services.csv_upload_service import (
    CSVUploadService,
    DuplicateUploadError,
    EmptyOrInvalidFileError,
    UploadPersistenceError,
    get_csv_upload_service,
)
from db.session import get_db

router = APIRouter(prefix="/data", tags=["data"])


@router.post(
    "/upload-csv",
    response_model=CSVUploadResponse,
    response_model_exclude_none=True,
)
def upload_csv(
    owner_id: uuid.UUID = Depends(get_owner_id),
    uploaded: UploadedFile = Depends(read_uploaded_file),
    column_mapping: dict[str, str] = Depends(get_column_mapping),
    db: Session = Depends(get_db),
    upload_service: CSVUploadService = Depends(get_csv_upload_service),
) -> CSVUploadResponse:
    """
    Ingest one CSV file into metric observations.

    Row-level problems do not fail the request; they are reported in
    `errors` alongside the counts.
    """

    try:
        result = upload_service.submit_upload(
            db=db,
            owner_id=owner_id,
            content=uploaded.content,
            file_name=uploaded.file_name,
            file_size=uploaded.file_size,
            column_mapping=column_mapping,
        )
    except DuplicateUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DuplicateUploadResponse(error=str(exc), upload_id=exc.upload_id).model_dump(
                mode="json",
                by_alias=True,
            ),
        ) from exc
    except EmptyOrInvalidFileError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except UploadPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to record the upload.",
        ) from exc

    return CSVUploadResponse(
        upload_id=result.upload_id,
        rows_processed=result.rows_processed,
        rows_failed=result.rows_failed,
        errors=result.errors or None,
    )


@router.get("/uploads", response_model=DataUploadListResponse)
def list_uploads(
    owner_id: uuid.UUID = Depends(get_authenticated_owner_id),
    db: Session = Depends(get_db),
    upload_service: CSVUploadService = Depends(get_csv_upload_service),
) -> DataUploadListResponse:
    """
    List the caller's uploads, oldest first. Requires an X-User-Id header.
    """

    uploads = upload_service.list_uploads(db=db, owner_id=owner_id)
    return DataUploadListResponse(
        uploads=[DataUploadResponse.model_validate(upload) for upload in uploads],
    )
