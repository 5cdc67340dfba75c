"""
app/api/dependencies.py

Shared FastAPI dependencies: owner identity resolution and upload checks.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, File, Form, Header, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_csv_upload_settings, get_dev_auth_settings
from app.services.user_profile_service import UserProfileService, get_user_profile_service
from db.repositories.errors import UserProfileNotFoundError
from db.session import get_db

logger = logging.getLogger(__name__)


def get_external_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Return the caller's identity from the X-User-Id header.

    Without the header the configured development identity is used, unless
    the fallback is disabled, in which case the request is rejected.
    """

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    settings = get_dev_auth_settings()
    if not settings.fallback_enabled:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    logger.debug("No X-User-Id header; using fallback identity %r", settings.fallback_user_id)
    return settings.fallback_user_id


def require_external_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Return the caller's identity, rejecting requests without one.

    The development fallback never applies here.
    """

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id.strip()


def _resolve_owner_id(
    db: Session,
    profiles: UserProfileService,
    external_user_id: str,
) -> uuid.UUID:
    try:
        return profiles.get_profile_id(db=db, external_user_id=external_user_id)
    except UserProfileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User profile not found",
        ) from exc


def get_owner_id(
    external_user_id: str = Depends(get_external_user_id),
    db: Session = Depends(get_db),
    profiles: UserProfileService = Depends(get_user_profile_service),
) -> uuid.UUID:
    """
    Resolve the caller to the user profile that owns their metric data.
    """

    return _resolve_owner_id(db, profiles, external_user_id)


def get_authenticated_owner_id(
    external_user_id: str = Depends(require_external_user_id),
    db: Session = Depends(get_db),
    profiles: UserProfileService = Depends(get_user_profile_service),
) -> uuid.UUID:
    """
    Like get_owner_id, but only for callers that sent an identity.
    """

    return _resolve_owner_id(db, profiles, external_user_id)


@dataclass(frozen=True)
class UploadedFile:
    file_name: str
    file_size: int
    content: bytes


def read_uploaded_file(file: UploadFile = File(...)) -> UploadedFile:
    """
    Read the complete uploaded file and enforce the configured size limit.

    The content is not inspected; any bytes are handed to the pipeline as-is.
    The declared size is used when the client sent one. At most one byte past
    the limit is read, so oversized uploads are never buffered in full.
    """

    max_bytes = get_csv_upload_settings().max_upload_bytes
    too_large = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Uploaded file exceeds configured size limit.",
    )
    try:
        if file.size is not None and file.size > max_bytes:
            raise too_large
        content = file.file.read(max_bytes + 1)
    finally:
        file.file.close()
    if len(content) > max_bytes:
        raise too_large
    return UploadedFile(
        file_name=file.filename or "upload.csv",
        file_size=file.size if file.size is not None else len(content),
        content=content,
    )


def get_column_mapping(
    metric_mapping: str | None = Form(default=None, alias="metricMapping"),
) -> dict[str, str]:
    """
    Decode the metricMapping form field into a column → metric id mapping.

    A missing or blank field means no columns are mapped.
    """

    if metric_mapping is None or not metric_mapping.strip():
        return {}

    try:
        decoded = json.loads(metric_mapping)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="metricMapping must be valid JSON.",
        ) from exc

    if not isinstance(decoded, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in decoded.items()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="metricMapping must be a JSON object mapping column names to metric ids.",
        )
    return decoded
