"""
app/api/routers/manual_input.py

Manual metric entry endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_owner_id
from app.schemas.manual_input import (
    ManualInputCreateRequest,
    ManualInputUpdateRequest,
    MetricObservationEnvelope,
    MetricObservationListResponse,
    MetricObservationResponse,
    SuccessResponse,
)
from app.services.manual_input_service import (
    ManualInputService,
    MetricInputValidationError,
    MetricObservationNotFoundError,
    MetricObservationPersistenceError,
    get_manual_input_service,
)
from db.session import get_db

router = APIRouter(prefix="/data/manual-input", tags=["data"])


def _persistence_failure(exc: MetricObservationPersistenceError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.post("", response_model=MetricObservationEnvelope)
def create_manual_input(
    body: ManualInputCreateRequest,
    owner_id: uuid.UUID = Depends(get_owner_id),
    db: Session = Depends(get_db),
    service: ManualInputService = Depends(get_manual_input_service),
) -> MetricObservationEnvelope:
    try:
        observation = service.create_observation(
            db=db,
            owner_id=owner_id,
            metric_id=body.metric_id,
            value=body.value,
            date=body.date,
            notes=body.notes,
        )
    except MetricInputValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except MetricObservationPersistenceError as exc:
        raise _persistence_failure(exc) from exc

    return MetricObservationEnvelope(data=MetricObservationResponse.model_validate(observation))


@router.get("", response_model=MetricObservationListResponse)
def list_manual_input(
    metric_id: str | None = Query(default=None, alias="metricId"),
    limit: int = Query(default=100, ge=1, le=1000),
    owner_id: uuid.UUID = Depends(get_owner_id),
    db: Session = Depends(get_db),
    service: ManualInputService = Depends(get_manual_input_service),
) -> MetricObservationListResponse:
    """
    List the caller's observations, newest date first.
    """

    observations = service.list_observations(
        db=db,
        owner_id=owner_id,
        metric_id=metric_id,
        limit=limit,
    )
    return MetricObservationListResponse(
        data=[MetricObservationResponse.model_validate(item) for item in observations],
    )


@router.put("", response_model=MetricObservationEnvelope)
def update_manual_input(
    body: ManualInputUpdateRequest,
    owner_id: uuid.UUID = Depends(get_owner_id),
    db: Session = Depends(get_db),
    service: ManualInputService = Depends(get_manual_input_service),
) -> MetricObservationEnvelope:
    if body.id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing metric data ID",
        )

    try:
        observation = service.update_observation(
            db=db,
            owner_id=owner_id,
            observation_id=body.id,
            value=body.value,
            notes=body.notes,
        )
    except MetricObservationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except MetricObservationPersistenceError as exc:
        raise _persistence_failure(exc) from exc

    return MetricObservationEnvelope(data=MetricObservationResponse.model_validate(observation))


@router.delete("", response_model=SuccessResponse)
def delete_manual_input(
    observation_id: int | None = Query(default=None, alias="id"),
    owner_id: uuid.UUID = Depends(get_owner_id),
    db: Session = Depends(get_db),
    service: ManualInputService = Depends(get_manual_input_service),
) -> SuccessResponse:
    if observation_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing metric data ID",
        )

    try:
        service.delete_observation(db=db, owner_id=owner_id, observation_id=observation_id)
    except MetricObservationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except MetricObservationPersistenceError as exc:
        raise _persistence_failure(exc) from exc

    return SuccessResponse()
