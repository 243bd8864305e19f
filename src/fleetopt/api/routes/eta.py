"""Travel-time estimation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.eta import (
    ETAObservationRequest,
    ETAObservationResponse,
    ETAPredictionRequest,
    ETAPredictionResponse,
)
from ...services.routing.service import predict_travel_time, record_travel_time

router = APIRouter(prefix="/eta", tags=["eta"])


@router.post("/predict", response_model=ETAPredictionResponse, status_code=status.HTTP_200_OK)
def predict(payload: ETAPredictionRequest) -> ETAPredictionResponse:
    try:
        return predict_travel_time(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error predicting travel time: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to predict travel time: {str(exc)}"
        ) from exc


@router.post("/observations", response_model=ETAObservationResponse, status_code=status.HTTP_201_CREATED)
def record_observation(payload: ETAObservationRequest) -> ETAObservationResponse:
    """Record an actual travel time so later predictions blend it in."""
    try:
        return record_travel_time(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
