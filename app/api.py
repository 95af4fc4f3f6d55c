"""HTTP route definitions for the temperature log."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import CreateSampleRequest, DayReadings, Sample, Stats
from services.errors import NotFoundError, ValidationError
from services.temperatures import TemperatureService, build_default_service

router = APIRouter()


def get_service() -> TemperatureService:
    return build_default_service()


@router.get(
    "/api/temperatures",
    response_model=List[Sample],
    summary="List the most recent samples, oldest first.",
)
def list_recent_temperatures(
    limit: Optional[int] = Query(
        None, ge=1, description="Number of samples to return (defaults to 100)."
    ),
    service: TemperatureService = Depends(get_service),
) -> List[Sample]:
    try:
        return service.list_recent(limit)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get(
    "/api/temperatures/{day}",
    response_model=DayReadings,
    summary="List every sample recorded on a calendar date.",
)
def list_temperatures_for_date(
    day: date,
    service: TemperatureService = Depends(get_service),
) -> DayReadings:
    return service.list_for_date(day)


@router.post(
    "/api/temperatures",
    status_code=status.HTTP_201_CREATED,
    response_model=Sample,
    summary="Record a new temperature sample stamped with the current time.",
)
def create_temperature(
    payload: CreateSampleRequest,
    service: TemperatureService = Depends(get_service),
) -> Sample:
    try:
        return service.add_sample(payload.value)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get(
    "/api/stats/{day}",
    response_model=Stats,
    summary="Count, average, extrema and first/last samples for a calendar date.",
)
def get_stats(
    day: date,
    service: TemperatureService = Depends(get_service),
) -> Stats:
    try:
        return service.compute_stats(day)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
