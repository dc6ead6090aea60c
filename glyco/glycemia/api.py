# -*- coding: utf-8 -*-
"""Glycemia — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from .models import (
    GlycemicReading,
    GlycemicReadingCreate,
    GlycemicReadingsResponse,
    GlycemicSummaryResponse,
    GlycemicValues,
    GlycemicValueUpdate,
)
from .storage import (
    SnapshotRangeError,
    daily_summary,
    delete_reading,
    get_values,
    list_readings,
    record_reading,
    update_value,
)

router = APIRouter(prefix="/api/glycemia", tags=["Glycemia"])


@router.get("/values", response_model=GlycemicValues, summary="Dashboard glycemic snapshot")
def read_values(user: dict = Depends(get_current_user)):
    return get_values(user["id"])


@router.put("/values", response_model=GlycemicValues, summary="Update one snapshot value")
def write_value(request: GlycemicValueUpdate, user: dict = Depends(get_current_user)):
    try:
        return update_value(user["id"], request.field.value, request.value)
    except SnapshotRangeError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc


@router.post("/readings", response_model=GlycemicReading, summary="Log a glycemic measurement")
def create_reading(request: GlycemicReadingCreate, user: dict = Depends(get_current_user)):
    try:
        return record_reading(user["id"], request)
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save reading: {exc}") from exc


@router.get("/readings", response_model=GlycemicReadingsResponse, summary="List glycemic measurements")
def read_readings(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: dict = Depends(get_current_user),
):
    readings = list_readings(user["id"], start=start, end=end)
    return GlycemicReadingsResponse(count=len(readings), readings=readings[offset : offset + limit])


@router.delete("/readings/{reading_id}", summary="Delete a glycemic measurement")
def remove_reading(reading_id: str, user: dict = Depends(get_current_user)):
    if not delete_reading(user["id"], reading_id):
        raise HTTPException(status_code=404, detail="Reading not found")
    return {"status": "ok"}


@router.get("/summary", response_model=GlycemicSummaryResponse, summary="Daily glycemia summary")
def summary(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    return GlycemicSummaryResponse(**daily_summary(user["id"], start=start, end=end))
