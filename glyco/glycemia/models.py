# -*- coding: utf-8 -*-
"""Glycemia — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

READING_MIN_MG_DL = 20
READING_MAX_MG_DL = 600


class GlycemicValues(BaseModel):
    """Dashboard snapshot shown on the home screen (mg/dL)."""

    before_meal: float = Field(78, ge=0, le=300)
    after_meal: float = Field(105, ge=0, le=300)
    max: float = Field(130, ge=0, le=300, description="Target not to exceed")


class SnapshotField(str, Enum):
    before_meal = "before_meal"
    after_meal = "after_meal"


class GlycemicValueUpdate(BaseModel):
    field: SnapshotField
    value: float


class ReadingContext(str, Enum):
    fasting = "fasting"
    before_meal = "before_meal"
    after_meal = "after_meal"
    bedtime = "bedtime"
    other = "other"


class GlycemicReadingCreate(BaseModel):
    measured_at: Optional[str] = Field(None, description="ISO8601 timestamp, defaults to now")
    value_mg_dl: float = Field(..., ge=READING_MIN_MG_DL, le=READING_MAX_MG_DL)
    context: ReadingContext = ReadingContext.other
    notes: Optional[str] = Field(None, max_length=2000)


class GlycemicReading(BaseModel):
    reading_id: str
    created_at: str
    measured_at: str
    value_mg_dl: float
    context: ReadingContext = ReadingContext.other
    notes: Optional[str] = None


class GlycemicReadingsResponse(BaseModel):
    count: int
    readings: List[GlycemicReading]


class GlycemicDailySummary(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    min: float
    max: float
    avg: float
    count: int = Field(0, ge=0)
    above_target: int = Field(0, ge=0, description="Readings above the snapshot max")


class GlycemicSummaryResponse(BaseModel):
    start: str
    end: str
    target_max: float
    days: List[GlycemicDailySummary]
