# -*- coding: utf-8 -*-
"""Account — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..glycemia.models import GlycemicValues
from ..recipes.models import Recipe


class UserProfile(BaseModel):
    name: str = Field("", max_length=120)
    image: Optional[str] = None


class AppSettings(BaseModel):
    weight: str = ""
    glycemie_high: str = ""
    glycemie_low: str = ""
    pathologies: List[str] = []
    diets: List[str] = []
    has_step_goal: bool = False
    step_goal: str = "8000"
    has_reminders: bool = False


class Challenge(BaseModel):
    id: int
    description: str


class DashboardResponse(BaseModel):
    greeting_name: str
    challenge: Optional[Challenge] = None
    recommended_recipes: List[Recipe] = []
    glycemic_values: GlycemicValues
