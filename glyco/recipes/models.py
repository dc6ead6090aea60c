# -*- coding: utf-8 -*-
"""Recipes — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

DURATION_BUCKETS = ("~ 15 min", "~ 30 min", "> 30 min")


class InstructionStep(BaseModel):
    step: int = Field(..., ge=1)
    title: str = ""
    text: str = ""


class Recipe(BaseModel):
    id: str
    title: str
    image: str = ""
    time: str = ""
    servings: int = Field(4, ge=1)
    description: str = ""
    carbs: str = ""
    proteins: Optional[str] = None
    calories: Optional[str] = None
    fat: Optional[str] = None
    ingredients: List[str] = []
    instructions: List[InstructionStep] = []
    tips: List[str] = []
    category: Optional[str] = None
    meal_type: List[str] = []
    cuisine_style: List[str] = []
    diet: List[str] = []


class RecipeFilters(BaseModel):
    query: Optional[str] = None
    duration: Optional[str] = Field(None, description="One of '~ 15 min', '~ 30 min', '> 30 min'")
    meal_type: List[str] = []
    cuisine_style: List[str] = []
    diet: List[str] = []


class RecipeListResponse(BaseModel):
    count: int
    recipes: List[Recipe]


class FavoriteToggleResponse(BaseModel):
    recipe_id: str
    favorite: bool
    favorites: List[str] = []
