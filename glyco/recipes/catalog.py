# -*- coding: utf-8 -*-
"""Recipes — packaged catalog, search and filters."""

from __future__ import annotations

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from .models import Recipe, RecipeFilters

DEFAULT_RECIPES_PATH = Path(__file__).resolve().parent / "data" / "recipes.json"

_HOURS_RE = re.compile(r"(\d+)\s*h", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+")


@lru_cache(maxsize=2)
def load_recipes(path: Path = DEFAULT_RECIPES_PATH) -> Tuple[Recipe, ...]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return tuple(Recipe.model_validate(item) for item in raw)


def get_recipe(recipe_id: str, recipes: Optional[List[Recipe]] = None) -> Optional[Recipe]:
    for recipe in recipes if recipes is not None else load_recipes():
        if recipe.id == recipe_id:
            return recipe
    return None


def duration_minutes(time_label: str) -> Optional[int]:
    """Minutes in labels such as ``"15 Min"``, ``"1h30"`` or ``"45"``."""
    text = (time_label or "").strip()
    if not text:
        return None
    hours = _HOURS_RE.search(text)
    if hours:
        rest = text[hours.end():]
        extra = _NUMBER_RE.search(rest)
        return int(hours.group(1)) * 60 + (int(extra.group(0)) if extra else 0)
    minutes = _NUMBER_RE.search(text)
    return int(minutes.group(0)) if minutes else None


def duration_bucket(time_label: str) -> Optional[str]:
    minutes = duration_minutes(time_label)
    if minutes is None:
        return None
    if minutes <= 15:
        return "~ 15 min"
    if minutes <= 30:
        return "~ 30 min"
    return "> 30 min"


def _matches_any(selected: List[str], values: List[str]) -> bool:
    return not selected or any(v in values for v in selected)


def matches(recipe: Recipe, filters: RecipeFilters) -> bool:
    query = (filters.query or "").strip().lower()
    if query and query not in recipe.title.lower() and not any(query in i.lower() for i in recipe.ingredients):
        return False
    if filters.duration and duration_bucket(recipe.time) != filters.duration:
        return False
    return (
        _matches_any(filters.meal_type, recipe.meal_type)
        and _matches_any(filters.cuisine_style, recipe.cuisine_style)
        and _matches_any(filters.diet, recipe.diet)
    )


def search_recipes(filters: RecipeFilters, recipes: Optional[List[Recipe]] = None) -> List[Recipe]:
    pool = recipes if recipes is not None else load_recipes()
    return [r for r in pool if matches(r, filters)]
