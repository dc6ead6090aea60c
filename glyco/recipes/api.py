# -*- coding: utf-8 -*-
"""Recipes — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from .catalog import get_recipe, load_recipes, search_recipes
from .models import DURATION_BUCKETS, FavoriteToggleResponse, Recipe, RecipeFilters, RecipeListResponse
from .storage import get_favorites, toggle_favorite

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])


@router.get("", response_model=RecipeListResponse, summary="Search the recipe catalog")
def list_recipes(
    q: str | None = Query(default=None, description="Search in titles and ingredients"),
    duration: str | None = Query(default=None, description=" | ".join(DURATION_BUCKETS)),
    meal_type: List[str] = Query(default=[]),
    cuisine_style: List[str] = Query(default=[]),
    diet: List[str] = Query(default=[]),
    user: dict = Depends(get_current_user),  # noqa: ARG001
):
    if duration and duration not in DURATION_BUCKETS:
        raise HTTPException(status_code=422, detail=f"Unknown duration filter: {duration}")
    filters = RecipeFilters(query=q, duration=duration, meal_type=meal_type, cuisine_style=cuisine_style, diet=diet)
    recipes = search_recipes(filters)
    return RecipeListResponse(count=len(recipes), recipes=recipes)


@router.get("/favorites", response_model=RecipeListResponse, summary="Favorite recipes of the user")
def list_favorites(user: dict = Depends(get_current_user)):
    favorites = set(get_favorites(user["id"]))
    recipes = [r for r in load_recipes() if r.id in favorites]
    return RecipeListResponse(count=len(recipes), recipes=recipes)


@router.get("/{recipe_id}", response_model=Recipe, summary="Recipe detail")
def read_recipe(recipe_id: str, user: dict = Depends(get_current_user)):  # noqa: ARG001
    recipe = get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@router.post("/{recipe_id}/favorite", response_model=FavoriteToggleResponse, summary="Toggle a favorite")
def favorite(recipe_id: str, user: dict = Depends(get_current_user)):
    if get_recipe(recipe_id) is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    is_favorite, favorites = toggle_favorite(user["id"], recipe_id)
    return FavoriteToggleResponse(recipe_id=recipe_id, favorite=is_favorite, favorites=favorites)
