# -*- coding: utf-8 -*-
"""Community — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..account.storage import display_name, get_profile
from ..auth.security import get_current_user
from .models import (
    Author,
    CommentCreate,
    CommunityRecipe,
    CommunityRecipeCreate,
    CommunityRecipeListResponse,
    LikeResponse,
)
from .storage import add_comment, create_recipe, delete_recipe, get_recipe, list_recipes, toggle_like

router = APIRouter(prefix="/api/community/recipes", tags=["Community"])


def _get_or_404(recipe_id: str) -> CommunityRecipe:
    recipe = get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@router.get("", response_model=CommunityRecipeListResponse, summary="Community feed, newest first")
def read_feed(user: dict = Depends(get_current_user)):  # noqa: ARG001
    recipes = list_recipes()
    return CommunityRecipeListResponse(count=len(recipes), recipes=recipes)


@router.post("", response_model=CommunityRecipe, summary="Publish a recipe")
def publish(request: CommunityRecipeCreate, user: dict = Depends(get_current_user)):
    profile = get_profile(user)
    author = Author(name=profile.name or display_name(user), avatar=profile.image)
    try:
        return create_recipe(request, owner_id=user["id"], author=author)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{recipe_id}", response_model=CommunityRecipe, summary="Community recipe detail")
def read_recipe(recipe_id: str, user: dict = Depends(get_current_user)):  # noqa: ARG001
    return _get_or_404(recipe_id)


@router.post("/{recipe_id}/like", response_model=LikeResponse, summary="Like or unlike a recipe")
def like(recipe_id: str, user: dict = Depends(get_current_user)):
    recipe = toggle_like(recipe_id, user["email"])
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return LikeResponse(recipe_id=recipe.id, liked=user["email"] in recipe.liked_by, likes=recipe.likes)


@router.post("/{recipe_id}/comments", response_model=CommunityRecipe, summary="Comment on a recipe")
def comment(recipe_id: str, request: CommentCreate, user: dict = Depends(get_current_user)):
    try:
        recipe = add_comment(recipe_id, request.text, display_name(user))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@router.delete("/{recipe_id}", summary="Delete one of your recipes")
def remove(recipe_id: str, user: dict = Depends(get_current_user)):
    recipe = _get_or_404(recipe_id)
    if recipe.owner_id != user["id"]:
        raise HTTPException(status_code=403, detail="Only the author can delete this recipe")
    delete_recipe(recipe_id)
    return {"status": "ok"}
