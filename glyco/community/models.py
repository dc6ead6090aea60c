# -*- coding: utf-8 -*-
"""Community — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class RecipeCategory(str, Enum):
    savory = "Salé"
    sweet = "Sucré"


class Author(BaseModel):
    name: str = "Utilisateur"
    avatar: Optional[str] = None


class Comment(BaseModel):
    id: str
    text: str
    author: str = "Utilisateur"
    date: str = Field(..., description="YYYY-MM-DD")


class StepInput(BaseModel):
    title: str = ""
    text: str = ""


class Step(BaseModel):
    step: int = Field(..., ge=1)
    title: str = ""
    text: str = ""


class CommunityRecipeCreate(BaseModel):
    title: str = Field("", max_length=200)
    image: str = Field("", description="URL returned by POST /upload")
    time: Union[str, int] = Field("", description="Preparation time in minutes")
    servings: int = Field(2, ge=1, le=50)
    description: str = Field("", max_length=4000)
    carbs: Union[str, int, None] = None
    category: RecipeCategory = RecipeCategory.savory
    ingredients: List[str] = []
    instructions: List[StepInput] = []
    tips: List[str] = []


class CommunityRecipe(BaseModel):
    id: str
    title: str
    image: str
    time: str
    servings: int = 2
    description: str = ""
    carbs: str = ""
    category: RecipeCategory = RecipeCategory.savory
    ingredients: List[str] = []
    instructions: List[Step] = []
    tips: List[str] = []
    likes: int = Field(0, ge=0)
    liked_by: List[str] = []
    comments: List[Comment] = []
    author: Author = Author()
    owner_id: str = ""
    created_at: str


class CommunityRecipeListResponse(BaseModel):
    count: int
    recipes: List[CommunityRecipe]


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=2000)


class LikeResponse(BaseModel):
    recipe_id: str
    liked: bool
    likes: int
