# -*- coding: utf-8 -*-
"""Community — shared recipe feed stored as one JSON file per recipe."""

from __future__ import annotations

import json
import logging
import re
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from ..config import settings
from .models import Author, Comment, CommunityRecipe, CommunityRecipeCreate, Step

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)?")
# Likes and comments are read-modify-write on a single file.
_write_lock = threading.Lock()


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _recipes_dir() -> Path:
    return settings.data_root / "community" / "recipes"


def _safe_key(value: str) -> str:
    cleaned = re.sub(r"[^\w\-]+", "_", value.strip())
    if cleaned in {"", "_"}:
        cleaned = "unknown"
    return cleaned[:100]


def _path_for(recipe_id: str) -> Path:
    return _recipes_dir() / f"{_safe_key(recipe_id)}.json"


def _first_number(value: object) -> Optional[str]:
    match = _NUMBER_RE.search(str(value or ""))
    return match.group(0).replace(",", ".") if match else None


def normalize_time(value: object) -> str:
    """``"30"``, ``30`` or ``"30 min"`` -> ``"30 Min"``."""
    number = _first_number(value)
    if number is None:
        raise ValueError("Titre, temps et photo requis")
    return f"{number} Min"


def normalize_carbs(value: object) -> str:
    number = _first_number(value)
    return f"{number}g" if number is not None else ""


def _write(recipe: CommunityRecipe) -> None:
    fp = _path_for(recipe.id)
    fp.parent.mkdir(parents=True, exist_ok=True)
    fp.write_text(recipe.model_dump_json(indent=2), encoding="utf-8")


def create_recipe(request: CommunityRecipeCreate, *, owner_id: str, author: Author) -> CommunityRecipe:
    title = request.title.strip()
    image = request.image.strip()
    if not title or not image or not str(request.time).strip():
        raise ValueError("Titre, temps et photo requis")

    steps = [
        Step(step=i, title=s.title.strip(), text=s.text.strip())
        for i, s in enumerate((s for s in request.instructions if s.title.strip() or s.text.strip()), start=1)
    ]
    recipe = CommunityRecipe(
        id=uuid4().hex,
        title=title,
        image=image,
        time=normalize_time(request.time),
        servings=request.servings,
        description=request.description.strip(),
        carbs=normalize_carbs(request.carbs),
        category=request.category,
        ingredients=[i.strip() for i in request.ingredients if i.strip()],
        instructions=steps,
        tips=[t.strip() for t in request.tips if t.strip()],
        author=author,
        owner_id=owner_id,
        created_at=_utc_now(),
    )
    with _write_lock:
        _write(recipe)
    logger.info("Community recipe %s published by %s", recipe.id, owner_id)
    return recipe


def get_recipe(recipe_id: str) -> Optional[CommunityRecipe]:
    fp = _path_for(recipe_id)
    if not fp.exists():
        return None
    try:
        return CommunityRecipe.model_validate(json.loads(fp.read_text(encoding="utf-8")))
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable community recipe %s: %s", fp.name, exc)
        return None


def list_recipes() -> List[CommunityRecipe]:
    root = _recipes_dir()
    if not root.exists():
        return []
    recipes: List[CommunityRecipe] = []
    for fp in root.glob("*.json"):
        try:
            recipes.append(CommunityRecipe.model_validate(json.loads(fp.read_text(encoding="utf-8"))))
        except (OSError, ValueError):
            continue
    recipes.sort(key=lambda r: r.created_at, reverse=True)
    return recipes


def toggle_like(recipe_id: str, email: str) -> Optional[CommunityRecipe]:
    with _write_lock:
        recipe = get_recipe(recipe_id)
        if recipe is None:
            return None
        liked_by = [e for e in recipe.liked_by if e != email]
        if len(liked_by) == len(recipe.liked_by):
            liked_by.append(email)
        recipe = recipe.model_copy(update={"liked_by": liked_by, "likes": len(liked_by)})
        _write(recipe)
    return recipe


def add_comment(recipe_id: str, text: str, author: str) -> Optional[CommunityRecipe]:
    text = text.strip()
    if not text:
        raise ValueError("Comment text is required")
    with _write_lock:
        recipe = get_recipe(recipe_id)
        if recipe is None:
            return None
        comment = Comment(id=uuid4().hex, text=text, author=author, date=date.today().isoformat())
        recipe = recipe.model_copy(update={"comments": [*recipe.comments, comment]})
        _write(recipe)
    return recipe


def delete_recipe(recipe_id: str) -> bool:
    fp = _path_for(recipe_id)
    with _write_lock:
        if not fp.exists():
            return False
        fp.unlink()
    return True
