# -*- coding: utf-8 -*-
"""Recipes — per-user favorites in the key-value store."""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..kvstore import KeyValueStore, get_json, get_store, set_json, user_key

FAVORITES_KEY = "user_favorite_recipes"


def get_favorites(user_id: str, store: Optional[KeyValueStore] = None) -> List[str]:
    raw = get_json(store or get_store(), user_key(FAVORITES_KEY, user_id), [])
    if not isinstance(raw, list):
        return []
    return [str(v) for v in raw]


def toggle_favorite(user_id: str, recipe_id: str, store: Optional[KeyValueStore] = None) -> Tuple[bool, List[str]]:
    """Add or remove ``recipe_id``; returns (is_favorite_now, favorites)."""
    store = store or get_store()
    favorites = get_favorites(user_id, store)
    if recipe_id in favorites:
        favorites = [f for f in favorites if f != recipe_id]
        favorite = False
    else:
        favorites.append(recipe_id)
        favorite = True
    set_json(store, user_key(FAVORITES_KEY, user_id), favorites)
    return favorite, favorites
