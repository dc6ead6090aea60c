# -*- coding: utf-8 -*-
"""Account — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from ..glycemia.storage import get_values
from ..recipes.catalog import load_recipes
from .models import AppSettings, DashboardResponse, UserProfile
from .storage import display_name, get_profile, get_settings, pick_challenge, save_profile, save_settings

router = APIRouter(prefix="/api/account", tags=["Account"])

RECOMMENDED_COUNT = 5


@router.get("/settings", response_model=AppSettings, summary="App settings (falls back to onboarding answers)")
def read_settings(user: dict = Depends(get_current_user)):
    return get_settings(user["id"])


@router.put("/settings", response_model=AppSettings, summary="Save app settings")
def write_settings(request: AppSettings, user: dict = Depends(get_current_user)):
    return save_settings(user["id"], request)


@router.get("/profile", response_model=UserProfile, summary="Public profile")
def read_profile(user: dict = Depends(get_current_user)):
    return get_profile(user)


@router.put("/profile", response_model=UserProfile, summary="Update public profile")
def write_profile(request: UserProfile, user: dict = Depends(get_current_user)):
    return save_profile(user["id"], request)


@router.get("/dashboard", response_model=DashboardResponse, summary="Home screen data")
def dashboard(user: dict = Depends(get_current_user)):
    return DashboardResponse(
        greeting_name=display_name(user),
        challenge=pick_challenge(),
        recommended_recipes=list(load_recipes()[:RECOMMENDED_COUNT]),
        glycemic_values=get_values(user["id"]),
    )
