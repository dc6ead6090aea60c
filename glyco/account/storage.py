# -*- coding: utf-8 -*-
"""Account — profile and settings blobs, with onboarding answers as fallback."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..kvstore import KeyValueStore, get_json, get_store, set_json, user_key
from ..onboarding.persistence import COMPLETED_ANSWERS_KEY
from .models import AppSettings, Challenge, UserProfile

logger = logging.getLogger(__name__)

PROFILE_KEY = "user_profile_data"
SETTINGS_KEY = "user_app_settings"
DEFAULT_AUTHOR_NAME = "Utilisateur"

PATHOLOGY_SENTINELS = frozenset({"Aucune", "Non"})
DIET_SENTINELS = frozenset({"Aucun", "Non"})

CHALLENGES_PATH = Path(__file__).resolve().parent / "data" / "challenges.json"


def onboarding_answers(user_id: str, store: Optional[KeyValueStore] = None) -> Dict[str, Any]:
    """Completed onboarding answers, else the in-progress ones."""
    store = store or get_store()
    answers = get_json(store, user_key(COMPLETED_ANSWERS_KEY, user_id))
    if not isinstance(answers, dict):
        answers = get_json(store, f"{settings.onboarding_namespace}_answers_{user_id}")
    return answers if isinstance(answers, dict) else {}


def _without_sentinels(raw: Any, sentinels: frozenset) -> List[str]:
    if isinstance(raw, list):
        return [str(v) for v in raw if v not in sentinels]
    if isinstance(raw, str) and raw and raw not in sentinels:
        return [raw]
    return []


# ---- profile ----


def get_profile(user: Dict[str, Any], store: Optional[KeyValueStore] = None) -> UserProfile:
    store = store or get_store()
    raw = get_json(store, user_key(PROFILE_KEY, user["id"]))
    profile = UserProfile()
    if isinstance(raw, dict):
        try:
            profile = UserProfile.model_validate(raw)
        except PydanticValidationError:
            logger.warning("Ignoring invalid profile for user %s", user["id"])
    if profile.name:
        return profile

    identity = onboarding_answers(user["id"], store).get("identity")
    firstname = identity.get("firstname") if isinstance(identity, dict) else None
    name = (firstname or user.get("name") or "").strip()
    return profile.model_copy(update={"name": name})


def save_profile(user_id: str, profile: UserProfile, store: Optional[KeyValueStore] = None) -> UserProfile:
    set_json(store or get_store(), user_key(PROFILE_KEY, user_id), profile.model_dump())
    return profile


def display_name(user: Dict[str, Any], store: Optional[KeyValueStore] = None) -> str:
    return get_profile(user, store).name or DEFAULT_AUTHOR_NAME


# ---- settings ----


def get_settings(user_id: str, store: Optional[KeyValueStore] = None) -> AppSettings:
    store = store or get_store()
    saved = get_json(store, user_key(SETTINGS_KEY, user_id))
    saved = saved if isinstance(saved, dict) else {}
    onboarding = onboarding_answers(user_id, store)

    values: Dict[str, Any] = {}
    try:
        values.update(AppSettings.model_validate(saved).model_dump(exclude_unset=True))
    except PydanticValidationError:
        logger.warning("Ignoring invalid settings for user %s", user_id)

    if not values.get("weight") and isinstance(onboarding.get("poids"), str):
        values["weight"] = onboarding["poids"]
    if not values.get("glycemie_high") and isinstance(onboarding.get("glycemieCible"), str):
        values["glycemie_high"] = onboarding["glycemieCible"]
    if "pathologies" not in values and "detailsPathologies" in onboarding:
        values["pathologies"] = _without_sentinels(onboarding["detailsPathologies"], PATHOLOGY_SENTINELS)
    if "diets" not in values and "regimeAlimentaire" in onboarding:
        values["diets"] = _without_sentinels(onboarding["regimeAlimentaire"], DIET_SENTINELS)
    return AppSettings(**values)


def save_settings(user_id: str, app_settings: AppSettings, store: Optional[KeyValueStore] = None) -> AppSettings:
    set_json(store or get_store(), user_key(SETTINGS_KEY, user_id), app_settings.model_dump())
    return app_settings


# ---- dashboard ----


def load_challenges(path: Path = CHALLENGES_PATH) -> List[Challenge]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return [Challenge.model_validate(item) for item in raw]


def pick_challenge(rng: Optional[random.Random] = None) -> Optional[Challenge]:
    challenges = load_challenges()
    if not challenges:
        return None
    return (rng or random).choice(challenges)
