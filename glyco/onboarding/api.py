# -*- coding: utf-8 -*-
"""Onboarding — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user
from ..kvstore import get_store, set_json, user_key
from .answers import answer_to_json
from .errors import FlowNotCompleteError, ValidationError
from .models import (
    AnswerRequest,
    BackResponse,
    CompleteResponse,
    OnboardingState,
    QuestionNodeOut,
    ToggleRequest,
    ToggleResponse,
)
from .navigator import QuestionnaireNavigator
from .persistence import COMPLETED_ANSWERS_KEY
from .sessions import get_registry

router = APIRouter(prefix="/api/onboarding", tags=["Onboarding"])


def _state(nav: QuestionnaireNavigator) -> OnboardingState:
    value = nav.current_value()
    return OnboardingState(
        node=QuestionNodeOut(**nav.current_node().to_dict()),
        index=nav.current_index(),
        value=answer_to_json(value) if value is not None else None,
        progress=nav.progress(),
        is_terminal=nav.is_terminal(),
        history_length=len(nav.history()),
    )


@router.get("", response_model=OnboardingState, summary="Current onboarding question")
def get_state(user: dict = Depends(get_current_user)):
    with get_registry().session(user["id"]) as nav:
        return _state(nav)


@router.get("/catalog", response_model=List[QuestionNodeOut], summary="Full question catalog")
def get_catalog(user: dict = Depends(get_current_user)):  # noqa: ARG001
    return [QuestionNodeOut(**item) for item in get_registry().catalog.to_list()]


@router.post("/answer", response_model=OnboardingState, summary="Answer the current question")
def submit_answer(request: AnswerRequest, user: dict = Depends(get_current_user)):
    with get_registry().session(user["id"]) as nav:
        try:
            nav.submit_answer(request.value)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
        return _state(nav)


@router.post("/toggle", response_model=ToggleResponse, summary="Toggle a multi-select choice")
def toggle_choice(request: ToggleRequest, user: dict = Depends(get_current_user)):
    with get_registry().session(user["id"]) as nav:
        try:
            draft = nav.toggle_multi_select_choice(request.value)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
        return ToggleResponse(node_id=nav.current_node().id, selected=list(draft.values))


@router.post("/back", response_model=BackResponse, summary="Go back one question")
def go_back(user: dict = Depends(get_current_user)):
    with get_registry().session(user["id"]) as nav:
        result = nav.go_back()
        if result.exit_requested:
            return BackResponse(status=result.status.value)
        return BackResponse(status=result.status.value, node=QuestionNodeOut(**result.node.to_dict()))


@router.post("/reset", response_model=OnboardingState, summary="Start the questionnaire over")
def reset(user: dict = Depends(get_current_user)):
    registry = get_registry()
    with registry.session(user["id"]) as nav:
        nav.reset_for_user(user["id"])
        state = _state(nav)
    registry.discard(user["id"])
    return state


@router.post("/complete", response_model=CompleteResponse, summary="Finish the questionnaire")
def complete(user: dict = Depends(get_current_user)):
    registry = get_registry()
    with registry.session(user["id"]) as nav:
        if not nav.is_terminal():
            raise HTTPException(status_code=409, detail="The questionnaire is not finished yet")
        payload = {node_id: answer_to_json(value) for node_id, value in nav.answers().items()}
        try:
            set_json(get_store(), user_key(COMPLETED_ANSWERS_KEY, user["id"]), payload)
        except Exception as exc:
            raise HTTPException(status_code=500, detail=f"Failed to save onboarding answers: {exc}") from exc
        try:
            nav.complete()
        except FlowNotCompleteError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
    registry.discard(user["id"])
    return CompleteResponse(answers=payload)
