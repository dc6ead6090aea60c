# -*- coding: utf-8 -*-
"""Onboarding — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


AnswerPayload = Union[str, int, float, List[str], Dict[str, str]]


class ChoiceOut(BaseModel):
    label: str
    value: str
    full_width: bool = False
    jump_to_id: Optional[str] = None


class NumericBoundsOut(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    unit_suffix: str = ""


class PairedFieldOut(BaseModel):
    field_key: str
    label: str
    placeholder: str = ""


class QuestionNodeOut(BaseModel):
    id: str
    kind: str
    title: str
    prompt: str
    progress_fraction: float
    allows_multiple_values: bool = False
    choices: List[ChoiceOut] = []
    numeric_bounds: Optional[NumericBoundsOut] = None
    paired_fields: List[PairedFieldOut] = []
    placeholder: Optional[str] = None


class OnboardingState(BaseModel):
    node: QuestionNodeOut
    index: int
    value: Optional[Any] = Field(None, description="Stored answer or in-progress multi-select draft")
    progress: float = Field(..., ge=0, le=1)
    is_terminal: bool = False
    history_length: int = Field(..., ge=1)


class AnswerRequest(BaseModel):
    value: Optional[AnswerPayload] = Field(
        None,
        description="Choice value, numeric text, list of choices or {field_key: text}. "
        "Omit on a multi-select question to commit the toggled choices.",
    )


class ToggleRequest(BaseModel):
    value: str = Field(..., min_length=1)


class ToggleResponse(BaseModel):
    node_id: str
    selected: List[str] = []


class BackResponse(BaseModel):
    status: str
    node: Optional[QuestionNodeOut] = None


class CompleteResponse(BaseModel):
    answers: Dict[str, Any] = {}
