# -*- coding: utf-8 -*-
"""Onboarding questionnaire: catalog, answers, navigator and persistence."""

from .answers import ChoiceSetAnswer, FieldsAnswer, TextAnswer
from .catalog import DEFAULT_CATALOG, QuestionCatalog, QuestionKind, QuestionNode, load_catalog
from .errors import (
    CatalogError,
    OnboardingError,
    OutOfRangeError,
    PersistenceWriteFailure,
    UnknownJumpTargetError,
    ValidationError,
)
from .navigator import QuestionnaireNavigator
from .persistence import BackgroundWriter, OnboardingPersistence

__all__ = [
    "BackgroundWriter",
    "CatalogError",
    "ChoiceSetAnswer",
    "DEFAULT_CATALOG",
    "FieldsAnswer",
    "OnboardingError",
    "OnboardingPersistence",
    "OutOfRangeError",
    "PersistenceWriteFailure",
    "QuestionCatalog",
    "QuestionKind",
    "QuestionNode",
    "QuestionnaireNavigator",
    "TextAnswer",
    "UnknownJumpTargetError",
    "ValidationError",
    "load_catalog",
]
