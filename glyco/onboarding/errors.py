# -*- coding: utf-8 -*-
"""Onboarding — error taxonomy."""

from __future__ import annotations

from typing import Any, Dict, Optional


class OnboardingError(Exception):
    """Base class for questionnaire errors."""


class CatalogError(OnboardingError):
    """The question catalog is malformed (duplicate ids, bad references...)."""


class ValidationError(OnboardingError):
    """An answer is empty, malformed or incompatible with the current node."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason}


class OutOfRangeError(ValidationError):
    """A numeric answer falls outside the node's inclusive bounds."""

    def __init__(self, bound: str, limit: float, unit: str = "") -> None:
        label = "Minimum" if bound == "min" else "Maximum"
        super().__init__(f"{label}: {_format_number(limit)} {unit}".strip())
        self.bound = bound
        self.limit = limit
        self.unit = unit

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason, "bound": self.bound, "limit": self.limit, "unit": self.unit}


class FlowNotCompleteError(OnboardingError):
    """The questionnaire was asked for its final answers before reaching the end."""


class UnknownJumpTargetError(OnboardingError):
    """A choice points at a node id that is not in the catalog."""

    def __init__(self, node_id: str, target_id: str) -> None:
        super().__init__(f"Node {node_id!r} jumps to unknown node {target_id!r}")
        self.node_id = node_id
        self.target_id = target_id


class PersistenceWriteFailure(OnboardingError):
    """Saving the session to the key-value store failed."""

    def __init__(self, key: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to persist {key}: {cause}")
        self.key = key
        self.cause = cause


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
