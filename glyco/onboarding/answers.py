# -*- coding: utf-8 -*-
"""Onboarding — answer values and their JSON blob encoding.

One case per question kind:

- ``TextAnswer``      single-select choice value or numeric input text
- ``ChoiceSetAnswer`` multi-select values (set semantics, display order kept)
- ``FieldsAnswer``    paired text input, keyed by field
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

from .catalog import QuestionKind, QuestionNode
from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextAnswer:
    text: str

    def to_json(self) -> Any:
        return self.text


@dataclass(frozen=True)
class ChoiceSetAnswer:
    values: Tuple[str, ...] = ()

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChoiceSetAnswer):
            return NotImplemented
        return set(self.values) == set(other.values)

    def __hash__(self) -> int:
        return hash(frozenset(self.values))

    def to_json(self) -> Any:
        return list(self.values)


@dataclass(frozen=True)
class FieldsAnswer:
    fields: Dict[str, str] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.fields.items())))

    def to_json(self) -> Any:
        return dict(self.fields)


AnswerValue = Union[TextAnswer, ChoiceSetAnswer, FieldsAnswer]
AnswerMap = Dict[str, AnswerValue]


def _dedupe(values: List[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return tuple(seen)


def coerce_answer(node: QuestionNode, raw: Any) -> AnswerValue:
    """Build the answer case matching ``node.kind`` from plain JSON data."""
    if isinstance(raw, (TextAnswer, ChoiceSetAnswer, FieldsAnswer)):
        expected = answer_type_for(node.kind)
        if not isinstance(raw, expected):
            raise ValidationError(f"Answer type {type(raw).__name__} does not fit question {node.id!r}")
        return raw

    if node.kind is QuestionKind.multi_select:
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, (list, tuple, set, frozenset)):
            raise ValidationError("Expected a list of choices")
        return ChoiceSetAnswer(_dedupe([str(v) for v in raw]))

    if node.kind is QuestionKind.paired_text_input:
        if not isinstance(raw, dict):
            raise ValidationError("Expected an object of field values")
        return FieldsAnswer({str(k): "" if v is None else str(v) for k, v in raw.items()})

    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValidationError("Expected a single value")
    return TextAnswer(str(raw))


def answer_type_for(kind: QuestionKind) -> type:
    if kind is QuestionKind.multi_select:
        return ChoiceSetAnswer
    if kind is QuestionKind.paired_text_input:
        return FieldsAnswer
    return TextAnswer


def answer_to_json(value: AnswerValue) -> Any:
    return value.to_json()


def answer_from_json(raw: Any) -> AnswerValue:
    """Inverse of ``answer_to_json``; the JSON shape carries the case."""
    if isinstance(raw, str):
        return TextAnswer(raw)
    if isinstance(raw, list):
        return ChoiceSetAnswer(_dedupe([str(v) for v in raw]))
    if isinstance(raw, dict):
        return FieldsAnswer({str(k): str(v) for k, v in raw.items()})
    raise ValueError(f"Unsupported answer blob: {raw!r}")


def encode_answers(answers: AnswerMap) -> str:
    return json.dumps({k: answer_to_json(v) for k, v in answers.items()}, ensure_ascii=False)


def decode_answers(blob: str) -> AnswerMap:
    data = json.loads(blob)
    if not isinstance(data, dict):
        raise ValueError("Answer blob must be a JSON object")
    answers: AnswerMap = {}
    for node_id, raw in data.items():
        try:
            answers[str(node_id)] = answer_from_json(raw)
        except ValueError:
            logger.warning("Dropping undecodable answer for %s", node_id)
    return answers


def encode_history(history: List[int]) -> str:
    return json.dumps([int(i) for i in history])


def decode_history(blob: str) -> List[int]:
    data = json.loads(blob)
    if not isinstance(data, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in data):
        raise ValueError("History blob must be a JSON list of integers")
    return list(data)
