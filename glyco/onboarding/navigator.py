# -*- coding: utf-8 -*-
"""Onboarding — questionnaire navigator.

A navigator is the explicit session object of one user walking through the
question catalog. It owns the answer map and the history stack (indices of
visited nodes, the last one being the current node), validates answers,
computes the next node and persists both after every mutation.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from .answers import AnswerMap, AnswerValue, ChoiceSetAnswer, FieldsAnswer, TextAnswer, coerce_answer
from .catalog import QuestionCatalog, QuestionKind, QuestionNode
from .errors import FlowNotCompleteError, OutOfRangeError, UnknownJumpTargetError, ValidationError
from .persistence import OnboardingPersistence

logger = logging.getLogger(__name__)

# "None of the above" values; exclusive with every other choice of a multi-select node.
DEFAULT_SENTINELS: FrozenSet[str] = frozenset({"Non", "None", "No", "Aucun", "Aucune"})


class SubmitStatus(str, Enum):
    advanced = "advanced"
    completed = "completed"


class BackStatus(str, Enum):
    ok = "ok"
    exit_requested = "exit_requested"


@dataclass(frozen=True)
class SubmitResult:
    status: SubmitStatus
    node: QuestionNode
    index: int

    @property
    def completed(self) -> bool:
        return self.status is SubmitStatus.completed


@dataclass(frozen=True)
class BackResult:
    status: BackStatus
    node: QuestionNode

    @property
    def exit_requested(self) -> bool:
        return self.status is BackStatus.exit_requested


_NUMBER_RE = re.compile(r"([+-]?)([0-9]+)(?:[.,]([0-9]+))?")


def parse_number(text: str) -> float:
    """Parse a plain decimal number written with ``,`` or ``.`` as separator."""
    match = _NUMBER_RE.fullmatch(text.strip())
    if match is None:
        raise ValidationError(f"Not a number: {text!r}")
    number = float(match.group(0).replace(",", "."))
    if math.isinf(number):
        raise ValidationError(f"Not a number: {text!r}")
    return number


def canonical_number(text: str) -> str:
    """``" +0170,50 "`` becomes ``"170.5"``; ``text`` must satisfy ``parse_number``."""
    match = _NUMBER_RE.fullmatch(text.strip())
    if match is None:
        raise ValidationError(f"Not a number: {text!r}")
    sign, whole, frac = match.groups()
    whole = whole.lstrip("0") or "0"
    frac = (frac or "").rstrip("0")
    digits = f"{whole}.{frac}" if frac else whole
    return f"-{digits}" if sign == "-" and digits != "0" else digits


class QuestionnaireNavigator:
    def __init__(
        self,
        catalog: QuestionCatalog,
        user_id: str,
        persistence: Optional[OnboardingPersistence] = None,
        *,
        sentinels: FrozenSet[str] = DEFAULT_SENTINELS,
    ) -> None:
        self.catalog = catalog
        self.user_id = user_id
        self.persistence = persistence
        self.sentinels = sentinels
        self._answers: AnswerMap = {}
        self._history: List[int] = [0]
        self._drafts: Dict[str, ChoiceSetAnswer] = {}
        self._terminal = False
        self._restore()

    # ---- state queries ----

    def current_index(self) -> int:
        return self._history[-1]

    def current_node(self) -> QuestionNode:
        return self.catalog[self._history[-1]]

    def current_value(self) -> Optional[AnswerValue]:
        node = self.current_node()
        draft = self._drafts.get(node.id)
        if draft is not None:
            return draft
        return self._answers.get(node.id)

    def is_terminal(self) -> bool:
        return self._terminal

    def progress(self) -> float:
        return self.current_node().progress_fraction

    def answers(self) -> AnswerMap:
        return dict(self._answers)

    def history(self) -> List[int]:
        return list(self._history)

    # ---- transitions ----

    def next_index(self, node: QuestionNode, value: AnswerValue) -> int:
        index = self.catalog.index_of(node.id)
        if index is None:
            raise ValueError(f"Question {node.id!r} is not part of the catalog")
        default = index + 1
        if node.kind is not QuestionKind.single_select or not isinstance(value, TextAnswer):
            return default
        choice = node.choice_for(value.text)
        if choice is None or not choice.jump_to_id:
            return default
        target = self.catalog.index_of(choice.jump_to_id)
        if target is None:
            logger.warning("%s; advancing linearly", UnknownJumpTargetError(node.id, choice.jump_to_id))
            return default
        return target

    def submit_answer(self, value: Any = None) -> SubmitResult:
        """Validate and store the answer for the current node, then advance.

        ``value`` may be omitted on a multi-select node to commit the choices
        accumulated with ``toggle_multi_select_choice``. Raises
        ``ValidationError`` (or ``OutOfRangeError``) without touching state.
        """
        node = self.current_node()
        if value is None and node.kind is QuestionKind.multi_select:
            value = self.current_value()
        if value is None:
            raise ValidationError("Please select an option or fill in the field.")
        answer = self._validate(node, coerce_answer(node, value))

        self._answers[node.id] = answer
        self._drafts.pop(node.id, None)
        nxt = self.next_index(node, answer)
        if nxt < len(self.catalog):
            self._history.append(nxt)
            self._terminal = False
            status = SubmitStatus.advanced
        else:
            self._terminal = True
            status = SubmitStatus.completed
            logger.info("Onboarding finished for user %s", self.user_id)
        self._persist()
        return SubmitResult(status=status, node=self.current_node(), index=self.current_index())

    def go_back(self) -> BackResult:
        if len(self._history) <= 1:
            return BackResult(status=BackStatus.exit_requested, node=self.current_node())
        left = self._history.pop()
        self._drafts.pop(self.catalog[left].id, None)
        self._terminal = False
        self._persist()
        return BackResult(status=BackStatus.ok, node=self.current_node())

    def toggle_multi_select_choice(self, choice_value: str) -> ChoiceSetAnswer:
        node = self.current_node()
        if node.kind is not QuestionKind.multi_select:
            raise ValidationError(f"Question {node.id!r} does not accept several choices")
        if node.choice_for(choice_value) is None:
            raise ValidationError(f"Unknown choice {choice_value!r}")

        current = self.current_value()
        selected = list(current.values) if isinstance(current, ChoiceSetAnswer) else []
        if choice_value in self.sentinels:
            selected = [choice_value]
        else:
            selected = [v for v in selected if v not in self.sentinels]
            if choice_value in selected:
                selected.remove(choice_value)
            else:
                selected.append(choice_value)
        draft = ChoiceSetAnswer(tuple(selected))
        self._drafts[node.id] = draft
        return draft

    def reset_for_user(self, user_id: str) -> None:
        if self.persistence is not None:
            self.persistence.clear(user_id)
        self.user_id = user_id
        self._answers = {}
        self._history = [0]
        self._drafts = {}
        self._terminal = False

    def complete(self) -> AnswerMap:
        """Hand over the final answers and drop the saved session."""
        if not self._terminal:
            raise FlowNotCompleteError("The questionnaire is not finished yet")
        answers = dict(self._answers)
        self.reset_for_user(self.user_id)
        return answers

    # ---- internals ----

    def _validate(self, node: QuestionNode, answer: AnswerValue) -> AnswerValue:
        match answer:
            case TextAnswer(text=text):
                text = text.strip()
                if not text:
                    raise ValidationError("Please select an option or fill in the field.")
                if node.kind is QuestionKind.numeric_input:
                    return TextAnswer(self._check_bounds(node, text))
                if node.choices and node.choice_for(text) is None:
                    raise ValidationError(f"Unknown choice {text!r}")
                return TextAnswer(text)
            case ChoiceSetAnswer(values=values):
                if not values:
                    raise ValidationError("Please select at least one option.")
                unknown = [v for v in values if node.choice_for(v) is None]
                if unknown:
                    raise ValidationError(f"Unknown choice {unknown[0]!r}")
                sentinels = [v for v in values if v in self.sentinels]
                if sentinels and len(values) > 1:
                    raise ValidationError(f"{sentinels[0]!r} cannot be combined with other choices.")
                return answer
            case FieldsAnswer(fields=fields):
                cleaned: Dict[str, str] = {}
                for paired in node.paired_fields:
                    text = (fields.get(paired.field_key) or "").strip()
                    if not text:
                        raise ValidationError(f"{paired.label} is required.")
                    cleaned[paired.field_key] = text
                return FieldsAnswer(cleaned)
        raise ValidationError(f"Unsupported answer {answer!r}")

    @staticmethod
    def _check_bounds(node: QuestionNode, text: str) -> str:
        number = parse_number(text)
        bounds = node.numeric_bounds
        if bounds is not None:
            if bounds.min is not None and number < bounds.min:
                raise OutOfRangeError("min", bounds.min, bounds.unit_suffix)
            if bounds.max is not None and number > bounds.max:
                raise OutOfRangeError("max", bounds.max, bounds.unit_suffix)
        return canonical_number(text)

    def _restore(self) -> None:
        if self.persistence is None:
            return
        saved = self.persistence.load(self.user_id)
        if saved is None:
            return
        self._answers = saved.answers
        history = saved.history
        if history and all(0 <= i < len(self.catalog) for i in history):
            self._history = history
        else:
            logger.warning("Discarding invalid onboarding history for user %s: %s", self.user_id, history)
            return
        # A finished session sits on its last node, which must have been answered.
        self._terminal = saved.terminal and self.current_node().id in self._answers

    def _persist(self) -> None:
        if self.persistence is None:
            return
        try:
            self.persistence.save(self.user_id, self._answers, self._history, self._terminal)
        except Exception as exc:
            # Encoding or scheduling failed; the in-memory session carries on regardless.
            logger.warning("Could not schedule onboarding save for user %s: %s", self.user_id, exc)
