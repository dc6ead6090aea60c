# -*- coding: utf-8 -*-
"""Onboarding — session persistence in the key-value store.

Writes are fire-and-forget: ``save`` hands the blobs to a background worker
and returns immediately. The contract is at-most-once, last write wins, and
callers get no ordering guarantee beyond normal call order. A failed write is
logged and never reaches the caller; the in-memory session stays the source
of truth.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Deque, List, NamedTuple, Optional, Set

from ..kvstore import KeyValueStore
from .answers import AnswerMap, decode_answers, decode_history, encode_answers, encode_history
from .errors import PersistenceWriteFailure

logger = logging.getLogger(__name__)

# Final answers handed over on completion, read by the account settings and dashboard.
COMPLETED_ANSWERS_KEY = "user_onboarding_answers"


class SavedSession(NamedTuple):
    answers: AnswerMap
    history: List[int]
    terminal: bool = False


class BackgroundWriter:
    """Single worker thread running persistence writes off the caller's path.

    The most recent ``max_failures`` write failures are kept in ``failures``.
    """

    def __init__(self, max_failures: int = 100) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="onboarding-writer")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self.failures: Deque[PersistenceWriteFailure] = deque(maxlen=max_failures)

    def submit(self, key: str, write: Callable[[], None]) -> Future:
        future = self._executor.submit(self._run, key, write)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _run(self, key: str, write: Callable[[], None]) -> None:
        try:
            write()
        except Exception as exc:
            failure = PersistenceWriteFailure(key, exc)
            self.failures.append(failure)
            logger.warning("%s", failure)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every write submitted so far has run."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.result(timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


class OnboardingPersistence:
    def __init__(
        self,
        store: KeyValueStore,
        namespace: str = "onboarding",
        writer: Optional[BackgroundWriter] = None,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.writer = writer or BackgroundWriter()

    def answers_key(self, user_id: str) -> str:
        return f"{self.namespace}_answers_{user_id}"

    def history_key(self, user_id: str) -> str:
        return f"{self.namespace}_history_{user_id}"

    def terminal_key(self, user_id: str) -> str:
        return f"{self.namespace}_terminal_{user_id}"

    def session_keys(self, user_id: str) -> List[str]:
        return [self.answers_key(user_id), self.history_key(user_id), self.terminal_key(user_id)]

    def load(self, user_id: str) -> Optional[SavedSession]:
        """Return the saved session, or None when no usable history is stored."""
        raw_history = self.store.get(self.history_key(user_id))
        if raw_history is None:
            return None
        try:
            history = decode_history(raw_history)
        except ValueError:
            logger.warning("Ignoring unreadable onboarding history for user %s", user_id)
            return None

        answers: AnswerMap = {}
        raw_answers = self.store.get(self.answers_key(user_id))
        if raw_answers is not None:
            try:
                answers = decode_answers(raw_answers)
            except ValueError:
                logger.warning("Ignoring unreadable onboarding answers for user %s", user_id)
        return SavedSession(answers, history, self._load_terminal(user_id))

    def _load_terminal(self, user_id: str) -> bool:
        raw = self.store.get(self.terminal_key(user_id))
        if raw is None:
            return False
        try:
            flag = json.loads(raw)
        except ValueError:
            flag = None
        if not isinstance(flag, bool):
            logger.warning("Ignoring unreadable onboarding terminal flag for user %s", user_id)
            return False
        return flag

    def save(self, user_id: str, answers: AnswerMap, history: List[int], terminal: bool = False) -> Future:
        # Encode now so later in-memory mutations never leak into this write.
        blobs = list(
            zip(self.session_keys(user_id), (encode_answers(answers), encode_history(history), json.dumps(terminal)))
        )

        def write() -> None:
            for key, blob in blobs:
                self.store.set(key, blob)

        return self.writer.submit(self.answers_key(user_id), write)

    def clear(self, user_id: str) -> None:
        # Pending saves would otherwise resurrect the cleared blobs.
        self.flush()
        for key in self.session_keys(user_id):
            try:
                self.store.remove(key)
            except Exception as exc:
                logger.warning("%s", PersistenceWriteFailure(key, exc))

    def flush(self, timeout: Optional[float] = None) -> None:
        self.writer.flush(timeout=timeout)
