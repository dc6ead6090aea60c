# -*- coding: utf-8 -*-
"""Onboarding — per-user navigator sessions."""

from __future__ import annotations

import logging
import threading
import zlib
from collections import OrderedDict
from contextlib import contextmanager
from typing import Iterator, Optional

from ..config import settings
from ..kvstore import KeyValueStore, get_store
from .catalog import DEFAULT_CATALOG, QuestionCatalog, load_catalog
from .navigator import QuestionnaireNavigator
from .persistence import OnboardingPersistence

logger = logging.getLogger(__name__)


def default_catalog() -> QuestionCatalog:
    if settings.catalog_path is None:
        return DEFAULT_CATALOG
    logger.info("Loading onboarding catalog from %s", settings.catalog_path)
    return load_catalog(settings.catalog_path, strict=settings.strict_catalog)


class SessionRegistry:
    """Navigators of the most recently active users, restored from the store on first use.

    At most ``max_sessions`` navigators stay in memory; the least recently
    used one is dropped first. Requests for the same user are serialized by
    one of a fixed pool of locks.
    """

    LOCK_STRIPES = 64

    def __init__(
        self,
        catalog: QuestionCatalog,
        persistence: OnboardingPersistence,
        max_sessions: int = 1024,
    ) -> None:
        self.catalog = catalog
        self.persistence = persistence
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, QuestionnaireNavigator]" = OrderedDict()
        self._locks = [threading.Lock() for _ in range(self.LOCK_STRIPES)]
        self._guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        return self._locks[zlib.crc32(user_id.encode("utf-8")) % len(self._locks)]

    @contextmanager
    def session(self, user_id: str) -> Iterator[QuestionnaireNavigator]:
        """Exclusive access to the user's navigator for the duration of a request."""
        with self._lock_for(user_id):
            with self._guard:
                nav = self._sessions.get(user_id)
                if nav is not None:
                    self._sessions.move_to_end(user_id)
            if nav is None:
                # Saves still queued for this user must land before the store is read back.
                self.persistence.flush()
                nav = QuestionnaireNavigator(self.catalog, user_id, self.persistence)
                with self._guard:
                    self._sessions[user_id] = nav
                    while len(self._sessions) > self.max_sessions:
                        evicted, _ = self._sessions.popitem(last=False)
                        logger.debug("Evicted onboarding session of user %s", evicted)
            yield nav

    def discard(self, user_id: str) -> None:
        with self._guard:
            self._sessions.pop(user_id, None)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


_registry: Optional[SessionRegistry] = None


def get_registry(store: Optional[KeyValueStore] = None) -> SessionRegistry:
    global _registry
    if _registry is None:
        persistence = OnboardingPersistence(store or get_store(), namespace=settings.onboarding_namespace)
        _registry = SessionRegistry(default_catalog(), persistence, max_sessions=settings.max_onboarding_sessions)
    return _registry
