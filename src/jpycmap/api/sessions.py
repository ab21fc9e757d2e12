"""
In-memory registry of registration wizard sessions.

Drafts are never persisted: a session lives until the client abandons it, until it has
been idle for `ttl_seconds` (`submitted_ttl_seconds` once it reached SUBMITTED), or
until it is the least recently used one when the registry is full. Two sessions never
share state.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Literal

from jpycmap.config.settings import SessionSettings, Settings
from jpycmap.core.geolocation import fallback_point
from jpycmap.registration.merchant import MerchantRegistration
from jpycmap.registration.shop import ShopRegistration
from jpycmap.registration.submission import ListingWriter
from jpycmap.registration.wizard import RegistrationWizard

logger = logging.getLogger(__name__)

RegistrationKind = Literal["shop", "merchant"]


def new_wizard(kind: RegistrationKind, *, store: ListingWriter | None, settings: Settings) -> RegistrationWizard:
    if kind == "shop":
        return ShopRegistration(
            store, table=settings.store.shops_table, fallback=fallback_point(settings)
        )
    return MerchantRegistration(store, table=settings.store.merchants_table)


@dataclass
class _Session:
    wizard: RegistrationWizard
    touched_at: float


class SessionRegistry:
    def __init__(
        self,
        *,
        ttl_seconds: float = 1800,
        submitted_ttl_seconds: float = 300,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._submitted_ttl_seconds = submitted_ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        # Least recently touched first.
        self._sessions: OrderedDict[str, _Session] = OrderedDict()

    @classmethod
    def from_settings(cls, settings: SessionSettings) -> "SessionRegistry":
        return cls(
            ttl_seconds=settings.ttl_seconds,
            submitted_ttl_seconds=settings.submitted_ttl_seconds,
            max_sessions=settings.max_sessions,
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, session: _Session, now: float) -> bool:
        # An in-flight submit is never cut off; its outcome decides the next state.
        if session.wizard.submitting:
            return False
        ttl = self._submitted_ttl_seconds if session.wizard.submitted else self._ttl_seconds
        return now - session.touched_at > ttl

    def _sweep(self, now: float) -> None:
        expired = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in expired:
            self._sessions.pop(sid).wizard.abandon()
        if expired:
            logger.info("Expired %d registration session(s)", len(expired))

    def create(self, wizard: RegistrationWizard) -> str:
        now = self._clock()
        self._sweep(now)
        while len(self._sessions) >= self._max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            evicted.wizard.abandon()
            logger.info("Evicted registration session %s (registry full)", evicted_id)
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = _Session(wizard=wizard, touched_at=now)
        return session_id

    def get(self, session_id: str) -> RegistrationWizard | None:
        now = self._clock()
        self._sweep(now)
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session.touched_at = now
        self._sessions.move_to_end(session_id)
        return session.wizard

    def discard(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.wizard.abandon()
        return True
