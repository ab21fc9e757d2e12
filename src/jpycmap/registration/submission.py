"""
Submission adapter: one finalized row, one insert.

The adapter owns the only write path of the application. It never reads the row back
(new listings stay invisible until an administrator approves them) and it never lets
the store's error detail reach the user: the cause is logged for operators and the
wizard receives a bare `SubmissionFailed`.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel

from jpycmap.domain.models import AuthIdentity

logger = logging.getLogger(__name__)


class ListingWriter(Protocol):
    async def insert(self, table: str, row: dict[str, Any], *, access_token: str | None = None) -> None: ...


class SubmissionFailed(Exception):
    """The insert did not go through; details are in the log, not in the message."""


class SubmissionAdapter:
    def __init__(self, store: ListingWriter):
        self._store = store

    async def submit(self, table: str, row: BaseModel, identity: AuthIdentity) -> None:
        """Insert `row` into `table` as `identity`.

        Raises:
            SubmissionFailed: On any store error.
        """
        payload = row.model_dump(mode="json")
        try:
            await self._store.insert(table, payload, access_token=identity.access_token)
        except Exception as e:
            logger.exception("Insert into %s failed for user=%s", table, identity.user_id)
            raise SubmissionFailed("submission failed") from e
        logger.info("Submitted pending listing to %s for user=%s", table, identity.user_id)
