"""
Supabase store client (PostgREST + GoTrue).

This module is responsible only for talking to the hosted backend:
- reading approved listings from a table,
- inserting one pending listing row on behalf of a signed-in user,
- resolving a user access token into an `AuthIdentity`.

Approval, row-level security, and OAuth sign-in all happen on the Supabase side.
There is no module-level client: callers build one with `build_store_client()` and
get `None` back when the project is not configured.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from jpycmap.config.settings import Settings
from jpycmap.core.http import get_json, post_json
from jpycmap.domain.models import AuthIdentity

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the store cannot be reached or answers with an error."""


class SupabaseClient:
    """Thin async client over the Supabase REST and auth endpoints."""

    def __init__(self, *, url: str, anon_key: str, timeout_seconds: float = 15):
        self._base_url = url.rstrip("/")
        self._anon_key = anon_key
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
        }

    def _table_url(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    async def fetch(self, table: str, *, status: str = "approved") -> list[dict[str, Any]]:
        """Return every row of `table` whose status equals `status`.

        Raises:
            StoreError: On transport errors, non-2xx answers, or a non-list payload.
        """
        params = {"select": "*", "status": f"eq.{status}"}
        try:
            payload = await get_json(
                self._table_url(table),
                params=params,
                headers=self._headers(),
                timeout_seconds=self._timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to fetch {table}: {e}") from e
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise StoreError(f"Unexpected payload for {table}: expected a list")
        return [row for row in payload if isinstance(row, dict)]

    async def insert(self, table: str, row: dict[str, Any], *, access_token: str | None = None) -> None:
        """Insert one row into `table`; nothing is read back.

        Raises:
            StoreError: On transport errors or non-2xx answers (e.g. an RLS rejection).
        """
        headers = self._headers(access_token)
        headers["Prefer"] = "return=minimal"
        try:
            await post_json(
                self._table_url(table),
                payload=row,
                headers=headers,
                timeout_seconds=self._timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to insert into {table}: {e}") from e

    async def get_user(self, access_token: str) -> AuthIdentity | None:
        """Resolve a user access token; None when the token is not accepted."""
        try:
            payload = await get_json(
                f"{self._base_url}/auth/v1/user",
                headers=self._headers(access_token),
                timeout_seconds=self._timeout_seconds,
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code in {401, 403}:
                return None
            raise StoreError(f"Failed to resolve user: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to resolve user: {e}") from e

        if not isinstance(payload, dict) or not payload.get("id"):
            return None
        return AuthIdentity(user_id=str(payload["id"]), access_token=access_token, email=payload.get("email"))


def build_store_client(settings: Settings) -> SupabaseClient | None:
    """Build a client from settings, or None when URL/anon key are not configured."""
    if not settings.store.configured:
        logger.info("Supabase is not configured; listings come from the local catalog")
        return None
    return SupabaseClient(
        url=settings.store.url,
        anon_key=settings.store.anon_key,
        timeout_seconds=settings.app.http_timeout_seconds,
    )
