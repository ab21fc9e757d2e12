"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the store client and
the IP geolocation source.

Design goals:
- Small surface area (GET JSON, POST JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail (the directory degrades to
  a generic error state, it never crashes).
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "jpycmap/0.1.0 (+https://local)"


def _headers(extra: dict[str, str] | None) -> dict[str, str]:
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if extra:
        request_headers.update(extra)
    return request_headers


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """GET `url` and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.get(url, params=params, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()


async def post_json(
    url: str,
    *,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """POST `payload` as a JSON body and return the decoded response (None if empty).

    PostgREST answers inserts made with `Prefer: return=minimal` with an empty 201.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If a non-empty response body is not valid JSON.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        resp = await client.post(url, json=payload, headers=_headers(headers))
        resp.raise_for_status()
        if not resp.content:
            return None
        return resp.json()
