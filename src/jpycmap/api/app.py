# src/jpycmap/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and lets the map frontend call it from the browser.
Business logic lives in `jpycmap.api.routes`, `jpycmap.directory` and `jpycmap.registration`.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from jpycmap.config.settings import ApiSettings, get_settings
from jpycmap.core.logging import configure_logging

from .routes import router

LOCAL_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


def cors_options(settings: ApiSettings) -> dict[str, Any] | None:
    """CORS middleware options for the frontend, or None to leave CORS off.

    The frontend only reads listings, drives the registration session endpoints, and
    sends the signed-in user's access token as `Authorization` on submit. Tokens travel
    in that header, never in cookies, so credentials stay disabled.
    """
    origin_regex = LOCAL_ORIGIN_REGEX if settings.cors_allow_local and not settings.cors_origins else None
    if not settings.cors_origins and origin_regex is None:
        return None
    return {
        "allow_origins": list(settings.cors_origins),
        "allow_origin_regex": origin_regex,
        "allow_credentials": False,
        "allow_methods": ["GET", "POST", "PUT", "PATCH", "DELETE"],
        "allow_headers": ["Authorization", "Content-Type"],
    }


configure_logging()

app = FastAPI(title="JPYC Map API", version="0.1.0")

_cors = cors_options(get_settings().api)
if _cors is not None:
    app.add_middleware(CORSMiddleware, **_cors)

app.include_router(router)


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}
