"""
API routes.

Endpoints:
- GET    `/api/shops/nearby`: approved shops around a coordinate (or the fallback), nearest first.
- GET    `/api/merchants`: approved online merchants filtered by keyword and service type.
- GET    `/api/options`: option lists for the registration forms.
- POST   `/api/registrations/{kind}`: start a shop/merchant registration session.
- GET    `/api/registrations/{session_id}`: current wizard state.
- PATCH  `/api/registrations/{session_id}/draft`: change draft fields.
- PUT    `/api/registrations/{session_id}/form`: replace the draft from raw form fields.
- POST   `/api/registrations/{session_id}/{advance,retreat,confirm,submit,reset}`
- POST   `/api/registrations/{session_id}/location`: move the shop pin (or locate the caller).
- POST   `/api/registrations/{session_id}/tags`, DELETE `.../tags/{tag}`: merchant tags.
- DELETE `/api/registrations/{session_id}`: abandon the session.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Query, Request
from pydantic import BaseModel, Field, ValidationError

from jpycmap.api.sessions import RegistrationKind, SessionRegistry, new_wizard
from jpycmap.config.settings import get_settings
from jpycmap.core.geo import GeoPoint
from jpycmap.core.geolocation import (
    FixedGeolocation,
    build_geolocation_source,
    fallback_point,
    locate,
)
from jpycmap.directory.browse import fetch_merchants, fetch_shops
from jpycmap.directory.nearby import nearby_shops, resolve_radius_km
from jpycmap.directory.search import ALL_SERVICE_TYPES, filter_merchants, service_type_options
from jpycmap.domain.models import AuthIdentity
from jpycmap.domain.options import all_options
from jpycmap.registration.merchant import MerchantDraft, MerchantRegistration
from jpycmap.registration.shop import ShopDraft, ShopRegistration
from jpycmap.registration.wizard import IllegalTransition, RegistrationWizard, WizardState
from jpycmap.store.supabase import StoreError, SupabaseClient, build_store_client

logger = logging.getLogger(__name__)

router = APIRouter()

_sessions = SessionRegistry.from_settings(get_settings().sessions)


@lru_cache
def _store() -> SupabaseClient | None:
    return build_store_client(get_settings())


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": message})


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.get("/api/shops/nearby")
async def get_nearby_shops(
    request: Request,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius_km: float | None = None,
) -> dict:
    """Return approved shops within `radius_km` of the given (or located) coordinate."""
    settings = get_settings()
    try:
        radius = resolve_radius_km(radius_km, settings.nearby)
    except ValueError as e:
        raise _bad_request(str(e)) from e

    if (lat is None) != (lng is None):
        raise _bad_request("lat and lng must be given together")
    if lat is not None and lng is not None:
        source = FixedGeolocation(GeoPoint(lat=lat, lng=lng))
    else:
        source = build_geolocation_source(settings, client_ip=_client_ip(request))
    origin = await locate(source, fallback=fallback_point(settings))

    load = await fetch_shops(_store(), settings)
    shops = nearby_shops(load.items, origin, radius) if load.ok else []
    return {
        "origin": {"lat": origin.lat, "lng": origin.lng},
        "radius_km": radius,
        "count": len(shops),
        "shops": [s.model_dump(mode="json") for s in shops],
        "error": load.error,
    }


@router.get("/api/merchants")
async def get_merchants(q: str = "", service_type: str = ALL_SERVICE_TYPES) -> dict:
    """Return approved online merchants matching the keyword and service type."""
    settings = get_settings()
    load = await fetch_merchants(_store(), settings)
    merchants = filter_merchants(load.items, q, service_type)
    return {
        "count": len(merchants),
        "merchants": [m.model_dump(mode="json") for m in merchants],
        "service_types": service_type_options(load.items),
        "error": load.error,
    }


@router.get("/api/options")
def get_options() -> dict:
    """Return the option lists offered by the registration forms."""
    return all_options()


# -- registration sessions ----------------------------------------------


class ConfirmRequest(BaseModel):
    confirmed: bool = True


class TagRequest(BaseModel):
    tag: str | None = None


class LocationRequest(BaseModel):
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)


def _wizard(session_id: str) -> RegistrationWizard:
    wizard = _sessions.get(session_id)
    if wizard is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "SESSION_NOT_FOUND", "message": f"Unknown registration session '{session_id}'"},
        )
    return wizard


def _state_payload(session_id: str, wizard: RegistrationWizard) -> dict[str, Any]:
    payload = {"session_id": session_id, "kind": _kind(wizard), **wizard.snapshot()}
    if wizard.state is WizardState.STEP_3_CONFIRM:
        payload["summary"] = [{"label": k, "value": v} for k, v in wizard.summary()]
    return payload


def _kind(wizard: RegistrationWizard) -> str:
    return "shop" if isinstance(wizard, ShopRegistration) else "merchant"


def _conflict(e: IllegalTransition) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "ILLEGAL_TRANSITION", "message": str(e)})


async def _resolve_identity(authorization: str | None) -> AuthIdentity | None:
    """Turn an `Authorization: Bearer <token>` header into the signed-in user, if any."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    store = _store()
    if store is None:
        return None
    token = authorization.split(" ", 1)[1].strip()
    try:
        return await store.get_user(token)
    except StoreError:
        logger.warning("Could not resolve the signed-in user", exc_info=True)
        return None


@router.post("/api/registrations/{kind}")
def create_registration(kind: RegistrationKind) -> dict:
    """Start a new registration wizard session."""
    wizard = new_wizard(kind, store=_store(), settings=get_settings())
    session_id = _sessions.create(wizard)
    return _state_payload(session_id, wizard)


@router.get("/api/registrations/{session_id}")
def get_registration(session_id: str) -> dict:
    wizard = _wizard(session_id)
    return _state_payload(session_id, wizard)


@router.patch("/api/registrations/{session_id}/draft")
def update_draft(session_id: str, changes: dict[str, Any]) -> dict:
    wizard = _wizard(session_id)
    try:
        wizard.update(**changes)
    except IllegalTransition as e:
        raise _conflict(e) from e
    except ValidationError as e:
        raise _bad_request(str(e)) from e
    return _state_payload(session_id, wizard)


@router.put("/api/registrations/{session_id}/form")
def replace_form(session_id: str, form: dict[str, Any]) -> dict:
    """Replace the draft from raw form fields ("その他" + `*_other` companions)."""
    wizard = _wizard(session_id)
    draft_type = ShopDraft if isinstance(wizard, ShopRegistration) else MerchantDraft
    try:
        draft = draft_type.from_form(form)
        wizard.update(**draft.model_dump())
    except IllegalTransition as e:
        raise _conflict(e) from e
    except ValueError as e:
        raise _bad_request(str(e)) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/advance")
def advance_registration(session_id: str) -> dict:
    wizard = _wizard(session_id)
    try:
        wizard.advance()
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/retreat")
def retreat_registration(session_id: str) -> dict:
    wizard = _wizard(session_id)
    try:
        wizard.retreat()
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/confirm")
def confirm_registration(session_id: str, body: ConfirmRequest) -> dict:
    wizard = _wizard(session_id)
    try:
        wizard.confirm(body.confirmed)
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/submit")
async def submit_registration(session_id: str, authorization: str | None = Header(default=None)) -> dict:
    """Submit the draft as the signed-in user (bearer token from the auth provider)."""
    wizard = _wizard(session_id)
    if wizard.state is not WizardState.STEP_3_CONFIRM:
        raise _conflict(IllegalTransition(wizard.state, "submit"))
    identity = await _resolve_identity(authorization)
    # Another request may have submitted or abandoned the session during the lookup.
    try:
        await wizard.submit(identity)
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/reset")
def reset_registration(session_id: str) -> dict:
    wizard = _wizard(session_id)
    try:
        wizard.reset()
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/location")
async def set_registration_location(request: Request, session_id: str, body: LocationRequest) -> dict:
    """Move the shop pin to `lat`/`lng`, or to the caller's located position if omitted."""
    wizard = _wizard(session_id)
    if not isinstance(wizard, ShopRegistration):
        raise _bad_request("Only shop registrations have a location")
    try:
        if body.lat is not None and body.lng is not None:
            wizard.set_location(body.lat, body.lng)
        else:
            source = build_geolocation_source(get_settings(), client_ip=_client_ip(request))
            await wizard.use_current_location(source)
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.post("/api/registrations/{session_id}/tags")
def add_registration_tag(session_id: str, body: TagRequest) -> dict:
    """Add a tag; without `tag` the draft's `custom_tag` buffer is used."""
    wizard = _wizard(session_id)
    if not isinstance(wizard, MerchantRegistration):
        raise _bad_request("Only online merchant registrations have tags")
    try:
        wizard.add_tag(body.tag)
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.delete("/api/registrations/{session_id}/tags/{tag}")
def remove_registration_tag(session_id: str, tag: str) -> dict:
    wizard = _wizard(session_id)
    if not isinstance(wizard, MerchantRegistration):
        raise _bad_request("Only online merchant registrations have tags")
    try:
        wizard.remove_tag(tag)
    except IllegalTransition as e:
        raise _conflict(e) from e
    return _state_payload(session_id, wizard)


@router.delete("/api/registrations/{session_id}")
def abandon_registration(session_id: str) -> dict:
    """Drop the session and its draft."""
    if not _sessions.discard(session_id):
        raise HTTPException(
            status_code=404,
            detail={"code": "SESSION_NOT_FOUND", "message": f"Unknown registration session '{session_id}'"},
        )
    return {"session_id": session_id, "abandoned": True}
