"""
Geolocation provider.

`locate()` asks a `GeolocationSource` once for the caller's coordinate. Anything that
goes wrong (no source, permission denied, lookup failure, garbage payload) degrades
to a fixed fallback coordinate instead of an error: the map always needs a center.

Sources:
- `FixedGeolocation`: a coordinate the caller already knows (e.g. reported by the browser).
- `IpGeolocation`: an HTTP lookup of the public IP's approximate location (ip-api.com shape).
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from jpycmap.config.settings import Settings
from jpycmap.core.geo import TOKYO_STATION, GeoPoint
from jpycmap.core.http import get_json

logger = logging.getLogger(__name__)


class GeolocationSource(Protocol):
    async def current_position(self) -> GeoPoint | None:
        """Return the current coordinate, None if unavailable, or raise on failure."""
        ...


class FixedGeolocation:
    """A source that always reports the coordinate it was built with."""

    def __init__(self, point: GeoPoint):
        self._point = point

    async def current_position(self) -> GeoPoint | None:
        return self._point


class IpGeolocation:
    """Approximate position from an IP lookup service.

    The service is expected to answer with `{"status": "success", "lat": .., "lon": ..}`.
    """

    def __init__(self, url: str, *, ip: str | None = None, timeout_seconds: float = 15):
        self._url = url
        self._ip = ip
        self._timeout_seconds = timeout_seconds

    async def current_position(self) -> GeoPoint | None:
        url = self._url.rstrip("/") + f"/{self._ip}" if self._ip else self._url
        payload: Any = await get_json(url, timeout_seconds=self._timeout_seconds)
        if not isinstance(payload, dict) or payload.get("status", "success") != "success":
            return None
        lat = payload.get("lat")
        lng = payload.get("lon", payload.get("lng"))
        if lat is None or lng is None:
            return None
        return GeoPoint(lat=float(lat), lng=float(lng))


def fallback_point(settings: Settings | None = None) -> GeoPoint:
    """Return the configured fallback coordinate (Tokyo Station by default)."""
    if settings is None:
        return TOKYO_STATION
    fb = settings.geolocation.fallback
    return GeoPoint(lat=fb.lat, lng=fb.lng)


def build_geolocation_source(settings: Settings, *, client_ip: str | None = None) -> GeolocationSource | None:
    """Build the configured source; None means "no capability", i.e. use the fallback."""
    if settings.geolocation.provider == "ip":
        return IpGeolocation(
            settings.geolocation.ip_lookup_url,
            ip=client_ip,
            timeout_seconds=settings.app.http_timeout_seconds,
        )
    return None


async def locate(source: GeolocationSource | None, *, fallback: GeoPoint = TOKYO_STATION) -> GeoPoint:
    """Resolve the caller's coordinate once; never raises, never retries."""
    if source is None:
        return fallback
    try:
        point = await source.current_position()
    except Exception as e:
        logger.warning("Geolocation failed, using fallback %.4f,%.4f: %s", fallback.lat, fallback.lng, e)
        return fallback
    if point is None:
        logger.info("Geolocation unavailable, using fallback %.4f,%.4f", fallback.lat, fallback.lng)
        return fallback
    return point
