import asyncio

import httpx

from jpycmap.config.settings import get_settings
from jpycmap.core.geo import TOKYO_STATION, GeoPoint
from jpycmap.core.geolocation import (
    FixedGeolocation,
    IpGeolocation,
    build_geolocation_source,
    fallback_point,
    locate,
)


class _FailingSource:
    def __init__(self):
        self.calls = 0

    async def current_position(self):
        self.calls += 1
        raise PermissionError("user denied geolocation")


class _EmptySource:
    async def current_position(self):
        return None


def test_locate_without_source_uses_tokyo_station():
    assert asyncio.run(locate(None)) == TOKYO_STATION
    assert TOKYO_STATION == GeoPoint(lat=35.6812, lng=139.7671)


def test_locate_returns_reported_position():
    here = GeoPoint(lat=43.0687, lng=141.3508)
    assert asyncio.run(locate(FixedGeolocation(here))) == here


def test_locate_falls_back_once_on_failure_without_retry():
    source = _FailingSource()
    assert asyncio.run(locate(source)) == TOKYO_STATION
    assert source.calls == 1


def test_locate_falls_back_when_position_unavailable():
    custom = GeoPoint(lat=34.0, lng=135.0)
    assert asyncio.run(locate(_EmptySource(), fallback=custom)) == custom


def test_ip_geolocation_parses_ip_api_payload(monkeypatch):
    seen = {}

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        seen["url"] = url
        return {"status": "success", "lat": 35.0, "lon": 135.75}

    monkeypatch.setattr("jpycmap.core.geolocation.get_json", fake_get_json)

    source = IpGeolocation("http://ip-api.com/json/", ip="203.0.113.7")
    assert asyncio.run(locate(source)) == GeoPoint(lat=35.0, lng=135.75)
    assert seen["url"] == "http://ip-api.com/json/203.0.113.7"


def test_ip_geolocation_transport_error_falls_back(monkeypatch):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        raise httpx.ConnectError("offline")

    monkeypatch.setattr("jpycmap.core.geolocation.get_json", fake_get_json)

    assert asyncio.run(locate(IpGeolocation("http://ip-api.com/json/"))) == TOKYO_STATION


def test_ip_geolocation_failure_status_falls_back(monkeypatch):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        return {"status": "fail", "message": "private range"}

    monkeypatch.setattr("jpycmap.core.geolocation.get_json", fake_get_json)

    assert asyncio.run(locate(IpGeolocation("http://ip-api.com/json/"))) == TOKYO_STATION


def test_build_geolocation_source_follows_provider_setting(monkeypatch):
    monkeypatch.delenv("JPYCMAP_GEOLOCATION_PROVIDER", raising=False)
    get_settings.cache_clear()
    settings = get_settings()
    assert build_geolocation_source(settings) is None

    geo = settings.geolocation.model_copy(update={"provider": "ip"})
    ip_settings = settings.model_copy(update={"geolocation": geo})
    assert isinstance(build_geolocation_source(ip_settings, client_ip="198.51.100.1"), IpGeolocation)


def test_fallback_point_comes_from_settings():
    assert fallback_point(get_settings()) == TOKYO_STATION
