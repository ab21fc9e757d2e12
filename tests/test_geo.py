import pytest

from jpycmap.core.geo import TOKYO_STATION, GeoPoint, haversine_km


POINTS = [
    TOKYO_STATION,
    GeoPoint(lat=34.7025, lng=135.4959),  # Osaka Station
    GeoPoint(lat=-33.8688, lng=151.2093),
    GeoPoint(lat=0.0, lng=180.0),
    GeoPoint(lat=-90.0, lng=0.0),
]


def test_haversine_is_symmetric():
    for a in POINTS:
        for b in POINTS:
            assert haversine_km(a, b) == pytest.approx(haversine_km(b, a), abs=1e-9)


def test_haversine_same_point_is_zero():
    for p in POINTS:
        assert haversine_km(p, p) == pytest.approx(0.0, abs=1e-6)


def test_haversine_tokyo_to_osaka():
    # Straight-line distance between the two stations is a little over 400km.
    d = haversine_km(TOKYO_STATION, GeoPoint(lat=34.7025, lng=135.4959))
    assert 395 < d < 410


def test_haversine_antipodal_points_do_not_blow_up():
    d = haversine_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=0.0, lng=180.0))
    assert d == pytest.approx(3.141592653589793 * 6371, rel=1e-9)


def test_geopoint_rejects_out_of_range_coordinates():
    with pytest.raises(ValueError):
        GeoPoint(lat=91, lng=0)
    with pytest.raises(ValueError):
        GeoPoint(lat=0, lng=-180.5)
