import pytest

from jpycmap.config.settings import NearbySettings, get_logging_config, get_settings


def test_defaults_describe_tokyo_fallback_and_radius_range(monkeypatch):
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "JPYCMAP_GEOLOCATION_PROVIDER", "JPYCMAP_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.geolocation.fallback.lat == pytest.approx(35.6812)
    assert settings.geolocation.fallback.lng == pytest.approx(139.7671)
    assert settings.geolocation.provider == "none"
    assert settings.nearby.default_radius_km == 10
    assert (settings.nearby.min_radius_km, settings.nearby.max_radius_km) == (1, 50)
    assert settings.store.shops_table == "shops"
    assert settings.store.merchants_table == "online_merchants"


def test_env_overrides_store_credentials_and_provider(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("JPYCMAP_GEOLOCATION_PROVIDER", " IP ")
    monkeypatch.setenv("JPYCMAP_LOG_LEVEL", "DEBUG")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.store.configured
    assert settings.store.url == "https://proj.supabase.co"
    assert settings.geolocation.provider == "ip"
    assert settings.app.log_level == "DEBUG"


def test_external_config_file(monkeypatch, tmp_path):
    config = tmp_path / "jpycmap.yaml"
    config.write_text(
        "nearby:\n  default_radius_km: 5\n  min_radius_km: 1\n  max_radius_km: 20\n", encoding="utf-8"
    )
    monkeypatch.setenv("JPYCMAP_CONFIG_PATH", str(config))
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.nearby.default_radius_km == 5
    assert settings.nearby.max_radius_km == 20


def test_nearby_default_must_lie_in_range():
    with pytest.raises(ValueError):
        NearbySettings(default_radius_km=60, min_radius_km=1, max_radius_km=50)


def test_logging_config_is_a_dictconfig_mapping():
    config = get_logging_config()
    assert config["version"] == 1
    assert "console" in config["handlers"]
