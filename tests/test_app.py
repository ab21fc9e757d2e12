from jpycmap.api.app import LOCAL_ORIGIN_REGEX, cors_options
from jpycmap.config.settings import ApiSettings, get_settings


def test_local_frontends_are_allowed_by_default():
    options = cors_options(ApiSettings())
    assert options["allow_origins"] == []
    assert options["allow_origin_regex"] == LOCAL_ORIGIN_REGEX
    assert "Authorization" in options["allow_headers"]
    assert options["allow_credentials"] is False


def test_listed_origins_replace_the_local_allowance():
    options = cors_options(ApiSettings(cors_origins=["https://map.example.com"]))
    assert options["allow_origins"] == ["https://map.example.com"]
    assert options["allow_origin_regex"] is None


def test_cors_can_be_turned_off():
    assert cors_options(ApiSettings(cors_allow_local=False)) is None


def test_cors_origins_come_from_env(monkeypatch):
    monkeypatch.setenv("JPYCMAP_CORS_ORIGINS", "https://map.example.com, http://localhost:3000 ,")
    get_settings.cache_clear()
    assert get_settings().api.cors_origins == ["https://map.example.com", "http://localhost:3000"]
