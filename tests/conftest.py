import pytest

from jpycmap.config.settings import get_settings
from jpycmap.core.env import load_dotenv_if_present


@pytest.fixture(autouse=True)
def _fresh_settings():
    # Settings and .env discovery are cached per process; tests that patch env vars need a clean load.
    get_settings.cache_clear()
    load_dotenv_if_present.cache_clear()
    yield
    get_settings.cache_clear()
    load_dotenv_if_present.cache_clear()
