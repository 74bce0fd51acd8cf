"""
Root conftest.py for pytest configuration

Registers the test markers used across the suite and keeps cached settings
and templates from leaking between tests.
"""
import pytest

MARKERS = {
    "unit": "Fast, isolated unit tests",
    "integration": "Tests spanning several modules",
    "critical": "Tests guarding fundamental behaviour",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


@pytest.fixture(autouse=True)
def reset_caches():
    """Clear settings and template caches around every test"""
    from core.config import get_settings
    from criteria.templates import clear_template_cache

    get_settings.cache_clear()
    clear_template_cache()
    yield
    get_settings.cache_clear()
    clear_template_cache()
