from unittest.mock import patch

import pytest

from conftest import FakeResponse
from watermark_engine.settings import DEFAULT_SETTINGS
from watermark_engine.settings_cache import (
    SessionSettingsCache,
    TTLSettingsCache,
    fetch_settings_over_http,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingFetcher:
    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.record


@pytest.fixture
def clock():
    return FakeClock()


def test_ttl_cache_serves_cached_value_within_window(clock):
    fetcher = CountingFetcher({"enabled": True})
    cache = TTLSettingsCache(fetcher, ttl_seconds=60, clock=clock)

    first = cache.get()
    clock.now += 59
    second = cache.get()

    assert first.enabled is True
    assert second is first
    assert fetcher.calls == 1


def test_ttl_cache_refetches_after_expiry(clock):
    fetcher = CountingFetcher({"opacity": 40})
    cache = TTLSettingsCache(fetcher, ttl_seconds=60, clock=clock)

    cache.get()
    clock.now += 60
    fetcher.record = {"opacity": 70}
    assert cache.get().opacity == 70
    assert fetcher.calls == 2

    # The TTL clock restarted at the refetch
    clock.now += 30
    cache.get()
    assert fetcher.calls == 2


def test_ttl_cache_invalidate_forces_refetch(clock):
    fetcher = CountingFetcher({"text": "Old"})
    cache = TTLSettingsCache(fetcher, ttl_seconds=60, clock=clock)
    cache.get()

    fetcher.record = {"text": "New"}
    cache.invalidate()
    assert cache.get().text == "New"
    assert fetcher.calls == 2


def test_ttl_cache_merges_partial_record_with_defaults(clock):
    cache = TTLSettingsCache(CountingFetcher({"enabled": True}), clock=clock)
    settings = cache.get()
    assert settings.enabled is True
    assert settings.position == DEFAULT_SETTINGS.position
    assert settings.padding == DEFAULT_SETTINGS.padding


def test_ttl_cache_missing_row_yields_defaults(clock):
    cache = TTLSettingsCache(CountingFetcher(None), clock=clock)
    assert cache.get() == DEFAULT_SETTINGS


def test_ttl_cache_fetch_failure_returns_defaults_without_caching(clock):
    fetcher = CountingFetcher(error=ConnectionError("db down"))
    cache = TTLSettingsCache(fetcher, clock=clock)

    assert cache.get() is DEFAULT_SETTINGS
    fetcher.error = None
    fetcher.record = {"enabled": True}
    assert cache.get().enabled is True
    assert fetcher.calls == 2


def test_session_cache_fetches_once():
    fetcher = CountingFetcher({"enabled": True})
    cache = SessionSettingsCache(fetcher)

    assert cache.get().enabled is True
    assert cache.get().enabled is True
    assert fetcher.calls == 1


def test_session_cache_reset():
    fetcher = CountingFetcher({"text": "A"})
    cache = SessionSettingsCache(fetcher)
    cache.get()

    fetcher.record = {"text": "B"}
    cache.reset()
    assert cache.get().text == "B"
    assert fetcher.calls == 2


def test_session_cache_fetch_failure_retries_next_time():
    fetcher = CountingFetcher(error=RuntimeError("offline"))
    cache = SessionSettingsCache(fetcher)
    assert cache.get() is DEFAULT_SETTINGS
    fetcher.error = None
    cache.get()
    assert fetcher.calls == 2


def test_http_fetcher_returns_json_body():
    body = {"enabled": True, "logoUrl": "https://cdn.example.com/l.png", "type": "logo"}
    with patch("watermark_engine.settings_cache.requests.get", return_value=FakeResponse(json_body=body)) as get:
        cache = SessionSettingsCache(fetch_settings_over_http("https://site.example.com/api/settings/watermark"))
        settings = cache.get()

    get.assert_called_once_with("https://site.example.com/api/settings/watermark", timeout=10)
    assert settings.render_mode == "logo"


def test_http_fetcher_error_falls_back_to_defaults():
    with patch("watermark_engine.settings_cache.requests.get", return_value=FakeResponse(status_code=500)):
        cache = SessionSettingsCache(fetch_settings_over_http("https://site.example.com/api/settings/watermark"))
        assert cache.get() is DEFAULT_SETTINGS
