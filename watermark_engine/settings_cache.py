"""
Settings cache module.

Two cache flavours with the same get()/invalidate() contract:
- TTLSettingsCache: one per server process, refreshed after a fixed window.
- SessionSettingsCache: one per client session, fetched once.

Both merge whatever the fetcher returns over the compiled-in defaults, so a
partially populated record never reaches the renderers with missing fields.
No locking is done: two concurrent refreshes recompute the same value from
the same source of truth.
"""

import time
from typing import Any, Callable, Dict, Optional

import requests

from .config import CONFIG
from .logger import get_logger
from .settings import DEFAULT_SETTINGS, WatermarkSettings

logger = get_logger(__name__)

SettingsFetcher = Callable[[], Optional[Dict[str, Any]]]


class TTLSettingsCache:
    """Process-wide settings cache with a fixed time-to-live."""

    def __init__(self, fetcher: SettingsFetcher, ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._fetcher = fetcher
        self._ttl = CONFIG['cache']['server_ttl_seconds'] if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._value: Optional[WatermarkSettings] = None
        self._fetched_at = 0.0

    def get(self) -> WatermarkSettings:
        now = self._clock()
        if self._value is not None and now - self._fetched_at < self._ttl:
            return self._value

        try:
            record = self._fetcher()
        except Exception as e:
            # Not cached, so the next call retries the store
            logger.error(f"Failed to fetch watermark settings, using defaults: {e}", exc_info=True)
            return DEFAULT_SETTINGS

        self._value = WatermarkSettings.from_dict(record)
        self._fetched_at = now
        logger.debug(f"Watermark settings refreshed (ttl {self._ttl}s)")
        return self._value

    def invalidate(self):
        """Force the next get() to hit the store regardless of the remaining TTL."""
        self._value = None
        self._fetched_at = 0.0


class SessionSettingsCache:
    """Client-side settings cache, fetched at most once per session."""

    def __init__(self, fetcher: SettingsFetcher):
        self._fetcher = fetcher
        self._value: Optional[WatermarkSettings] = None

    def get(self) -> WatermarkSettings:
        if self._value is not None:
            return self._value
        try:
            record = self._fetcher()
        except Exception as e:
            logger.error(f"Failed to fetch watermark settings, using defaults: {e}", exc_info=True)
            return DEFAULT_SETTINGS
        self._value = WatermarkSettings.from_dict(record)
        return self._value

    def invalidate(self):
        self._value = None

    reset = invalidate


def fetch_settings_over_http(url: str, timeout: Optional[float] = 10) -> SettingsFetcher:
    """Build a fetcher that GETs the settings endpoint and returns its JSON body."""

    def fetcher() -> Optional[Dict[str, Any]]:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()

    return fetcher
