import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from fastapi import Request

_MISSING = object()

SHIPPING_REGIONS_KEY = "shipping_regions"
GST_SETTINGS_KEY = "gst_settings"


class TTLCache:
    """
    Small key/value cache where every entry expires after its TTL.

    The clock is injectable so expiry can be driven from tests; expired
    entries are dropped lazily when touched.
    """

    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock() + ttl)

    def _lookup(self, key: Hashable):
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return _MISSING

        return value

    def get(self, key: Hashable, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def has(self, key: Hashable) -> bool:
        return self._lookup(key) is not _MISSING

    def delete(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def get_or_set(self, key: Hashable, loader: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            value = loader()
            self.set(key, value, ttl)
        return value

    def stats(self) -> dict:
        # purge first so the numbers only count live entries
        for key in list(self._entries):
            self._lookup(key)
        return {"size": len(self._entries), "keys": list(self._entries)}


def get_config_cache(request: Request) -> TTLCache:
    return request.app.state.config_cache
