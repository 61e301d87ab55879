from __future__ import annotations

import threading

from cachetools import TTLCache
from sqlalchemy.orm import Session

from reviewhub.services import moderation

from .serialize import serialize_dashboard

# The dashboard runs a handful of aggregate queries; admins refresh it often.
_dashboard_cache: TTLCache = TTLCache(maxsize=1, ttl=30)
_cache_lock = threading.Lock()
_KEY = "dashboard"


def build_dashboard(db: Session) -> dict:
    with _cache_lock:
        cached = _dashboard_cache.get(_KEY)
    if cached is not None:
        return cached

    data = serialize_dashboard(moderation.get_dashboard_stats(db))
    with _cache_lock:
        _dashboard_cache[_KEY] = data
    return data


def invalidate_dashboard() -> None:
    with _cache_lock:
        _dashboard_cache.clear()
