from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

from .config import DEFAULT_RECOMMENDER_CONFIG

CacheKey = tuple[str, int, int]

_cache: dict[CacheKey, dict[str, Any]] = {}
_lock = threading.Lock()
_hits: int = 0
_misses: int = 0
_invalidations: int = 0
# Bumped by every invalidation; a result computed under an older generation is not stored.
_generation: int = 0


def _make_key(strategy: str, user_id: int, limit: int) -> CacheKey:
    return (strategy, user_id, limit)


def cache_get(
    strategy: str,
    user_id: int,
    limit: int,
    ttl: float = DEFAULT_RECOMMENDER_CONFIG.cache_ttl_seconds,
) -> Any | None:
    global _hits, _misses
    key = _make_key(strategy, user_id, limit)
    with _lock:
        entry = _cache.get(key)
        if entry and time.time() - entry["created_at"] < ttl:
            _hits += 1
            return entry["value"]
        if entry:
            del _cache[key]
        _misses += 1
        return None


def cache_generation() -> int:
    with _lock:
        return _generation


def cache_set(
    strategy: str,
    user_id: int,
    limit: int,
    value: Any,
    generation: int | None = None,
) -> bool:
    """Store *value* unless an invalidation happened since *generation* was read."""
    key = _make_key(strategy, user_id, limit)
    with _lock:
        if generation is not None and generation != _generation:
            return False
        _cache[key] = {"value": value, "created_at": time.time()}
        return True


def invalidate_user(user_id: int) -> int:
    """Drop every cached result for *user_id*. Returns the number removed."""
    return _drop(lambda key: key[1] == user_id)


def invalidate_strategies(strategies: Iterable[str]) -> int:
    """Drop every user's cached results for the given strategies."""
    names = set(strategies)
    return _drop(lambda key: key[0] in names)


def _drop(match: Callable[[CacheKey], bool]) -> int:
    global _invalidations, _generation
    with _lock:
        stale = [key for key in _cache if match(key)]
        for key in stale:
            del _cache[key]
        _invalidations += len(stale)
        _generation += 1
        return len(stale)


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        return {
            "size": len(_cache),
            "hits": _hits,
            "misses": _misses,
            "invalidations": _invalidations,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses, _invalidations, _generation
    with _lock:
        _cache.clear()
        _generation += 1
        _hits = 0
        _misses = 0
        _invalidations = 0


def flush_entries() -> int:
    """Drop all cached results but keep the hit/miss counters."""
    return _drop(lambda key: True)
