from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from homestay.app import app
from homestay.recommendations.cache import (
    cache_generation,
    cache_get,
    cache_set,
    clear_cache,
    flush_entries,
    get_cache_stats,
    invalidate_strategies,
    invalidate_user,
)
from homestay.recommendations.models import Strategy
from homestay.recommendations.retrieval import ENGINES, recommend

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "alice", "password": "alice123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


# ── Cache module ─────────────────────────────────────────────────────────


def test_get_after_set_hits():
    cache_set("hybrid", 1, 5, ["a"])
    assert cache_get("hybrid", 1, 5) == ["a"]
    assert cache_get("hybrid", 1, 6) is None
    stats = get_cache_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0


def test_expired_entry_is_a_miss():
    with patch("homestay.recommendations.cache.time.time", return_value=1000.0):
        cache_set("hybrid", 1, 5, ["a"])
    with patch("homestay.recommendations.cache.time.time", return_value=1000.0 + 61):
        assert cache_get("hybrid", 1, 5, ttl=60) is None
    assert get_cache_stats()["size"] == 0


def test_invalidate_user_keeps_other_users():
    cache_set("hybrid", 1, 5, ["a"])
    cache_set("collaborative", 1, 10, ["b"])
    cache_set("hybrid", 2, 5, ["c"])
    assert invalidate_user(1) == 2
    assert cache_get("hybrid", 2, 5) == ["c"]
    assert get_cache_stats()["invalidations"] == 2


def test_invalidate_strategies_spans_users():
    cache_set("hybrid", 1, 5, ["a"])
    cache_set("collaborative", 2, 5, ["b"])
    cache_set("content_based", 1, 5, ["c"])
    assert invalidate_strategies(["hybrid", "collaborative"]) == 2
    assert cache_get("content_based", 1, 5) == ["c"]


def test_set_after_invalidation_is_discarded():
    generation = cache_generation()
    invalidate_user(42)
    assert cache_set("hybrid", 1, 5, ["stale"], generation=generation) is False
    assert cache_get("hybrid", 1, 5) is None
    assert cache_set("hybrid", 1, 5, ["fresh"], generation=cache_generation()) is True


def test_result_computed_across_a_flush_is_not_cached():
    def engine(store, user_id, limit):
        flush_entries()
        return []

    with patch.dict(ENGINES, {Strategy.collaborative: engine}):
        resp = recommend(Strategy.collaborative, 1, 5)
    assert resp.recommendations == []
    assert get_cache_stats()["size"] == 0


def test_flush_keeps_counters():
    cache_set("hybrid", 1, 5, ["a"])
    cache_get("hybrid", 1, 5)
    assert flush_entries() == 1
    stats = get_cache_stats()
    assert stats["size"] == 0
    assert stats["hits"] == 1


def test_clear_resets_counters():
    cache_set("hybrid", 1, 5, ["a"])
    cache_get("hybrid", 1, 5)
    clear_cache()
    assert get_cache_stats() == {"size": 0, "hits": 0, "misses": 0, "invalidations": 0, "hit_rate": 0.0}


# ── Through the API ──────────────────────────────────────────────────────


def test_cache_miss_then_hit():
    _login_user(client)
    resp1 = client.get("/api/recommendations", params={"limit": 3})
    assert resp1.status_code == 200
    assert resp1.json()["cache_hit"] is False

    resp2 = client.get("/api/recommendations", params={"limit": 3})
    assert resp2.json()["cache_hit"] is True
    assert resp2.json()["recommendations"] == resp1.json()["recommendations"]
    stats = get_cache_stats()
    assert stats["misses"] == 1
    assert stats["hits"] == 1


def test_strategy_and_limit_are_part_of_the_key():
    _login_user(client)
    client.get("/api/recommendations", params={"limit": 3})
    client.get("/api/recommendations", params={"limit": 4})
    client.get("/api/recommendations/collaborative", params={"limit": 3})
    stats = get_cache_stats()
    assert stats["misses"] == 3
    assert stats["hits"] == 0


def test_cache_stats_endpoint():
    _login_user(client)
    client.get("/api/recommendations", params={"limit": 3})
    client.get("/api/recommendations", params={"limit": 3})
    _login_admin(client)
    resp = client.get("/cache/stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["hits"] == 1
    assert body["size"] == 1
    assert "hit_rate" in body


def test_cache_clear_endpoint():
    _login_user(client)
    client.get("/api/recommendations")
    _login_admin(client)
    assert client.post("/cache/clear").json() == {"status": "cleared"}
    assert client.get("/cache/stats").json()["size"] == 0
