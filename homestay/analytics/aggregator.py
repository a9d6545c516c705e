from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "recommendation"]
    interactions = [e for e in events if e["type"] == "interaction"]
    total = len(requests)

    # Average response time
    times = [r["response_time_ms"] for r in requests if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Requests per strategy
    strategy_counter: Counter[str] = Counter(r.get("strategy", "unknown") for r in requests)

    # Most recommended listings
    property_counter: Counter[int] = Counter()
    for r in requests:
        for pid in r.get("property_ids", []) or []:
            property_counter[pid] += 1
    top_properties = [{"property_id": p, "count": c} for p, c in property_counter.most_common(10)]

    empty_results = sum(1 for r in requests if r.get("results_returned", 0) == 0)

    # Cache stats
    cache_hits = sum(1 for r in requests if r.get("cache_hit"))
    cache_misses = total - cache_hits

    # Interactions by kind
    kind_counter: Counter[str] = Counter(i.get("kind", "unknown") for i in interactions)

    return {
        "total_requests": total,
        "avg_response_time_ms": avg_time,
        "requests_by_strategy": dict(strategy_counter),
        "top_recommended_properties": top_properties,
        "empty_results": empty_results,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
        "interactions": {
            "total": len(interactions),
            "by_kind": dict(kind_counter),
        },
    }
