from __future__ import annotations

import logging
from collections.abc import Sequence
from fractions import Fraction

from .aggregator import ensure_user, resolve_top, validate_limit
from .collaborative import collaborative_recommendations
from .content_based import content_based_recommendations
from .data_store import RecordStore
from .domain import Property, rank_scores

logger = logging.getLogger(__name__)

FUSION_WEIGHTS: dict[str, float] = {"collaborative": 0.6, "content": 0.4}


def fuse_rankings(
    collaborative: Sequence[Property],
    content: Sequence[Property],
    weights: dict[str, float] | None = None,
) -> dict[int, float]:
    """Rank-decay fusion: position i of n earns (n - i) × weight, summed per listing.

    Sums are taken over exact decimal weights, so 2 × 0.6 and 3 × 0.4 tie.
    """
    w = weights or FUSION_WEIGHTS
    totals: dict[int, Fraction] = {}
    for ranking, weight in ((collaborative, w["collaborative"]), (content, w["content"])):
        exact = Fraction(str(weight))
        n = len(ranking)
        for i, prop in enumerate(ranking):
            totals[prop.id] = totals.get(prop.id, Fraction(0)) + (n - i) * exact
    return {pid: float(total) for pid, total in totals.items()}


def get_recommendations(store: RecordStore, user_id: int, limit: int = 10) -> list[Property]:
    """Blend collaborative and content-based rankings into one top-*limit* list."""
    validate_limit(limit)
    ensure_user(store, user_id)

    pool = limit * 2
    cf = collaborative_recommendations(store, user_id, pool)
    cb = content_based_recommendations(store, user_id, pool)

    scores = fuse_rankings(cf, cb)
    logger.debug("[HYBRID] user=%s cf=%d cb=%d merged=%d", user_id, len(cf), len(cb), len(scores))

    ranked = rank_scores(scores)
    return resolve_top(store, (c.property_id for c in ranked), limit, require_available=False)
