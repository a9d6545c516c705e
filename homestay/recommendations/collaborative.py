"""
User-based collaborative filtering.

Users are compared by the Jaccard overlap of the sets of listings they have
interacted with. Every listing a similar user touched (and the current user
has not) collects that user's similarity; listings are ranked by the total.
Similarities are exact fractions so equal totals stay equal and fall through
to the id tie-break.
"""
from __future__ import annotations

import logging
from fractions import Fraction

from .aggregator import load_interactions, resolve_top, validate_limit
from .data_store import RecordStore
from .domain import Property, rank_scores
from .fallback import popular_fallback

logger = logging.getLogger(__name__)


def jaccard_similarity(a: set[int], b: set[int]) -> Fraction:
    if not a and not b:
        return Fraction(0)
    return Fraction(len(a & b), len(a | b))


def similar_users(
    user_id: int,
    mine: set[int],
    user_to_properties: dict[int, set[int]],
) -> dict[int, Fraction]:
    """Other users with a strictly positive similarity to *mine*."""
    sims: dict[int, Fraction] = {}
    for other_id, theirs in user_to_properties.items():
        if other_id == user_id:
            continue
        sim = jaccard_similarity(mine, theirs)
        if sim > 0:
            sims[other_id] = sim
    return sims


def score_candidates(
    mine: set[int],
    sims: dict[int, Fraction],
    user_to_properties: dict[int, set[int]],
) -> dict[int, float]:
    totals: dict[int, Fraction] = {}
    for other_id, sim in sims.items():
        for pid in user_to_properties[other_id]:
            if pid in mine:
                continue
            totals[pid] = totals.get(pid, Fraction(0)) + sim
    return {pid: float(total) for pid, total in totals.items()}


def collaborative_recommendations(store: RecordStore, user_id: int, limit: int = 10) -> list[Property]:
    validate_limit(limit)
    data = load_interactions(store, user_id)

    mine = data.user_to_properties.get(user_id)
    if not data.own_interactions or mine is None:
        logger.debug("[CF] user=%s has no history, using popularity fallback", user_id)
        return popular_fallback(store, limit)

    sims = similar_users(user_id, mine, data.user_to_properties)
    scores = score_candidates(mine, sims, data.user_to_properties)
    logger.debug("[CF] user=%s similar_users=%d candidates=%d", user_id, len(sims), len(scores))

    ranked = rank_scores(scores)
    return resolve_top(store, (c.property_id for c in ranked), limit)
