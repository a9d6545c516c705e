"""
Content-based filtering over listing attributes.

A preference profile is built from the listings a user liked (favorited,
booked, or rated 4+). Every other available listing is scored against it:

    0.3  × city frequency
  + 0.2  × property-type frequency
  + 0.25 × price closeness      1 / (1 + |price - avg| / avg)
  + 0.15 × bedroom closeness    1 / (1 + |bedrooms - avg|)
  + 0.10 × rating / 5

The city and type terms are raw like-counts rather than shares, so users
with many likes in one city see that city weigh heavily.
"""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from decimal import Decimal

from .aggregator import load_interactions, resolve_top, validate_limit
from .data_store import RecordStore
from .domain import PreferenceProfile, Property, rank_scores
from .fallback import top_rated_fallback

logger = logging.getLogger(__name__)

CONTENT_WEIGHTS: dict[str, float] = {
    "city": 0.3,
    "type": 0.2,
    "price": 0.25,
    "bedrooms": 0.15,
    "rating": 0.10,
}


def build_profile(liked: Sequence[Property]) -> PreferenceProfile:
    """Summarise liked listings. *liked* must not be empty."""
    city_freq: Counter[str] = Counter()
    type_freq: Counter[str] = Counter()
    total_price = Decimal(0)
    total_bedrooms = 0

    for prop in liked:
        city_freq[prop.city] += 1
        if prop.property_type is not None:
            type_freq[prop.property_type] += 1
        total_price += prop.price
        total_bedrooms += prop.bedrooms

    return PreferenceProfile(
        city_freq=city_freq,
        type_freq=type_freq,
        avg_price=total_price / len(liked),
        avg_bedrooms=int(total_bedrooms / len(liked)),
    )


def _price_closeness(price: Decimal, avg_price: Decimal) -> float:
    if avg_price <= 0:
        logger.debug("[CB] degenerate mean price %s, price term zeroed", avg_price)
        return 0.0
    return 1.0 / (1.0 + float(abs(price - avg_price) / avg_price))


def score_property(prop: Property, profile: PreferenceProfile, weights: dict[str, float] | None = None) -> float:
    w = weights or CONTENT_WEIGHTS

    city_score = profile.city_freq.get(prop.city, 0)
    type_score = profile.type_freq.get(prop.property_type, 0) if prop.property_type is not None else 0
    price_score = _price_closeness(prop.price, profile.avg_price)
    bedroom_score = 1.0 / (1.0 + abs(prop.bedrooms - profile.avg_bedrooms))
    rating_score = prop.rating / 5.0

    return (
        w["city"] * city_score
        + w["type"] * type_score
        + w["price"] * price_score
        + w["bedrooms"] * bedroom_score
        + w["rating"] * rating_score
    )


def content_based_recommendations(store: RecordStore, user_id: int, limit: int = 10) -> list[Property]:
    validate_limit(limit)
    data = load_interactions(store, user_id)

    liked: list[Property] = []
    for interaction in data.own_interactions:
        if not interaction.is_liked:
            continue
        prop = store.find_property(interaction.property_id)
        if prop is None:
            logger.debug("[CB] liked property %s no longer exists", interaction.property_id)
            continue
        liked.append(prop)

    if not liked:
        logger.debug("[CB] user=%s has no liked listings, using rating fallback", user_id)
        return top_rated_fallback(store, limit)

    profile = build_profile(liked)
    exclude = data.interacted_ids

    scores: dict[int, float] = {}
    for prop in store.find_all_available():
        if prop.id in exclude:
            continue
        scores[prop.id] = score_property(prop, profile)

    logger.debug("[CB] user=%s liked=%d scored=%d", user_id, len(liked), len(scores))
    ranked = rank_scores(scores)
    return resolve_top(store, (c.property_id for c in ranked), limit)
