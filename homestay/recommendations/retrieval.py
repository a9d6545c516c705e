from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..analytics.store import record_event
from .aggregator import ensure_user
from .cache import (
    cache_generation,
    cache_get,
    cache_set,
    flush_entries,
    invalidate_strategies,
    invalidate_user,
)
from .collaborative import collaborative_recommendations
from .config import DEFAULT_RECOMMENDER_CONFIG, RecommenderConfig
from .content_based import content_based_recommendations
from .data_store import RecordStore, get_store
from .domain import InteractionKind, Property
from .errors import PropertyNotFoundError
from .hybrid import get_recommendations
from .models import (
    InteractionOut,
    InteractionRequest,
    InteractionResponse,
    PropertyOut,
    RecommendationItem,
    RecommendationResponse,
    Strategy,
)

logger = logging.getLogger(__name__)

Engine = Callable[[RecordStore, int, int], list[Property]]

ENGINES: dict[Strategy, Engine] = {
    Strategy.hybrid: get_recommendations,
    Strategy.collaborative: collaborative_recommendations,
    Strategy.content_based: content_based_recommendations,
}

# Strategies whose results read other users' interactions.
INDEX_STRATEGIES = (Strategy.hybrid.value, Strategy.collaborative.value)


def recommend(
    strategy: Strategy,
    user_id: int,
    limit: int,
    config: RecommenderConfig = DEFAULT_RECOMMENDER_CONFIG,
) -> RecommendationResponse:
    """Serve one recommendation request, going through the result cache.

    ``UserNotFoundError`` from the engine propagates to the caller.
    """
    start_time = time.time()

    properties: list[Property] | None = None
    if config.cache_enabled:
        properties = cache_get(strategy.value, user_id, limit, ttl=config.cache_ttl_seconds)
    cache_hit = properties is not None

    if properties is None:
        generation = cache_generation()
        engine = ENGINES[strategy]
        properties = engine(get_store(), user_id, limit)
        if config.cache_enabled:
            cache_set(strategy.value, user_id, limit, properties, generation=generation)

    items = [
        RecommendationItem(rank=rank, property=PropertyOut.model_validate(prop))
        for rank, prop in enumerate(properties, start=1)
    ]

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("recommendation", {
        "strategy": strategy.value,
        "user_id": user_id,
        "limit": limit,
        "property_ids": [prop.id for prop in properties],
        "results_returned": len(items),
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
    })
    logger.info(
        "strategy=%s user=%s limit=%s returned=%d cache_hit=%s",
        strategy.value, user_id, limit, len(items), cache_hit,
    )

    return RecommendationResponse(
        user_id=user_id,
        strategy=strategy,
        recommendations=items,
        cache_hit=cache_hit,
    )


def record_interaction(user_id: int, request: InteractionRequest) -> InteractionResponse:
    """Append an interaction and invalidate the cached results it affects.

    A booking raises the listing's booking count, which reorders the
    popularity fallback for every user, so it flushes the whole cache.
    Any other interaction changes the user -> listings index behind every
    user's collaborative and hybrid results, so those are dropped for all
    users along with the acting user's content-based entries.
    """
    store = get_store()
    ensure_user(store, user_id)
    if store.find_property(request.property_id) is None:
        raise PropertyNotFoundError(request.property_id)

    interaction = store.insert_interaction(
        user_id=user_id,
        property_id=request.property_id,
        kind=request.kind,
        rating=request.rating,
    )

    if request.kind is InteractionKind.BOOK:
        store.increment_booking_count(request.property_id)
        removed = flush_entries()
    else:
        if request.kind is InteractionKind.VIEW:
            store.increment_view_count(request.property_id)
        removed = invalidate_user(user_id) + invalidate_strategies(INDEX_STRATEGIES)

    record_event("interaction", {
        "user_id": user_id,
        "property_id": request.property_id,
        "kind": request.kind.value,
        "rating": request.rating,
        "cache_entries_dropped": removed,
    })

    return InteractionResponse(
        status="recorded",
        interaction=InteractionOut.model_validate(interaction),
    )
