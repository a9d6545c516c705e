from __future__ import annotations

from .data_store import RecordStore
from .domain import Property

FALLBACK_POOL_SIZE = 10


def popular_fallback(store: RecordStore, limit: int) -> list[Property]:
    """Most-booked available listings, from a fixed pool of ten."""
    return store.find_top_by_booking_count(FALLBACK_POOL_SIZE)[:limit]


def top_rated_fallback(store: RecordStore, limit: int) -> list[Property]:
    """Best-rated available listings, from a fixed pool of ten."""
    return store.find_top_by_rating(FALLBACK_POOL_SIZE)[:limit]
