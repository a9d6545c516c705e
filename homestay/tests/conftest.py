from __future__ import annotations

from decimal import Decimal

import pytest

from homestay.analytics.store import clear_events
from homestay.recommendations.cache import clear_cache
from homestay.recommendations.data_store import RecordStore, reset_store
from homestay.recommendations.domain import Interaction, InteractionKind, Property, User


@pytest.fixture(autouse=True)
def _fresh_state():
    reset_store()
    clear_cache()
    clear_events()
    yield
    reset_store()


@pytest.fixture
def make_property():
    def _make(
        pid: int,
        city: str = "Hangzhou",
        property_type: str | None = "apartment",
        price: str = "400.00",
        bedrooms: int = 2,
        available: bool = True,
        rating: float = 4.0,
        booking_count: int = 0,
    ) -> Property:
        return Property(
            id=pid,
            title=f"Listing {pid}",
            city=city,
            property_type=property_type,
            price=Decimal(price),
            bedrooms=bedrooms,
            available=available,
            rating=rating,
            booking_count=booking_count,
        )

    return _make


@pytest.fixture
def make_store(make_property):
    """Build a store from listings and ``(user, property, kind[, rating])`` tuples.

    Every user id mentioned in an interaction exists; pass ``extra_users`` for
    users without history.
    """

    def _make(properties=None, interactions=(), extra_users=()) -> RecordStore:
        if properties is None:
            properties = [make_property(pid) for pid in range(1, 9)]
        records = []
        for row in interactions:
            user_id, property_id, kind = row[:3]
            rating = row[3] if len(row) > 3 else None
            records.append(Interaction(user_id, property_id, InteractionKind(kind), rating))
        user_ids = {r.user_id for r in records} | set(extra_users)
        users = [User(id=u, username=f"user{u}") for u in sorted(user_ids)]
        return RecordStore(properties=properties, users=users, interactions=records)

    return _make
