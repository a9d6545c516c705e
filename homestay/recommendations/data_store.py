from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Iterable

from .domain import Interaction, InteractionKind, Property, User

logger = logging.getLogger(__name__)


class RecordStore:
    """In-memory users, properties and interactions.

    Reads hand out copies so callers never observe a list or dict that is
    being mutated by another request thread.
    """

    def __init__(
        self,
        properties: Iterable[Property] = (),
        users: Iterable[User] = (),
        interactions: Iterable[Interaction] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._properties: dict[int, Property] = {p.id: p for p in properties}
        self._users: dict[int, User] = {u.id: u for u in users}
        self._interactions: list[Interaction] = list(interactions)

    # ── Users ────────────────────────────────────────────────────────────

    def find_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def user_exists(self, user_id: int) -> bool:
        return self.find_user(user_id) is not None

    # ── Properties ───────────────────────────────────────────────────────

    def find_property(self, property_id: int) -> Property | None:
        with self._lock:
            return self._properties.get(property_id)

    def find_all_available(self) -> list[Property]:
        with self._lock:
            return sorted(
                (p for p in self._properties.values() if p.available),
                key=lambda p: p.id,
            )

    def find_top_by_booking_count(self, n: int) -> list[Property]:
        """Top *n* available properties by booking count, ties by id."""
        available = self.find_all_available()
        available.sort(key=lambda p: (-p.booking_count, p.id))
        return available[:n]

    def find_top_by_rating(self, n: int) -> list[Property]:
        """Top *n* available properties by rating, ties by id."""
        available = self.find_all_available()
        available.sort(key=lambda p: (-p.rating, p.id))
        return available[:n]

    def increment_booking_count(self, property_id: int) -> Property | None:
        return self._bump(property_id, "booking_count")

    def increment_view_count(self, property_id: int) -> Property | None:
        return self._bump(property_id, "view_count")

    def _bump(self, property_id: int, counter: str) -> Property | None:
        with self._lock:
            current = self._properties.get(property_id)
            if current is None:
                return None
            updated = dataclasses.replace(current, **{counter: getattr(current, counter) + 1})
            self._properties[property_id] = updated
            return updated

    def remove_property(self, property_id: int) -> bool:
        """Delete a listing. Interactions that point at it are left in place."""
        with self._lock:
            return self._properties.pop(property_id, None) is not None

    # ── Interactions ─────────────────────────────────────────────────────

    def find_interactions_by_user(self, user_id: int) -> list[Interaction]:
        with self._lock:
            return [i for i in self._interactions if i.user_id == user_id]

    def find_all_interactions(self) -> list[Interaction]:
        with self._lock:
            return list(self._interactions)

    def insert_interaction(
        self,
        user_id: int,
        property_id: int,
        kind: InteractionKind,
        rating: int | None = None,
    ) -> Interaction:
        interaction = Interaction(
            user_id=user_id,
            property_id=property_id,
            kind=kind,
            rating=rating,
        )
        with self._lock:
            self._interactions.append(interaction)
        return interaction

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "users": len(self._users),
                "properties": len(self._properties),
                "interactions": len(self._interactions),
            }


_store: RecordStore | None = None
_store_lock = threading.Lock()


def get_store() -> RecordStore:
    """Return the process-wide store, loading the seed data on first call."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                from ..data_ingestion.ingest import build_store

                _store = build_store()
                logger.info("Record store loaded: %s", _store.stats())
    return _store


def set_store(store: RecordStore) -> None:
    global _store
    _store = store


def reset_store() -> None:
    """Forget the current store; the next ``get_store()`` reloads seed data."""
    global _store
    _store = None
