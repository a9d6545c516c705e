"""
Read side of the recommendation engine.

Everything here is a pure read of the record store: the engine keeps no state
between calls, so two requests for the same user and the same store contents
always see the same inputs.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .data_store import RecordStore
from .domain import Interaction, Property
from .errors import UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserInteractions:
    user_id: int
    own_interactions: list[Interaction]
    user_to_properties: dict[int, set[int]]

    @property
    def interacted_ids(self) -> set[int]:
        return {i.property_id for i in self.own_interactions}


def validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return limit


def ensure_user(store: RecordStore, user_id: int) -> None:
    if not store.user_exists(user_id):
        raise UserNotFoundError(user_id)


def build_user_property_index(interactions: Iterable[Interaction]) -> dict[int, set[int]]:
    """Map every user with at least one interaction to their distinct property ids."""
    index: dict[int, set[int]] = {}
    for interaction in interactions:
        index.setdefault(interaction.user_id, set()).add(interaction.property_id)
    return index


def load_interactions(store: RecordStore, user_id: int) -> UserInteractions:
    """Load a user's own interactions plus the global user -> properties index.

    Raises ``UserNotFoundError`` when the user is unknown.
    """
    ensure_user(store, user_id)
    own = store.find_interactions_by_user(user_id)
    index = build_user_property_index(store.find_all_interactions())
    return UserInteractions(user_id=user_id, own_interactions=own, user_to_properties=index)


def resolve_top(
    store: RecordStore,
    ranked_ids: Iterable[int],
    limit: int,
    require_available: bool = True,
) -> list[Property]:
    """Resolve ranked ids into at most *limit* properties, keeping rank order.

    Unavailable listings are passed over. An id that no longer resolves still
    takes its slot and is dropped, so the result can be shorter than *limit*.
    """
    resolved: list[Property] = []
    slots = 0
    for pid in ranked_ids:
        if slots >= limit:
            break
        prop = store.find_property(pid)
        if prop is None:
            logger.debug("Skipping dangling property reference %s", pid)
            slots += 1
            continue
        if require_available and not prop.available:
            continue
        resolved.append(prop)
        slots += 1
    return resolved
