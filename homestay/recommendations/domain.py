from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import NamedTuple


class InteractionKind(str, Enum):
    VIEW = "VIEW"
    FAVORITE = "FAVORITE"
    BOOK = "BOOK"
    REVIEW = "REVIEW"


@dataclass(frozen=True)
class Property:
    id: int
    title: str
    city: str
    property_type: str | None
    price: Decimal
    bedrooms: int
    available: bool = True
    rating: float = 0.0
    booking_count: int = 0
    view_count: int = 0


@dataclass(frozen=True)
class User:
    id: int
    username: str
    role: str = "user"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Interaction:
    user_id: int
    property_id: int
    kind: InteractionKind
    rating: int | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def effective_rating(self) -> int | None:
        """The rating when it is an integer in [1, 5], otherwise ``None``."""
        if isinstance(self.rating, int) and not isinstance(self.rating, bool) and 1 <= self.rating <= 5:
            return self.rating
        return None

    @property
    def is_liked(self) -> bool:
        """Favorites and bookings always count; anything else needs a rating of 4+."""
        if self.kind in (InteractionKind.FAVORITE, InteractionKind.BOOK):
            return True
        if self.kind in (InteractionKind.VIEW, InteractionKind.REVIEW):
            rating = self.effective_rating
            return rating is not None and rating >= 4
        raise ValueError(f"Unhandled interaction kind: {self.kind!r}")


@dataclass(frozen=True)
class PreferenceProfile:
    city_freq: Counter
    type_freq: Counter
    avg_price: Decimal
    avg_bedrooms: int


class ScoredCandidate(NamedTuple):
    property_id: int
    score: float


def rank_scores(scores: dict[int, float]) -> list[ScoredCandidate]:
    """Order by score descending, then property id ascending for equal scores."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [ScoredCandidate(pid, score) for pid, score in ranked]
