"""
Hybrid property recommendation engine.

Responsibilities:
- Aggregate a user's interactions and the global user -> listings index.
- Score listings by user similarity (collaborative) and by attribute
  similarity to liked listings (content-based).
- Fall back to popular or top-rated listings when a signal has nothing to
  work with.
- Fuse both rankings by rank position into the final top-N list.
"""
from .collaborative import collaborative_recommendations
from .content_based import content_based_recommendations
from .hybrid import get_recommendations

__all__ = [
    "collaborative_recommendations",
    "content_based_recommendations",
    "get_recommendations",
]
