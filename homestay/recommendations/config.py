from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommenderConfig:
    default_limit: int = 10
    max_limit: int = 50
    cache_ttl_seconds: float = float(os.getenv("RECOMMENDATION_CACHE_TTL", "3600"))
    cache_enabled: bool = os.getenv("RECOMMENDATION_CACHE_ENABLED", "1") != "0"


DEFAULT_RECOMMENDER_CONFIG = RecommenderConfig()
