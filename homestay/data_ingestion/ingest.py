from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List

import pandas as pd

from ..recommendations.data_store import RecordStore
from ..recommendations.domain import Interaction, InteractionKind, Property, User
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

PROPERTY_COLUMNS: List[str] = [
    "id",
    "title",
    "city",
    "property_type",
    "price",
    "bedrooms",
    "available",
    "rating",
    "booking_count",
    "view_count",
]

USER_COLUMNS: List[str] = ["id", "username", "role"]

INTERACTION_COLUMNS: List[str] = ["user_id", "property_id", "kind", "rating", "created_at"]

_CENTS = Decimal("0.01")
_TRUE_STRINGS = {"1", "true", "yes", "y", "t"}


def _parse_price(value: object) -> Decimal | None:
    if value is None or pd.isna(value):
        return None
    try:
        return Decimal(str(value).strip()).quantize(_CENTS)
    except (InvalidOperation, ValueError):
        return None


def _normalize_rating(rating: float | int | str | None) -> float:
    if rating is None or pd.isna(rating):
        return 0.0
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0

    # Clamp to [0, 5], one decimal place
    return round(max(0.0, min(5.0, value)), 1)


def _parse_bool(value: object) -> bool:
    if value is None or pd.isna(value):
        return True
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_STRINGS


def _parse_interaction_rating(value: object) -> int | None:
    """Whole-number ratings are kept as given, even out of range; the engine ignores those."""
    if value is None or pd.isna(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else None


def _parse_kind(value: object) -> InteractionKind | None:
    if value is None or pd.isna(value):
        return None
    try:
        return InteractionKind(str(value).strip().upper())
    except ValueError:
        return None


def load_properties_frame(path: Path) -> pd.DataFrame:
    """Read a listings CSV into the canonical property columns."""
    df = pd.read_csv(path, dtype={"price": str})

    canonical = pd.DataFrame()
    canonical["id"] = pd.to_numeric(df["id"], errors="coerce")
    canonical["title"] = df.get("title", pd.Series("", index=df.index)).fillna("").astype(str)
    canonical["city"] = df["city"]
    canonical["property_type"] = df.get("property_type", pd.Series(None, index=df.index))
    canonical["price"] = df["price"].apply(_parse_price)
    canonical["bedrooms"] = pd.to_numeric(df.get("bedrooms", pd.Series(0, index=df.index)), errors="coerce").fillna(0).astype(int)
    canonical["available"] = df.get("available", pd.Series(True, index=df.index)).apply(_parse_bool)
    canonical["rating"] = df.get("rating", pd.Series(0.0, index=df.index)).apply(_normalize_rating)
    for counter in ("booking_count", "view_count"):
        canonical[counter] = pd.to_numeric(df.get(counter, pd.Series(0, index=df.index)), errors="coerce").fillna(0).astype(int)

    valid = canonical["id"].notna() & canonical["city"].notna() & canonical["price"].notna()
    if not valid.all():
        logger.warning("Dropping %d property rows with missing id, city or price", int((~valid).sum()))
    canonical = canonical.loc[valid].copy()
    canonical["id"] = canonical["id"].astype(int)
    return canonical[PROPERTY_COLUMNS]


def load_users_frame(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    canonical = pd.DataFrame()
    canonical["id"] = pd.to_numeric(df["id"], errors="coerce")
    canonical["username"] = df["username"].fillna("").astype(str)
    canonical["role"] = df.get("role", pd.Series("user", index=df.index)).fillna("user").astype(str)

    valid = canonical["id"].notna()
    if not valid.all():
        logger.warning("Dropping %d user rows with missing id", int((~valid).sum()))
    canonical = canonical.loc[valid].copy()
    canonical["id"] = canonical["id"].astype(int)
    return canonical[USER_COLUMNS]


def load_interactions_frame(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    canonical = pd.DataFrame()
    canonical["user_id"] = pd.to_numeric(df["user_id"], errors="coerce")
    canonical["property_id"] = pd.to_numeric(df["property_id"], errors="coerce")
    canonical["kind"] = df["kind"].apply(_parse_kind)
    canonical["rating"] = df.get("rating", pd.Series(None, index=df.index)).apply(_parse_interaction_rating)
    canonical["created_at"] = pd.to_datetime(
        df.get("created_at", pd.Series(None, index=df.index)), utc=True, errors="coerce"
    )

    valid = canonical["user_id"].notna() & canonical["property_id"].notna() & canonical["kind"].notna()
    if not valid.all():
        logger.warning("Dropping %d interaction rows with missing ids or unknown kind", int((~valid).sum()))
    canonical = canonical.loc[valid].copy()
    canonical["user_id"] = canonical["user_id"].astype(int)
    canonical["property_id"] = canonical["property_id"].astype(int)
    return canonical[INTERACTION_COLUMNS]


def _to_datetime(value: object) -> datetime:
    if value is None or pd.isna(value):
        return datetime.now(timezone.utc)
    return pd.Timestamp(value).to_pydatetime()


def build_store(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> RecordStore:
    """
    Build a record store from the seed CSV files.

    Steps:
    - Read listings, users and interactions with pandas.
    - Normalize them into canonical columns, dropping unusable rows.
    - Convert rows into immutable domain records.
    """
    properties_df = load_properties_frame(config.properties_path)
    users_df = load_users_frame(config.users_path)
    interactions_df = load_interactions_frame(config.interactions_path)

    properties = [
        Property(
            id=int(row.id),
            title=row.title,
            city=str(row.city),
            property_type=None if pd.isna(row.property_type) else str(row.property_type),
            price=row.price,
            bedrooms=int(row.bedrooms),
            available=bool(row.available),
            rating=float(row.rating),
            booking_count=int(row.booking_count),
            view_count=int(row.view_count),
        )
        for row in properties_df.itertuples(index=False)
    ]
    users = [
        User(id=int(row.id), username=row.username, role=row.role)
        for row in users_df.itertuples(index=False)
    ]
    interactions = [
        Interaction(
            user_id=int(row.user_id),
            property_id=int(row.property_id),
            kind=row.kind,
            rating=_parse_interaction_rating(row.rating),
            created_at=_to_datetime(row.created_at),
        )
        for row in interactions_df.itertuples(index=False)
    ]
    return RecordStore(properties=properties, users=users, interactions=interactions)


if __name__ == "__main__":
    store = build_store()
    print(f"Seed data loaded: {store.stats()}")
