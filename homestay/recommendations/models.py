from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .domain import InteractionKind


class Strategy(str, Enum):
    hybrid = "hybrid"
    collaborative = "collaborative"
    content_based = "content_based"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PropertyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    city: str
    property_type: str | None
    price: Decimal
    bedrooms: int
    available: bool
    rating: float
    booking_count: int
    view_count: int


class RecommendationItem(BaseModel):
    rank: int
    property: PropertyOut


class RecommendationResponse(BaseModel):
    user_id: int
    strategy: Strategy
    recommendations: list[RecommendationItem]
    cache_hit: bool = False


class PropertyListResponse(BaseModel):
    properties: list[PropertyOut]


class InteractionRequest(BaseModel):
    property_id: int = Field(..., ge=1)
    kind: InteractionKind
    rating: int | None = Field(default=None, ge=1, le=5)


class InteractionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    property_id: int
    kind: InteractionKind
    rating: int | None
    created_at: datetime


class InteractionResponse(BaseModel):
    status: str
    interaction: InteractionOut
