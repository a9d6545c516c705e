from __future__ import annotations

import os
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import require_admin, require_user
from .auth.users import authenticate
from .recommendations.cache import clear_cache, get_cache_stats
from .recommendations.config import DEFAULT_RECOMMENDER_CONFIG
from .recommendations.data_store import get_store
from .recommendations.errors import NotFoundError
from .recommendations.fallback import FALLBACK_POOL_SIZE, popular_fallback, top_rated_fallback
from .recommendations.models import (
    InteractionRequest,
    InteractionResponse,
    LoginRequest,
    PropertyListResponse,
    PropertyOut,
    RecommendationResponse,
    Strategy,
)
from .recommendations.retrieval import recommend, record_interaction

app = FastAPI(title="Homestay Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "homestay-secret-change-in-production"),
)

_DEFAULT_LIMIT = DEFAULT_RECOMMENDER_CONFIG.default_limit
Limit = Annotated[int, Query(ge=1, le=DEFAULT_RECOMMENDER_CONFIG.max_limit)]


def _serve(strategy: Strategy, user: dict, limit: int) -> RecommendationResponse:
    try:
        return recommend(strategy, user["id"], limit)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/properties/popular", response_model=PropertyListResponse)
def popular_properties() -> PropertyListResponse:
    props = popular_fallback(get_store(), FALLBACK_POOL_SIZE)
    return PropertyListResponse(properties=[PropertyOut.model_validate(p) for p in props])


@app.get("/api/properties/top-rated", response_model=PropertyListResponse)
def top_rated_properties() -> PropertyListResponse:
    props = top_rated_fallback(get_store(), FALLBACK_POOL_SIZE)
    return PropertyListResponse(properties=[PropertyOut.model_validate(p) for p in props])


@app.get("/api/properties/{property_id}", response_model=PropertyOut)
def get_property(property_id: int) -> PropertyOut:
    prop = get_store().find_property(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail=f"Property not found: {property_id}")
    return PropertyOut.model_validate(prop)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/api/recommendations", response_model=RecommendationResponse)
def recommendations(
    limit: Limit = _DEFAULT_LIMIT,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    return _serve(Strategy.hybrid, user, limit)


@app.get("/api/recommendations/collaborative", response_model=RecommendationResponse)
def collaborative(
    limit: Limit = _DEFAULT_LIMIT,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    return _serve(Strategy.collaborative, user, limit)


@app.get("/api/recommendations/content-based", response_model=RecommendationResponse)
def content_based(
    limit: Limit = _DEFAULT_LIMIT,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    return _serve(Strategy.content_based, user, limit)


@app.post("/api/interactions", response_model=InteractionResponse)
def interactions(
    body: InteractionRequest,
    user: dict = Depends(require_user),
) -> InteractionResponse:
    try:
        return record_interaction(user["id"], body)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()


@app.post("/cache/clear")
def cache_clear(user: dict = Depends(require_admin)) -> dict:
    clear_cache()
    return {"status": "cleared"}


@app.get("/store/stats")
def store_stats(user: dict = Depends(require_admin)) -> dict:
    return get_store().stats()
