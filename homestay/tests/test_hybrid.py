from __future__ import annotations

import pytest

from homestay.recommendations.collaborative import collaborative_recommendations
from homestay.recommendations.content_based import content_based_recommendations
from homestay.recommendations.domain import rank_scores
from homestay.recommendations.errors import UserNotFoundError
from homestay.recommendations.hybrid import fuse_rankings, get_recommendations


def _ids(props):
    return [p.id for p in props]


@pytest.fixture
def listings(make_property):
    return [
        make_property(1, city="Hangzhou", property_type="apartment", price="400.00", bedrooms=2, rating=4.0),
        make_property(2, city="Shanghai", property_type="house", price="800.00", bedrooms=3, rating=3.0),
        make_property(3, city="Beijing", property_type="house", price="900.00", bedrooms=4, rating=3.0),
        make_property(4, city="Hangzhou", property_type="apartment", price="400.00", bedrooms=2, rating=5.0),
        make_property(5, city="Hangzhou", property_type="apartment", price="400.00", bedrooms=2, rating=4.0),
        make_property(6, city="Dali", property_type="cabin", price="2000.00", bedrooms=5, rating=1.0),
    ]


def test_fusion_sums_rank_decay_contributions(make_property):
    a, b, c, d = (make_property(pid) for pid in (1, 2, 3, 4))
    scores = fuse_rankings([a, b, c], [b, d])
    assert scores == {
        1: pytest.approx(3 * 0.6),
        2: pytest.approx(2 * 0.6 + 2 * 0.4),
        3: pytest.approx(1 * 0.6),
        4: pytest.approx(1 * 0.4),
    }


def test_fusion_of_empty_rankings():
    assert fuse_rankings([], []) == {}


def test_hybrid_blends_both_signals(make_store, listings):
    store = make_store(
        properties=listings,
        interactions=[(1, 1, "FAVORITE"), (2, 1, "VIEW"), (2, 2, "VIEW"), (2, 3, "VIEW")],
    )
    # collaborative over-fetch: [2, 3]; content over-fetch: [4, 5, 2, 3]
    assert _ids(collaborative_recommendations(store, 1, 4)) == [2, 3]
    assert _ids(content_based_recommendations(store, 1, 4)) == [4, 5, 2, 3]

    # 2 -> 1.2 + 0.8, 4 -> 1.6, 5 -> 1.2, 3 -> 0.6 + 0.4
    assert _ids(get_recommendations(store, 1, limit=2)) == [2, 4]
    assert _ids(get_recommendations(store, 1, limit=4)) == [2, 4, 5, 3]


def test_hybrid_excludes_own_listings(make_store, listings):
    store = make_store(
        properties=listings,
        interactions=[(1, 1, "FAVORITE"), (1, 4, "VIEW"), (2, 1, "VIEW"), (2, 4, "VIEW"), (2, 5, "BOOK")],
    )
    result = get_recommendations(store, 1, limit=10)
    assert not {1, 4} & set(_ids(result))


def test_hybrid_cold_start_uses_both_fallbacks(make_store, make_property):
    props = [make_property(pid, booking_count=10 - pid, rating=round(1.0 + pid * 0.3, 1)) for pid in range(1, 9)]
    store = make_store(properties=props, extra_users=[1])
    result = get_recommendations(store, 1, limit=3)
    # popularity ranks 1..8 ascending, rating ranks 8..1 ascending
    assert len(result) == 3
    assert result == get_recommendations(store, 1, limit=3)


def test_hybrid_limit_is_upper_bound(make_store, listings):
    store = make_store(properties=listings, interactions=[(1, 1, "FAVORITE"), (2, 1, "VIEW"), (2, 2, "VIEW")])
    for limit in (1, 2, 3, 10):
        assert len(get_recommendations(store, 1, limit=limit)) <= limit


def test_hybrid_unknown_user_raises(make_store, listings):
    store = make_store(properties=listings, interactions=[(1, 1, "FAVORITE")])
    with pytest.raises(UserNotFoundError):
        get_recommendations(store, 99, limit=5)


def test_cross_list_tie_breaks_by_id(make_property):
    # 2 × 0.6 for listing 1 and 3 × 0.4 for listing 2 are the same score
    p1, p2, p5, p6, p7 = (make_property(pid) for pid in (1, 2, 5, 6, 7))
    scores = fuse_rankings([p1, p5], [p2, p6, p7])
    assert scores[1] == scores[2]
    assert [c.property_id for c in rank_scores(scores)] == [1, 2, 6, 5, 7]


def test_hybrid_tie_between_signals_goes_to_lower_id(make_store, make_property):
    props = [
        make_property(pid, city="Dali", property_type="cabin") if pid in (2, 7) else make_property(pid)
        for pid in range(1, 8)
    ]
    store = make_store(
        properties=props,
        interactions=[(1, 1, "FAVORITE"), (2, 1, "VIEW"), (2, 2, "VIEW"), (2, 7, "VIEW")],
    )
    assert _ids(collaborative_recommendations(store, 1, 4)) == [2, 7]
    assert _ids(content_based_recommendations(store, 1, 4)) == [3, 4, 5, 6]

    # 3 -> 4 × 0.4, then 2 -> 2 × 0.6 ties 4 -> 3 × 0.4
    assert _ids(get_recommendations(store, 1, limit=2)) == [3, 2]
