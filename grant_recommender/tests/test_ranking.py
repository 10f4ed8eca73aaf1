"""Unit tests for filtering, ordering and pagination of scored grants."""

import pytest

from grant_recommender.models import ScoreBreakdown, ScoredGrant
from grant_recommender.ranking import is_qualifying, rank_scored_grants, sort_key

from factories import make_grant


def _scored(grant_id: str, score: float, deadline_score: float = 0.8) -> ScoredGrant:
    breakdown = ScoreBreakdown(
        embedding_score=0.4,
        funding_score=1.0,
        deadline_score=deadline_score,
        agency_score=1.0,
        category_score=0.5,
        project_period_score=1.0,
        freshness_score=0.0,
        interaction_score=0.5,
    )
    return ScoredGrant(
        grant=make_grant(id=grant_id),
        score_breakdown=breakdown,
        recommendation_score=score,
    )


class TestIsQualifying:
    def test_below_min_score_rejected(self):
        assert not is_qualifying(_scored("a", 0.29), min_score=0.3)

    def test_at_min_score_accepted(self):
        assert is_qualifying(_scored("a", 0.3), min_score=0.3)

    def test_zero_deadline_vetoed_regardless_of_score(self):
        assert not is_qualifying(_scored("a", 0.99, deadline_score=0.0), min_score=0.0)


class TestRankScoredGrants:
    def test_sorted_by_descending_score(self):
        grants = [_scored("a", 0.4), _scored("b", 0.9), _scored("c", 0.6)]

        page, total = rank_scored_grants(grants, min_score=0.3, limit=10)

        assert [s.grant_id for s in page] == ["b", "c", "a"]
        assert total == 3

    def test_ties_broken_by_grant_id(self):
        grants = [_scored("z", 0.5), _scored("m", 0.5), _scored("a", 0.5)]

        page, _ = rank_scored_grants(grants, limit=10)

        assert [s.grant_id for s in page] == ["a", "m", "z"]
        assert sort_key(page[0]) == (-0.5, "a")

    def test_total_counts_qualifying_before_pagination(self):
        grants = [_scored(f"g{i:02d}", 0.5 + i / 100) for i in range(25)]
        grants.append(_scored("low", 0.1))
        grants.append(_scored("overdue", 0.95, deadline_score=0.0))

        page, total = rank_scored_grants(grants, min_score=0.3, limit=10, offset=0)

        assert total == 25
        assert len(page) == 10
        assert all(s.recommendation_score >= 0.3 for s in page)
        assert all(s.score_breakdown.deadline_score > 0 for s in page)

    def test_pages_are_disjoint_and_concatenate(self):
        grants = [_scored(f"g{i:02d}", round(0.3 + (i % 7) / 10, 2)) for i in range(30)]

        first, _ = rank_scored_grants(grants, limit=10, offset=0)
        second, _ = rank_scored_grants(grants, limit=10, offset=10)
        both, _ = rank_scored_grants(grants, limit=20, offset=0)

        first_ids = [s.grant_id for s in first]
        second_ids = [s.grant_id for s in second]
        assert not set(first_ids) & set(second_ids)
        assert first_ids + second_ids == [s.grant_id for s in both]

    def test_offset_past_end_returns_empty_page(self):
        page, total = rank_scored_grants([_scored("a", 0.5)], limit=10, offset=5)
        assert page == []
        assert total == 1

    def test_zero_limit_still_reports_total(self):
        page, total = rank_scored_grants([_scored("a", 0.5), _scored("b", 0.6)], limit=0)
        assert page == []
        assert total == 2

    @pytest.mark.parametrize("min_score", [0.0, 1.0])
    def test_min_score_bounds(self, min_score):
        grants = [_scored("a", 0.0), _scored("b", 1.0)]
        page, _ = rank_scored_grants(grants, min_score=min_score, limit=10)
        expected = ["b", "a"] if min_score == 0.0 else ["b"]
        assert [s.grant_id for s in page] == expected
