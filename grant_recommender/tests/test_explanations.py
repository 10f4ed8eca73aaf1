"""Unit tests for match-reason generation."""

import pytest

from grant_recommender.explanations import generate_match_reasons
from grant_recommender.explanations.generator import ELIGIBILITY_REMINDER, SUMMARY_FALLBACK
from grant_recommender.models import ScoreBreakdown
from grant_recommender.scorer import PreferenceMask

from factories import TODAY, days_from_today, make_grant


def _breakdown(**overrides) -> ScoreBreakdown:
    """Sub-scores that trigger no per-criterion reason."""
    data = {
        "embedding_score": 0.4,
        "funding_score": 0.5,
        "deadline_score": 0.2,
        "agency_score": 0.0,
        "category_score": 0.5,
        "project_period_score": 1.0,
        "freshness_score": 0.0,
        "interaction_score": 0.5,
    }
    data.update(overrides)
    return ScoreBreakdown(**data)


def _reasons(breakdown, score=0.4, mask=None, **grant_overrides):
    grant = make_grant(**grant_overrides)
    return generate_match_reasons(grant, breakdown, score, mask or PreferenceMask(), TODAY)


class TestEmbeddingReasons:
    @pytest.mark.parametrize(
        "score, fragment",
        [
            (0.95, "Exceptionally relevant"),
            (0.9, "Highly relevant"),
            (0.75, "Well-aligned"),
            (0.65, "Good match for your project description"),
        ],
    )
    def test_tiers(self, score, fragment):
        reasons = _reasons(_breakdown(embedding_score=score))
        assert fragment in reasons[0]

    def test_threshold_is_strict(self):
        reasons = _reasons(_breakdown(embedding_score=0.6))
        assert not any(r.startswith("🎯") for r in reasons)


class TestDeadlineReasons:
    def test_perfect_timing_reports_days(self):
        reasons = _reasons(_breakdown(deadline_score=1.0), application_deadline=days_from_today(60))
        assert "⏰ Perfect timing: 60 days to prepare application" in reasons

    def test_good_window(self):
        reasons = _reasons(_breakdown(deadline_score=0.75))
        assert "⏰ Good deadline window for quality preparation" in reasons

    def test_tight_deadline(self):
        reasons = _reasons(_breakdown(deadline_score=0.3))
        assert "⏰ Tight deadline - quick action needed" in reasons


class TestPreferenceGatedReasons:
    def test_funding_reason_requires_funding_preference(self):
        breakdown = _breakdown(funding_score=1.0)

        without = _reasons(breakdown)
        with_pref = _reasons(breakdown, mask=PreferenceMask(funding=True))

        assert not any(r.startswith("💰") for r in without)
        assert "💰 Funding perfectly matches your target range" in with_pref

    def test_funding_tiers(self):
        mask = PreferenceMask(funding=True)
        assert "💰 Funding amount within your preferred range" in _reasons(
            _breakdown(funding_score=0.8), mask=mask
        )
        assert "💰 Funding amount reasonably close to your range" in _reasons(
            _breakdown(funding_score=0.6), mask=mask
        )

    def test_agency_reason_requires_agency_preference(self):
        breakdown = _breakdown(agency_score=1.0)

        without = _reasons(breakdown)
        with_pref = _reasons(breakdown, mask=PreferenceMask(agency=True))

        assert not any("preferred agency" in r for r in without)
        assert "🏛️ From preferred agency: National Institutes of Health" in with_pref


class TestOtherReasons:
    def test_category_tiers(self):
        assert "📋 Strong match with your research categories" in _reasons(_breakdown(category_score=0.8))
        assert "📋 Good category alignment" in _reasons(_breakdown(category_score=0.6))

    def test_recently_posted(self):
        assert "🆕 Recently posted opportunity" in _reasons(_breakdown(freshness_score=1.0))

    def test_reasons_ordered_by_importance(self):
        breakdown = _breakdown(
            embedding_score=0.95,
            deadline_score=0.75,
            funding_score=1.0,
            category_score=0.8,
            agency_score=1.0,
            freshness_score=1.0,
        )
        mask = PreferenceMask(embedding=True, funding=True, agency=True)

        reasons = _reasons(breakdown, mask=mask)

        assert [r[0] for r in reasons] == ["🎯", "⏰", "💰", "📋", "🏛", "🆕"]


class TestFallbackAndReminder:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (0.8, "Recommended based on multiple matching factors"),
            (0.7, "Recommended based on multiple matching factors"),
            (0.55, "Moderate match with your profile"),
            (0.35, SUMMARY_FALLBACK),
        ],
    )
    def test_summary_tier_when_no_reason_qualifies(self, score, expected):
        assert _reasons(_breakdown(), score=score) == [expected]

    def test_eligibility_reminder_appended_last(self):
        reasons = _reasons(
            _breakdown(freshness_score=1.0),
            eligibility_criteria="Accredited universities only",
        )
        assert reasons[-1] == ELIGIBILITY_REMINDER
        assert reasons[0] == "🆕 Recently posted opportunity"

    def test_reminder_follows_summary_fallback(self):
        reasons = _reasons(_breakdown(), score=0.35, eligibility_criteria="US nonprofits")
        assert reasons == [SUMMARY_FALLBACK, ELIGIBILITY_REMINDER]

    def test_generation_is_pure(self):
        breakdown = _breakdown(embedding_score=0.95)
        assert _reasons(breakdown) == _reasons(breakdown)
