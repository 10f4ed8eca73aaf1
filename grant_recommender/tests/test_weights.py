"""Unit tests for base weights and dynamic weight redistribution."""

import itertools
import logging

import pytest

from grant_recommender.scorer import (
    DEFAULT_WEIGHTS,
    PreferenceMask,
    ScoringWeights,
    calculate_dynamic_weights,
)
from grant_recommender.scorer.weights import ALWAYS_ACTIVE, WEIGHT_FIELDS, check_base_weights

from factories import make_preferences

MASK_FIELDS = ("embedding", "funding", "deadline", "agency", "project_period")


def all_masks():
    for flags in itertools.product([False, True], repeat=len(MASK_FIELDS)):
        yield PreferenceMask(**dict(zip(MASK_FIELDS, flags)))


class TestScoringWeights:
    def test_default_weights_sum_to_one(self):
        assert DEFAULT_WEIGHTS.total() == pytest.approx(1.0)
        assert DEFAULT_WEIGHTS.embedding == 0.35
        assert DEFAULT_WEIGHTS.deadline == 0.25
        assert DEFAULT_WEIGHTS.funding == 0.20
        assert DEFAULT_WEIGHTS.interaction == 0.01

    def test_weights_not_summing_to_one_rejected(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            ScoringWeights(embedding=0.5)

    def test_weight_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            ScoringWeights(embedding=1.5, deadline=-0.75)

    def test_to_dict_includes_version(self):
        data = DEFAULT_WEIGHTS.to_dict()
        assert set(data) == set(WEIGHT_FIELDS) | {"version"}
        assert data["version"] == "1.0"


class TestPreferenceMask:
    def test_empty_preferences_use_nothing(self):
        mask = PreferenceMask.from_preferences(make_preferences())
        assert mask == PreferenceMask()

    def test_each_preference_sets_its_flag(self):
        prefs = make_preferences(
            project_description_query="imaging of tumours",
            funding_max=50000,
            deadline_range=90,
            agencies=["NSF"],
            project_period_min_years=2,
        )
        mask = PreferenceMask.from_preferences(prefs)
        assert all(getattr(mask, name) for name in MASK_FIELDS)

    def test_blank_description_is_unused(self):
        mask = PreferenceMask.from_preferences(make_preferences(project_description_query="   "))
        assert mask.embedding is False

    def test_zero_funding_bound_counts_as_set(self):
        mask = PreferenceMask.from_preferences(make_preferences(funding_min=0))
        assert mask.funding is True

    def test_minor_criteria_always_active(self):
        mask = PreferenceMask()
        for name in ALWAYS_ACTIVE:
            assert mask.is_active(name)
        assert not mask.is_active("embedding")


class TestDynamicWeights:
    @pytest.mark.parametrize("mask", list(all_masks()))
    def test_weights_sum_to_one_and_unused_are_zero(self, mask):
        weights = calculate_dynamic_weights(mask)

        values = [getattr(weights, name) for name in WEIGHT_FIELDS]
        assert all(v >= 0 for v in values)
        assert sum(values) == pytest.approx(1.0, abs=1e-9)
        for name in WEIGHT_FIELDS:
            if not mask.is_active(name):
                assert getattr(weights, name) == 0.0
            else:
                assert getattr(weights, name) > 0

    def test_full_mask_keeps_base_weights(self):
        mask = PreferenceMask(
            embedding=True, funding=True, deadline=True, agency=True, project_period=True
        )
        weights = calculate_dynamic_weights(mask)
        for name in WEIGHT_FIELDS:
            assert getattr(weights, name) == pytest.approx(getattr(DEFAULT_WEIGHTS, name))

    def test_empty_mask_redistributes_over_minor_criteria(self):
        weights = calculate_dynamic_weights(PreferenceMask())

        assert weights.category == pytest.approx(0.10 / 0.14)
        assert weights.freshness == pytest.approx(0.03 / 0.14)
        assert weights.interaction == pytest.approx(0.01 / 0.14)
        assert weights.embedding == 0.0
        assert weights.deadline == 0.0

    def test_relative_proportions_preserved(self):
        weights = calculate_dynamic_weights(PreferenceMask(funding=True))
        assert weights.funding / weights.category == pytest.approx(0.20 / 0.10)

    def test_version_marks_dynamic(self):
        weights = calculate_dynamic_weights(PreferenceMask(), DEFAULT_WEIGHTS)
        assert weights.version == "1.0+dynamic"

    def test_logs_redistribution(self, caplog):
        with caplog.at_level(logging.INFO, logger="grant_recommender.scorer.weights"):
            calculate_dynamic_weights(PreferenceMask(agency=True))
        assert "dynamic_weights" in caplog.text
        assert "unused_weight=0.810" in caplog.text


class TestBaseWeightCheck:
    def test_default_weights_accepted(self):
        assert check_base_weights(DEFAULT_WEIGHTS) is DEFAULT_WEIGHTS

    def test_no_always_active_weight_rejected(self):
        weights = ScoringWeights(
            embedding=0.5, deadline=0.3, funding=0.2, category=0.0,
            agency=0.0, freshness=0.0, project_period=0.0, interaction=0.0,
        )
        with pytest.raises(ValueError, match="category, freshness or interaction"):
            check_base_weights(weights)

    def test_single_always_active_weight_is_enough(self):
        weights = ScoringWeights(
            embedding=0.5, deadline=0.3, funding=0.19, category=0.0,
            agency=0.0, freshness=0.0, project_period=0.0, interaction=0.01,
        )
        check_base_weights(weights)

        redistributed = calculate_dynamic_weights(PreferenceMask(), weights)
        assert redistributed.interaction == pytest.approx(1.0)
