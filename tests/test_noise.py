"""Tests for common-subset noise removal."""

from __future__ import annotations

import pytest

from similarity_classifier.noise import common_subset, remove_noise
from similarity_classifier.vectors import TermVector


@pytest.fixture
def category_models() -> list[TermVector]:
    return [
        TermVector({"goal": 3.0, "team": 2.0, "today": 1.0}),
        TermVector({"oven": 2.0, "today": 1.0}),
        TermVector({"bank": 4.0, "today": 2.0, "team": 1.0}),
    ]


class TestCommonSubset:
    def test_terms_shared_by_all(self, category_models):
        assert set(common_subset(category_models).weights) == {"today"}

    def test_folds_left_to_right(self, category_models):
        # ((1 + 1) / 2 + 2) / 2, not (1 + (1 + 2) / 2) / 2
        assert common_subset(category_models)["today"] == pytest.approx(1.5)

    def test_pairwise(self):
        a = TermVector({"x": 1.0, "y": 1.0})
        b = TermVector({"y": 3.0})
        assert common_subset([a, b]) == TermVector({"y": 2.0})

    @pytest.mark.parametrize("count", [0, 1])
    def test_needs_two_models(self, count):
        with pytest.raises(ValueError):
            common_subset([TermVector({"x": 1.0})] * count)


class TestRemoveNoise:
    def test_shared_terms_removed(self, category_models):
        reduced = remove_noise(category_models)
        assert [set(m.weights) for m in reduced] == [
            {"goal", "team"},
            {"oven"},
            {"bank", "team"},
        ]

    def test_remaining_weights_untouched(self, category_models):
        reduced = remove_noise(category_models)
        assert reduced[2]["bank"] == 4.0

    def test_inputs_not_mutated(self, category_models):
        remove_noise(category_models)
        assert "today" in category_models[0]

    def test_second_pass_is_idempotent(self, category_models):
        once = remove_noise(category_models)
        twice = remove_noise(once)
        assert twice == once

    def test_disjoint_models_unchanged(self):
        models = [TermVector({"a": 1.0}), TermVector({"b": 1.0})]
        assert remove_noise(models) == models
