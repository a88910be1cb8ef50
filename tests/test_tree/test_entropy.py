"""Tests for entropy, information gain and best-feature selection."""

from __future__ import annotations

import math

import polars as pl
import pytest
from pytest_check import check

from cattree.exceptions import InvalidDatasetError
from cattree.tree.aggregation import Aggregate, aggregate_dataset
from cattree.tree.entropy import (
    entropy,
    information_gain,
    information_gains,
    select_best_feature,
    total_entropy,
)


class TestEntropy:
    """Tests for the per-class `entropy` term and `total_entropy`."""

    @pytest.mark.parametrize(
        ("count", "total", "expected"),
        [
            (1, 2, 0.5),
            (2, 2, 0.0),
            (0, 4, 0.0),
            (3, 0, 0.0),
            (1, 4, 0.5),
        ],
    )
    def test_entropy_term(self, count: int, total: int, expected: float) -> None:
        """Each term equals -(count/total) * log2(count/total), with zero guards.

        Args:
            count (int): Records carrying the class value.
            total (int): Records in the set.
            expected (float): Expected entropy term.
        """
        assert entropy(count, total) == pytest.approx(expected)

    def test_total_entropy_of_even_split_is_one_bit(self) -> None:
        """Two equally frequent classes carry exactly one bit."""
        assert total_entropy({"yes": 7, "no": 7}) == pytest.approx(1.0)

    def test_total_entropy_of_single_class_is_zero(self) -> None:
        """A pure distribution has no entropy."""
        assert total_entropy({"yes": 9}) == 0.0

    def test_total_entropy_matches_formula(self) -> None:
        """A skewed distribution matches the closed-form value."""
        # Arrange
        expected = -(0.25 * math.log2(0.25)) - (0.75 * math.log2(0.75))

        # Act / Assert
        assert total_entropy({"yes": 1, "no": 3}) == pytest.approx(expected)


class TestInformationGain:
    """Tests for `information_gain` and `information_gains`."""

    def test_toy_dataset_gain(self, toy_dataset: pl.DataFrame) -> None:
        """The gain of A equals H(class) minus half a bit from the mixed x branch.

        Args:
            toy_dataset (pl.DataFrame): Four-record fixture.
        """
        # Arrange
        aggregate = aggregate_dataset(toy_dataset)
        class_entropy = -(0.25 * math.log2(0.25)) - (0.75 * math.log2(0.75))

        # Act
        gain = information_gain(aggregate, "A")

        # Assert
        assert gain == pytest.approx(class_entropy - 0.5)

    def test_weather_gains(self, weather_dataset: pl.DataFrame) -> None:
        """The play-tennis gains match the well-known textbook values.

        Args:
            weather_dataset (pl.DataFrame): Play-tennis fixture.
        """
        # Act
        gains = information_gains(aggregate_dataset(weather_dataset))

        # Assert
        with check:
            assert list(gains) == ["outlook", "temperature", "humidity", "windy"]
        with check:
            assert gains["outlook"] == pytest.approx(0.2467, abs=1e-4)
        with check:
            assert gains["temperature"] == pytest.approx(0.0292, abs=1e-4)
        with check:
            assert gains["humidity"] == pytest.approx(0.1518, abs=1e-4)
        with check:
            assert gains["windy"] == pytest.approx(0.0481, abs=1e-4)

    def test_feature_unique_per_record_recovers_all_entropy(self) -> None:
        """A feature with one record per category leaves no conditional entropy."""
        # Arrange
        dataset = pl.DataFrame({"id": ["a", "b", "c", "d"], "label": ["p", "q", "p", "q"]})
        aggregate = aggregate_dataset(dataset)

        # Act / Assert
        assert information_gain(aggregate, "id") == pytest.approx(total_entropy(aggregate.class_counts))

    def test_uninformative_feature_has_zero_gain(self) -> None:
        """A feature with the same class mix in every category gains nothing."""
        # Arrange
        dataset = pl.DataFrame({"f": ["a", "a", "b", "b"], "label": ["p", "q", "p", "q"]})

        # Act / Assert
        assert information_gain(aggregate_dataset(dataset), "f") == pytest.approx(0.0, abs=1e-12)

    def test_gain_below_zero_is_returned_unclamped(self) -> None:
        """A conditional entropy above the class entropy yields a negative gain as is.

        The counts are written by hand so the branch mix (2 p, 2 q) is more
        uncertain than the overall class mix (3 p, 1 q).
        """
        # Arrange
        aggregate = Aggregate(
            class_column="label",
            feature_names=["f"],
            total_records=4,
            class_counts={"p": 3, "q": 1},
            feature_categories={"f": ["a"]},
            feature_category_counts={"f": {"a": 4}},
            cross_counts={"f": {"a": {"p": 2, "q": 2}}},
        )
        expected = total_entropy({"p": 3, "q": 1}) - 1.0

        # Act
        gain = information_gain(aggregate, "f")

        # Assert
        with check:
            assert gain < 0.0
        with check:
            assert gain == pytest.approx(expected)
        with check:
            assert information_gains(aggregate) == {"f": gain}

    def test_unknown_feature_raises(self, toy_dataset: pl.DataFrame) -> None:
        """Asking for a feature the aggregate does not hold is an error.

        Args:
            toy_dataset (pl.DataFrame): Four-record fixture.
        """
        # Arrange
        aggregate = aggregate_dataset(toy_dataset)

        # Act
        with pytest.raises(InvalidDatasetError) as exc_info:
            information_gain(aggregate, "missing")

        # Assert
        assert exc_info.value.columns == ["missing"]


class TestSelectBestFeature:
    """Tests for `select_best_feature`."""

    def test_picks_strictly_greatest(self) -> None:
        """The feature with the largest gain wins."""
        assert select_best_feature({"a": 0.1, "b": 0.7, "c": 0.3}) == ("b", 0.7)

    def test_ties_go_to_first_enumerated(self) -> None:
        """Equal gains resolve to the feature listed first."""
        assert select_best_feature({"a": 0.2, "b": 0.5, "c": 0.5}) == ("b", 0.5)

    def test_negative_gains_can_still_win(self) -> None:
        """Gains are compared as computed, even below zero."""
        assert select_best_feature({"a": -1e-16, "b": -0.5}) == ("a", -1e-16)

    def test_non_finite_gains_are_skipped(self) -> None:
        """NaN and infinite gains never win."""
        # Act
        best = select_best_feature({"a": math.nan, "b": 0.1, "c": math.inf})

        # Assert
        assert best == ("b", 0.1)

    @pytest.mark.parametrize("gains", [{}, {"a": math.nan}], ids=["empty", "all_nan"])
    def test_returns_none_without_candidates(self, gains: dict[str, float]) -> None:
        """No finite gain means no selection.

        Args:
            gains (dict[str, float]): Candidate gains.
        """
        assert select_best_feature(gains) is None
