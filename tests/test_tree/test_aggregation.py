"""Tests for aggregate_dataset: class counts, feature categories and cross counts."""

from __future__ import annotations

import polars as pl
import pytest
from pytest_check import check

from cattree.exceptions import InvalidDatasetError
from cattree.tree.aggregation import aggregate_dataset


class TestAggregateDataset:
    """Tests for `aggregate_dataset` on valid datasets."""

    def test_toy_dataset_counts(self, toy_dataset: pl.DataFrame) -> None:
        """Counts on the four-record table match a hand tally.

        Args:
            toy_dataset (pl.DataFrame): Four-record fixture.
        """
        # Act
        aggregate = aggregate_dataset(toy_dataset)

        # Assert
        with check:
            assert aggregate.class_column == "C"
        with check:
            assert aggregate.feature_names == ["A"]
        with check:
            assert aggregate.total_records == 4
        with check:
            assert aggregate.class_counts == {"yes": 1, "no": 3}
        with check:
            assert aggregate.feature_category_counts == {"A": {"x": 2, "y": 2}}
        with check:
            assert aggregate.cross_counts == {"A": {"x": {"yes": 1, "no": 1}, "y": {"no": 2}}}

    def test_values_are_listed_in_first_seen_order(self) -> None:
        """Feature categories and class values keep the order they first appear in."""
        # Arrange
        dataset = pl.DataFrame({
            "colour": ["red", "blue", "red", "green", "blue"],
            "label": ["b", "a", "a", "c", "b"],
        })

        # Act
        aggregate = aggregate_dataset(dataset)

        # Assert
        with check:
            assert aggregate.feature_categories["colour"] == ["red", "blue", "green"]
        with check:
            assert list(aggregate.class_counts) == ["b", "a", "c"]
        with check:
            assert list(aggregate.cross_counts["colour"]["red"]) == ["b", "a"]

    def test_feature_counts_sum_to_record_count(self, weather_dataset: pl.DataFrame) -> None:
        """For every feature the category counts add up to the number of records.

        Args:
            weather_dataset (pl.DataFrame): Play-tennis fixture.
        """
        # Act
        aggregate = aggregate_dataset(weather_dataset)

        # Assert
        with check:
            assert sum(aggregate.class_counts.values()) == weather_dataset.height
        for feature in aggregate.feature_names:
            with check:
                assert sum(aggregate.feature_category_counts[feature].values()) == weather_dataset.height, feature

    def test_cross_counts_sum_to_category_counts(self, weather_dataset: pl.DataFrame) -> None:
        """Each category's class breakdown adds up to that category's count.

        Args:
            weather_dataset (pl.DataFrame): Play-tennis fixture.
        """
        # Act
        aggregate = aggregate_dataset(weather_dataset)

        # Assert
        for feature in aggregate.feature_names:
            for category, count in aggregate.feature_category_counts[feature].items():
                with check:
                    assert sum(aggregate.cross_counts[feature][category].values()) == count, (feature, category)

    def test_class_only_dataset_has_no_features(self) -> None:
        """A single-column dataset aggregates with an empty feature list."""
        # Arrange
        dataset = pl.DataFrame({"label": ["a", "a", "b"]})

        # Act
        aggregate = aggregate_dataset(dataset)

        # Assert
        with check:
            assert aggregate.feature_names == []
        with check:
            assert aggregate.class_counts == {"a": 2, "b": 1}
        with check:
            assert aggregate.is_pure is False

    def test_single_class_is_pure(self) -> None:
        """A dataset with one class value reports itself as pure."""
        # Arrange
        dataset = pl.DataFrame({"f": ["p", "q"], "label": ["a", "a"]})

        # Act / Assert
        assert aggregate_dataset(dataset).is_pure is True


class TestAggregateDatasetErrors:
    """Tests for `aggregate_dataset` failing fast on malformed input."""

    def test_empty_dataset_raises(self) -> None:
        """A dataset without rows is rejected."""
        # Arrange
        dataset = pl.DataFrame({"f": [], "label": []}, schema={"f": pl.String, "label": pl.String})

        # Act / Assert
        with pytest.raises(InvalidDatasetError, match="empty"):
            aggregate_dataset(dataset)

    def test_dataset_without_columns_raises(self) -> None:
        """A dataset without columns has no class column and is rejected."""
        with pytest.raises(InvalidDatasetError, match="no columns"):
            aggregate_dataset(pl.DataFrame())

    def test_missing_values_raise_with_column_names(self) -> None:
        """Nulls are rejected and the offending columns are reported."""
        # Arrange
        dataset = pl.DataFrame({"f": ["p", None], "g": ["u", "v"], "label": ["a", "b"]})

        # Act
        with pytest.raises(InvalidDatasetError) as exc_info:
            aggregate_dataset(dataset)

        # Assert
        assert exc_info.value.columns == ["f"]
