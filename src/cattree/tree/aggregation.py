"""Single-pass counting of class values, feature categories and their cross-tabulation."""

from __future__ import annotations

from dataclasses import dataclass, field

import polars as pl

from cattree.exceptions import InvalidDatasetError

_COUNT_COLUMN = "__cattree_count__"


@dataclass(frozen=True)
class Aggregate:
    """Counts over one dataset, every mapping in first-seen order.

    Attributes:
        class_column (str): Name of the class column.
        feature_names (list[str]): Feature columns in dataset order.
        total_records (int): Number of records counted.
        class_counts (dict[str, int]): Records per class value.
        feature_categories (dict[str, list[str]]): Observed values per feature.
        feature_category_counts (dict[str, dict[str, int]]): Records per
            feature value.
        cross_counts (dict[str, dict[str, dict[str, int]]]): Records per
            feature value and class value.

    Invariant:
        ``sum(class_counts.values()) == total_records`` and, for every
        feature ``f``, ``sum(feature_category_counts[f].values()) == total_records``.
    """

    class_column: str
    feature_names: list[str]
    total_records: int
    class_counts: dict[str, int] = field(default_factory=dict)
    feature_categories: dict[str, list[str]] = field(default_factory=dict)
    feature_category_counts: dict[str, dict[str, int]] = field(default_factory=dict)
    cross_counts: dict[str, dict[str, dict[str, int]]] = field(default_factory=dict)

    @property
    def is_pure(self) -> bool:
        """Whether at most one class value is present."""
        return len(self.class_counts) <= 1


def aggregate_dataset(dataset: pl.DataFrame) -> Aggregate:
    """Count class values, feature categories and feature/class pairs.

    The last column of ``dataset`` is the class column; all others are
    features. Counting uses order-preserving group-bys, so every mapping in
    the result lists values in the order they first appear.

    Args:
        dataset (pl.DataFrame): Dataset whose columns all hold categorical
            string values.

    Returns:
        Aggregate: The counts.

    Raises:
        InvalidDatasetError: If the dataset has no columns, no rows, or
            missing values.

    Examples:
        >>> df = pl.DataFrame({"A": ["x", "x", "y", "y"], "C": ["yes", "no", "no", "no"]})
        >>> agg = aggregate_dataset(df)
        >>> agg.class_counts
        {'yes': 1, 'no': 3}
        >>> agg.cross_counts["A"]["x"]
        {'yes': 1, 'no': 1}
    """
    _validate_countable(dataset)

    class_column = dataset.columns[-1]
    feature_names = dataset.columns[:-1]

    class_counts = _value_counts(dataset, class_column)
    feature_category_counts: dict[str, dict[str, int]] = {}
    cross_counts: dict[str, dict[str, dict[str, int]]] = {}
    for feature in feature_names:
        feature_category_counts[feature] = _value_counts(dataset, feature)
        cross_counts[feature] = _cross_counts(dataset, feature, class_column)

    return Aggregate(
        class_column=class_column,
        feature_names=list(feature_names),
        total_records=dataset.height,
        class_counts=class_counts,
        feature_categories={feature: list(counts) for feature, counts in feature_category_counts.items()},
        feature_category_counts=feature_category_counts,
        cross_counts=cross_counts,
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _validate_countable(dataset: pl.DataFrame) -> None:
    """Fail fast on datasets that cannot be aggregated.

    Args:
        dataset (pl.DataFrame): The dataset to check.

    Raises:
        InvalidDatasetError: If the dataset has no columns, no rows, or nulls.
    """
    if dataset.width == 0:
        raise InvalidDatasetError("dataset has no columns, so there is no class column")
    if dataset.height == 0:
        raise InvalidDatasetError("dataset is empty")
    null_columns = [name for name, nulls in zip(dataset.columns, dataset.null_count().row(0), strict=True) if nulls]
    if null_columns:
        raise InvalidDatasetError("missing values are not supported", columns=null_columns)


def _value_counts(dataset: pl.DataFrame, column: str) -> dict[str, int]:
    """Count records per value of ``column``, in first-seen order.

    Args:
        dataset (pl.DataFrame): The dataset.
        column (str): Column to count.

    Returns:
        dict[str, int]: Mapping of value to record count.
    """
    counts = dataset.group_by(column, maintain_order=True).agg(pl.len().alias(_COUNT_COLUMN))
    return {str(value): int(count) for value, count in counts.iter_rows()}


def _cross_counts(dataset: pl.DataFrame, feature: str, class_column: str) -> dict[str, dict[str, int]]:
    """Count records per (feature value, class value) pair.

    Args:
        dataset (pl.DataFrame): The dataset.
        feature (str): Feature column.
        class_column (str): Class column.

    Returns:
        dict[str, dict[str, int]]: Mapping of feature value to class value to
            record count. Both levels keep first-seen order.
    """
    counts = dataset.group_by([feature, class_column], maintain_order=True).agg(pl.len().alias(_COUNT_COLUMN))
    table: dict[str, dict[str, int]] = {}
    for value, class_value, count in counts.iter_rows():
        table.setdefault(str(value), {})[str(class_value)] = int(count)
    return table
