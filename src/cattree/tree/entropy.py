"""Entropy and information gain over an Aggregate."""

from __future__ import annotations

import math
from collections.abc import Mapping

from cattree.exceptions import InvalidDatasetError
from cattree.tree.aggregation import Aggregate


def entropy(count: int, total: int) -> float:
    """Return the entropy contribution of one class value.

    Args:
        count (int): Records carrying the class value.
        total (int): Records in the set.

    Returns:
        float: ``-(count/total) * log2(count/total)``, or 0.0 when either
            argument is zero.

    Examples:
        >>> entropy(1, 2)
        0.5
        >>> entropy(0, 5)
        0.0
    """
    if count == 0 or total == 0:
        return 0.0
    proportion = count / total
    return -proportion * math.log2(proportion)


def total_entropy(class_counts: Mapping[str, int]) -> float:
    """Return the entropy of a class distribution.

    Args:
        class_counts (Mapping[str, int]): Records per class value.

    Returns:
        float: Sum of ``entropy(count, total)`` over the class values.

    Examples:
        >>> total_entropy({"yes": 2, "no": 2})
        1.0
    """
    total = sum(class_counts.values())
    return sum(entropy(count, total) for count in class_counts.values())


def information_gain(aggregate: Aggregate, feature: str) -> float:
    """Return the information gain of splitting on ``feature``.

    Computes ``H(class) - sum_c (n_c / n) * H(class | feature == c)`` where the
    sum skips categories with no records. The value is returned exactly as
    computed; floating-point error can push it slightly below zero.

    Args:
        aggregate (Aggregate): Counts of the subset being split.
        feature (str): Feature to evaluate.

    Returns:
        float: The information gain.

    Raises:
        InvalidDatasetError: If ``feature`` is not a feature of the aggregate.
    """
    try:
        category_counts = aggregate.feature_category_counts[feature]
        cross_counts = aggregate.cross_counts[feature]
    except KeyError:
        raise InvalidDatasetError(f"unknown feature '{feature}'", columns=[feature]) from None

    gain = total_entropy(aggregate.class_counts)
    for category, category_count in category_counts.items():
        if category_count <= 0:
            continue
        class_counts = cross_counts.get(category, {})
        conditional = sum(
            entropy(class_counts.get(class_value, 0), category_count) for class_value in aggregate.class_counts
        )
        gain -= (category_count / aggregate.total_records) * conditional
    return gain


def information_gains(aggregate: Aggregate) -> dict[str, float]:
    """Return the information gain of every feature, in feature order.

    Args:
        aggregate (Aggregate): Counts of the subset being split.

    Returns:
        dict[str, float]: Mapping of feature name to gain.
    """
    return {feature: information_gain(aggregate, feature) for feature in aggregate.feature_names}


def select_best_feature(gains: Mapping[str, float]) -> tuple[str, float] | None:
    """Pick the feature with the strictly greatest gain.

    Ties resolve to the feature enumerated first. Non-finite gains never win.

    Args:
        gains (Mapping[str, float]): Gains in feature order.

    Returns:
        tuple[str, float] | None: ``(feature, gain)``, or ``None`` when no
            gain is a finite number.

    Examples:
        >>> select_best_feature({"outlook": 0.25, "windy": 0.25, "humidity": 0.1})
        ('outlook', 0.25)
        >>> select_best_feature({}) is None
        True
    """
    best: tuple[str, float] | None = None
    for feature, gain in gains.items():
        if not math.isfinite(gain):
            continue
        if best is None or gain > best[1]:
            best = (feature, gain)
    return best
