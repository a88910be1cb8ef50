"""Recursive ID3 induction of categorical decision trees."""

from __future__ import annotations

from typing import TYPE_CHECKING

import polars as pl
from loguru import logger

from cattree.dataset import DatasetLike, ensure_dataset
from cattree.exceptions import InvalidFeatureSelectionError
from cattree.identifier import generate_run_id, validate_run_id
from cattree.tree.aggregation import Aggregate, aggregate_dataset
from cattree.tree.entropy import information_gains, select_best_feature
from cattree.tree.models import Hyperparameters, LeafNode, SplitNode, SubsetPath, TreeChild, tree_depth

if TYPE_CHECKING:
    from cattree.storage import TreeStorage


def induce(
    data: DatasetLike,
    hyperparameters: Hyperparameters | None = None,
    run_id: str | None = None,
    *,
    storage: TreeStorage | None = None,
) -> LeafNode | SplitNode:
    """Grow a decision tree from ``data`` by greedy information gain.

    ``data`` is normalised with ``ensure_dataset`` first, so record sequences
    and DataFrames of any dtype are accepted and every value is compared as a
    string. The last column is the class; every other column is a
    categorical feature. At each node the feature with the highest gain is
    chosen and one branch is grown per category value that occurs in the
    node's subset. Each branch drops the feature it split on, so depth is
    bounded by the number of features even without hyperparameters.

    A node becomes a leaf when its subset is pure, when no features remain,
    when ``max_depth`` is reached, when it holds fewer than
    ``min_samples_split`` records, or when its best gain is below
    ``min_gain``. A leaf predicts the class of the first record in its
    subset, not the majority class.

    When ``storage`` is given, the subset reaching every branch is written
    with ``write_table`` and the finished tree is written once with
    ``write_tree_snapshot``, all under ``run_id``.

    Args:
        data (DatasetLike): Non-empty table, as a DataFrame or a sequence of
            records sharing one key set.
        hyperparameters (Hyperparameters | None): Stopping thresholds; ``None``
            leaves induction unconstrained.
        run_id (str | None): Identifier scoping storage writes. A new one is
            generated when omitted.
        storage (TreeStorage | None): Where to persist subsets and the tree.

    Returns:
        LeafNode | SplitNode: Root of the induced tree.

    Raises:
        InvalidDatasetError: If the table is empty, has no columns, has
            records with differing keys, or has missing values.
        InvalidFeatureSelectionError: If an impure subset with remaining
            features yields no selectable feature.

    Examples:
        >>> df = pl.DataFrame({"A": ["x", "x", "y", "y"], "C": ["yes", "no", "no", "no"]})
        >>> tree = induce(df)
        >>> tree.feature, [child.value for child in tree.children]
        ('A', ['x', 'y'])
    """
    dataset = ensure_dataset(data)
    params = hyperparameters if hyperparameters is not None else Hyperparameters()
    run_id = validate_run_id(run_id) if run_id is not None else generate_run_id()

    logger.info(
        "Induction started",
        run_id=run_id,
        rows=dataset.height,
        features=dataset.width - 1,
        hyperparameters=params.model_dump(exclude_none=True),
    )
    tree = _grow(dataset, params, depth=0, path=(), run_id=run_id, storage=storage)
    if storage is not None:
        storage.write_tree_snapshot(run_id, tree)
    logger.info("Induction finished", run_id=run_id, depth=tree_depth(tree))
    return tree


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _grow(
    subset: pl.DataFrame,
    params: Hyperparameters,
    *,
    depth: int,
    path: SubsetPath,
    run_id: str,
    storage: TreeStorage | None,
) -> LeafNode | SplitNode:
    """Build the subtree for ``subset``.

    Args:
        subset (pl.DataFrame): Records reaching this node; the split features
            of its ancestors have already been dropped.
        params (Hyperparameters): Stopping thresholds.
        depth (int): Depth of this node; the root is at 0.
        path (SubsetPath): ``(feature, value)`` pairs leading here.
        run_id (str): Run identifier for storage writes.
        storage (TreeStorage | None): Storage adapter, if any.

    Returns:
        LeafNode | SplitNode: The subtree.
    """
    aggregate = aggregate_dataset(subset)
    if _should_stop(aggregate, params, depth):
        return _make_leaf(subset, aggregate)

    gains = information_gains(aggregate)
    best = select_best_feature(gains)
    if best is None:
        raise InvalidFeatureSelectionError(aggregate.feature_names, gains)
    feature, gain = best
    if params.min_gain is not None and gain < params.min_gain:
        logger.debug("Gain below threshold", run_id=run_id, feature=feature, gain=gain, min_gain=params.min_gain)
        return _make_leaf(subset, aggregate)

    logger.debug("Split selected", run_id=run_id, depth=depth, feature=feature, gain=gain, rows=subset.height)
    children: list[TreeChild] = []
    for value in aggregate.feature_categories[feature]:
        branch = subset.filter(pl.col(feature) == value)
        if branch.height == 0:
            continue
        branch_path: SubsetPath = (*path, (feature, value))
        if storage is not None:
            storage.write_table(run_id, branch_path, branch)
        subtree = _grow(
            branch.drop(feature),
            params,
            depth=depth + 1,
            path=branch_path,
            run_id=run_id,
            storage=storage,
        )
        children.append(TreeChild(value=value, subtree=subtree))

    return SplitNode(feature=feature, gain=gain, class_counts=aggregate.class_counts, children=children)


def _should_stop(aggregate: Aggregate, params: Hyperparameters, depth: int) -> bool:
    """Return whether a node must become a leaf before evaluating splits.

    Args:
        aggregate (Aggregate): Counts of the node's subset.
        params (Hyperparameters): Stopping thresholds.
        depth (int): Depth of the node.

    Returns:
        bool: True when the subset is pure, no features remain, the depth
            limit is reached, or the subset is too small to split.
    """
    if aggregate.is_pure or not aggregate.feature_names:
        return True
    if params.max_depth is not None and depth >= params.max_depth:
        return True
    return params.min_samples_split is not None and aggregate.total_records < params.min_samples_split


def _make_leaf(subset: pl.DataFrame, aggregate: Aggregate) -> LeafNode:
    """Build a leaf labelled with the class of the subset's first record.

    Args:
        subset (pl.DataFrame): Records reaching the leaf.
        aggregate (Aggregate): Counts of those records.

    Returns:
        LeafNode: The leaf.
    """
    first_class = subset.item(0, aggregate.class_column)
    return LeafNode(class_=str(first_class), count=subset.height, class_counts=aggregate.class_counts)
