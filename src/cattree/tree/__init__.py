"""Decision tree sub-package: aggregation, information gain, induction and prediction."""

from __future__ import annotations

from cattree.tree.aggregation import Aggregate, aggregate_dataset
from cattree.tree.entropy import (
    entropy,
    information_gain,
    information_gains,
    select_best_feature,
    total_entropy,
)
from cattree.tree.induction import induce
from cattree.tree.models import (
    DecisionTreeModel,
    Hyperparameters,
    LeafNode,
    ModelSummary,
    Prediction,
    SplitNode,
    TreeChild,
    TreeNode,
    dump_tree_json,
    load_tree_json,
)
from cattree.tree.prediction import class_probabilities, predict

__all__ = [
    "Aggregate",
    "DecisionTreeModel",
    "Hyperparameters",
    "LeafNode",
    "ModelSummary",
    "Prediction",
    "SplitNode",
    "TreeChild",
    "TreeNode",
    "aggregate_dataset",
    "class_probabilities",
    "dump_tree_json",
    "entropy",
    "induce",
    "information_gain",
    "information_gains",
    "load_tree_json",
    "predict",
    "select_best_feature",
    "total_entropy",
]
