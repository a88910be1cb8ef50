"""Traversal of an induced tree to classify one feature vector."""

from __future__ import annotations

from collections.abc import Mapping

from cattree.exceptions import PredictionUnavailableError
from cattree.tree.models import LeafNode, Prediction, SplitNode


def predict(root: LeafNode | SplitNode | None, feature_vector: Mapping[str, object]) -> Prediction:
    """Classify ``feature_vector`` by walking the tree from ``root``.

    At each split the branch whose value string-equals the vector's value for
    the split feature is followed. When no branch matches, because the value
    was never seen in training or the key is missing, traversal stops at the
    current split and the prediction is drawn from that split's class counts.

    Args:
        root (LeafNode | SplitNode | None): Root of the tree.
        feature_vector (Mapping[str, object]): Feature name to value. Extra
            keys are ignored.

    Returns:
        Prediction: Probabilities at the stop node, its most likely class, and
            the leaf class when a leaf was reached.

    Raises:
        PredictionUnavailableError: If ``root`` is ``None``.

    Examples:
        >>> tree = SplitNode(
        ...     feature="A",
        ...     gain=0.31,
        ...     class_counts={"yes": 1, "no": 3},
        ...     children=[{"value": "y", "subtree": LeafNode(class_="no", count=2, class_counts={"no": 2})}],
        ... )
        >>> predict(tree, {"A": "y"}).probabilities
        {'no': 1.0}
        >>> predict(tree, {"A": "z"}).node_type
        'node'
    """
    if root is None:
        raise PredictionUnavailableError()

    node = root
    while isinstance(node, SplitNode):
        if node.feature not in feature_vector:
            break
        child = node.child_for(feature_vector[node.feature])
        if child is None:
            break
        node = child.subtree

    probabilities = class_probabilities(node.class_counts)
    return Prediction(
        node_type=node.node_type,
        class_=node.class_ if isinstance(node, LeafNode) else None,
        probabilities=probabilities,
        most_likely=_most_likely(probabilities),
    )


def class_probabilities(class_counts: Mapping[str, int]) -> dict[str, float]:
    """Convert class counts to probabilities, keeping their order.

    Args:
        class_counts (Mapping[str, int]): Records per class.

    Returns:
        dict[str, float]: ``count / max(1, total)`` per class.

    Examples:
        >>> class_probabilities({"yes": 1, "no": 3})
        {'yes': 0.25, 'no': 0.75}
    """
    total = max(1, sum(class_counts.values()))
    return {class_value: count / total for class_value, count in class_counts.items()}


def _most_likely(probabilities: Mapping[str, float]) -> str | None:
    """Return the first class with the highest probability.

    Args:
        probabilities (Mapping[str, float]): Probabilities in class-count order.

    Returns:
        str | None: The winning class, or ``None`` if there are no classes.
    """
    best: str | None = None
    best_probability = -1.0
    for class_value, probability in probabilities.items():
        if probability > best_probability:
            best, best_probability = class_value, probability
    return best
