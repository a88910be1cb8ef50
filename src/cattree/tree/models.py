"""Pydantic models for decision trees, hyperparameters, trained models and predictions.

Serialized field names are camelCase (``classCounts``, ``nodeType``) and the
node discriminator is stored under ``type`` with the values ``"leaf"`` and
``"node"``, so persisted ``tree.json`` files keep a stable wire format.
Python attributes stay snake_case; ``class`` is exposed as ``class_``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

from cattree.identifier import RunId

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type NodeType = Literal["leaf", "node"]

# (feature, value) pairs from the root down to a subset
type SubsetPath = tuple[tuple[str, str], ...]

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    serialize_by_alias=True,
)

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """Terminal node holding a predicted class and the class distribution behind it.

    Attributes:
        node_type (Literal["leaf"]): Discriminator; serialized as ``"type": "leaf"``.
        class_ (str): Class of the first training record that reached this
            leaf. This is deliberately not a majority vote; ``class_counts``
            carries the full distribution.
        count (int): Number of training records that reached this leaf.
        class_counts (dict[str, int]): Class distribution of those records, in
            first-seen order.

    Examples:
        >>> leaf = LeafNode(class_="no", count=2, class_counts={"no": 2})
        >>> leaf.model_dump()
        {'type': 'leaf', 'class': 'no', 'count': 2, 'classCounts': {'no': 2}}
    """

    model_config = _WIRE_CONFIG

    node_type: Literal["leaf"] = Field(default="leaf", alias="type", description='Discriminator. Always "leaf".')
    class_: str = Field(alias="class", description="Class of the first record reaching this leaf.")
    count: int = Field(ge=1, description="Number of training records reaching this leaf.")
    class_counts: dict[str, int] = Field(description="Class distribution of the records reaching this leaf.")

    @model_validator(mode="after")
    def _validate_counts_add_up(self) -> LeafNode:
        """Validate that the class distribution sums to ``count``.

        Returns:
            LeafNode: The validated model instance.

        Raises:
            ValueError: If the class counts do not add up to ``count``.
        """
        total = sum(self.class_counts.values())
        if total != self.count:
            raise ValueError(f"classCounts sum to {total} but count is {self.count}")
        return self


class SplitNode(BaseModel):
    """Internal node partitioning records by the categories of one feature.

    Attributes:
        node_type (Literal["node"]): Discriminator; serialized as ``"type": "node"``.
        feature (str): The feature this node splits on.
        gain (float): Information gain of ``feature`` over the subset reaching
            this node. May be negative; it is reported exactly as computed.
        class_counts (dict[str, int]): Class distribution over the whole subset
            reaching this node, before splitting.
        children (list[TreeChild]): One child per category of ``feature``
            observed in the subset, in first-seen order.
    """

    model_config = _WIRE_CONFIG

    node_type: Literal["node"] = Field(default="node", alias="type", description='Discriminator. Always "node".')
    feature: str = Field(description="Feature this node splits on.")
    gain: float = Field(description="Information gain of the split feature at this node.")
    class_counts: dict[str, int] = Field(description="Class distribution before splitting.")
    children: list[TreeChild] = Field(default_factory=list, description="Branches, one per observed category.")

    @model_validator(mode="after")
    def _validate_distinct_child_values(self) -> SplitNode:
        """Validate that no two branches share a category value.

        Returns:
            SplitNode: The validated model instance.

        Raises:
            ValueError: If a category value labels more than one branch.
        """
        values = [child.value for child in self.children]
        if len(values) != len(set(values)):
            raise ValueError(f"Split on '{self.feature}' has duplicate branch values: {values}")
        return self

    def child_for(self, value: object) -> TreeChild | None:
        """Return the branch whose value string-equals ``value``, if any.

        Args:
            value (object): A feature value; compared via ``str()``.

        Returns:
            TreeChild | None: The matching branch, or ``None``.
        """
        text = str(value)
        return next((child for child in self.children if child.value == text), None)


class TreeChild(BaseModel):
    """One branch of a split: a category value and the subtree it leads to."""

    model_config = _WIRE_CONFIG

    value: str = Field(description="Category value of the parent's split feature.")
    subtree: TreeNode = Field(description="Subtree for records carrying this value.")


TreeNode = Annotated[LeafNode | SplitNode, Field(discriminator="node_type")]

SplitNode.model_rebuild()
TreeChild.model_rebuild()

TREE_NODE_ADAPTER: TypeAdapter[LeafNode | SplitNode] = TypeAdapter(TreeNode)


def dump_tree_json(tree: LeafNode | SplitNode, *, indent: int | None = 2) -> str:
    """Serialize a tree to its JSON wire format.

    Args:
        tree (LeafNode | SplitNode): Root of the tree.
        indent (int | None): JSON indentation; ``None`` for compact output.

    Returns:
        str: The JSON document.
    """
    return TREE_NODE_ADAPTER.dump_json(tree, indent=indent, by_alias=True).decode()


def load_tree_json(data: str | bytes) -> LeafNode | SplitNode:
    """Parse a tree from its JSON wire format.

    Args:
        data (str | bytes): A document produced by ``dump_tree_json``.

    Returns:
        LeafNode | SplitNode: The root of the parsed tree.

    Raises:
        pydantic.ValidationError: If the document is not a valid tree.
    """
    return TREE_NODE_ADAPTER.validate_json(data)


def iter_nodes(tree: LeafNode | SplitNode) -> list[LeafNode | SplitNode]:
    """List every node of a tree in depth-first pre-order.

    Args:
        tree (LeafNode | SplitNode): Root of the tree.

    Returns:
        list[LeafNode | SplitNode]: All nodes, root first.
    """
    nodes: list[LeafNode | SplitNode] = []
    stack: list[LeafNode | SplitNode] = [tree]
    while stack:
        node = stack.pop()
        nodes.append(node)
        if isinstance(node, SplitNode):
            stack.extend(child.subtree for child in reversed(node.children))
    return nodes


def tree_depth(tree: LeafNode | SplitNode) -> int:
    """Return the number of splits on the longest root-to-leaf path.

    Args:
        tree (LeafNode | SplitNode): Root of the tree.

    Returns:
        int: 0 for a single leaf.
    """
    if isinstance(tree, LeafNode) or not tree.children:
        return 0
    return 1 + max(tree_depth(child.subtree) for child in tree.children)


# ---------------------------------------------------------------------------
# Hyperparameters
# ---------------------------------------------------------------------------


class Hyperparameters(BaseModel):
    """Optional stopping thresholds for induction. ``None`` means unconstrained.

    Attributes:
        max_depth (int | None): Nodes at this depth become leaves. The root is
            at depth 0, so ``max_depth=1`` allows a single split.
        min_samples_split (int | None): Subsets with fewer records become leaves.
        min_gain (float | None): A best split with a lower gain becomes a leaf.

    Examples:
        >>> Hyperparameters(max_depth=3).model_dump()
        {'maxDepth': 3, 'minSamplesSplit': None, 'minGain': None}
    """

    model_config = _WIRE_CONFIG

    max_depth: int | None = Field(default=None, gt=0, description="Maximum depth of the tree.")
    min_samples_split: int | None = Field(default=None, gt=0, description="Minimum records needed to split.")
    min_gain: float | None = Field(default=None, ge=0.0, description="Minimum information gain needed to split.")


# ---------------------------------------------------------------------------
# Trained models
# ---------------------------------------------------------------------------


class DecisionTreeModel(BaseModel):
    """A tree together with the metadata of the induction run that built it.

    Models are created once, by one successful run, and never modified.

    Attributes:
        id (RunId): Identifier of the induction run, also the storage namespace.
        name (str): Human-readable model name.
        tree (TreeNode): Root of the induced tree.
        class_column (str): Name of the class column in the training data.
        feature_names (list[str]): Feature columns in training order.
        class_categories (list[str]): Class values in first-seen order.
        class_counts (dict[str, int]): Class distribution of the training data.
        feature_categories (dict[str, list[str]]): Observed values per feature,
            in first-seen order.
        total_records (int): Number of training records.
        created_at (datetime): When the model was created (UTC).
        hyperparameters (Hyperparameters): Stopping thresholds used.
    """

    model_config = _WIRE_CONFIG

    id: RunId = Field(description="Identifier of the induction run that produced this model.")
    name: str = Field(min_length=1, description="Human-readable model name.")
    tree: TreeNode = Field(description="Root of the induced tree.")
    class_column: str = Field(description="Name of the class column in the training data.")
    feature_names: list[str] = Field(description="Feature columns in training order.")
    class_categories: list[str] = Field(description="Class values in first-seen order.")
    class_counts: dict[str, int] = Field(description="Class distribution of the training data.")
    feature_categories: dict[str, list[str]] = Field(description="Observed values per feature.")
    total_records: int = Field(ge=1, description="Number of training records.")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Creation time (UTC).")
    hyperparameters: Hyperparameters = Field(default_factory=Hyperparameters, description="Stopping thresholds.")


class ModelSummary(BaseModel):
    """Listable metadata of a stored model.

    Examples:
        >>> summary = ModelSummary(
        ...     id="run_1a2b3c4d",
        ...     name="weather",
        ...     created_at=datetime(2024, 1, 1, tzinfo=UTC),
        ...     feature_count=4,
        ...     class_count=2,
        ...     total_records=14,
        ... )
        >>> summary.feature_count
        4
    """

    model_config = _WIRE_CONFIG

    id: RunId = Field(description="Model identifier.")
    name: str = Field(description="Human-readable model name.")
    created_at: datetime = Field(description="Creation time (UTC).")
    feature_count: int = Field(ge=0, description="Number of feature columns.")
    class_count: int = Field(ge=1, description="Number of distinct classes.")
    total_records: int = Field(ge=1, description="Number of training records.")

    @classmethod
    def from_model(cls, model: DecisionTreeModel) -> ModelSummary:
        """Summarize a trained model.

        Args:
            model (DecisionTreeModel): The model to summarize.

        Returns:
            ModelSummary: The model's listable metadata.
        """
        return cls(
            id=model.id,
            name=model.name,
            created_at=model.created_at,
            feature_count=len(model.feature_names),
            class_count=len(model.class_categories),
            total_records=model.total_records,
        )


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


class Prediction(BaseModel):
    """Outcome of traversing a tree with one feature vector.

    Attributes:
        node_type (NodeType): Kind of node where traversal stopped. ``"node"``
            means an unseen or missing value stopped traversal at a split.
        class_ (str | None): The leaf's class; ``None`` unless traversal
            reached a genuine leaf.
        probabilities (dict[str, float]): Class probabilities from the stop
            node's class counts.
        most_likely (str | None): Class with the highest probability; ties go
            to the first in class-count order.
    """

    model_config = _WIRE_CONFIG

    node_type: NodeType = Field(description='Where traversal stopped: "leaf" or "node".')
    class_: str | None = Field(default=None, alias="class", description="Leaf class, if a leaf was reached.")
    probabilities: dict[str, float] = Field(description="Class probabilities at the stop node.")
    most_likely: str | None = Field(default=None, description="Most probable class.")
