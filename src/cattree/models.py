"""Response models returned by the agent tools in ``cattree.toolkit``."""

from __future__ import annotations

from pydantic import BaseModel, Field, JsonValue

from cattree.tree.models import ModelSummary, Prediction


class ToolCallError(BaseModel):
    """Structured error response for LLM tool calls.

    Gives the agent enough context to correct its next call instead of a
    bare exception string.

    Attributes:
        error_type (str): Category of error (e.g. "InvalidDataset", "ModelNotFound").
        message (str): Human-readable error description.
        details (dict[str, JsonValue]): Additional JSON-serializable context.

    Examples:
        >>> error = ToolCallError(
        ...     error_type="ModelNotFound",
        ...     message="Model 'run_1a2b3c4d' not found",
        ...     details={"available_models": ["run_0f0f0f0f"]},
        ... )
        >>> error.error_type
        'ModelNotFound'
    """

    error_type: str = Field(description="Category of the error.", min_length=1)
    message: str = Field(description="Human-readable error description.", min_length=1)
    details: dict[str, JsonValue] = Field(
        default_factory=dict,
        description="Additional error context and suggestions (JSON-serializable).",
    )


class TrainingReport(BaseModel):
    """What the ``train_decision_tree`` tool reports after a successful run.

    Attributes:
        model (ModelSummary): Listable metadata of the new model.
        class_counts (dict[str, int]): Class distribution of the training data.
        feature_categories (dict[str, list[str]]): Observed values per feature,
            i.e. the values ``predict_class`` can route on.
        tree_depth (int): Number of splits on the longest path.
        leaf_count (int): Number of leaves.
        preview (str): The first training rows as a markdown table.
    """

    model: ModelSummary = Field(description="Listable metadata of the new model.")
    class_counts: dict[str, int] = Field(description="Class distribution of the training data.")
    feature_categories: dict[str, list[str]] = Field(description="Observed values per feature.")
    tree_depth: int = Field(ge=0, description="Number of splits on the longest root-to-leaf path.")
    leaf_count: int = Field(ge=1, description="Number of leaves in the tree.")
    preview: str = Field(description="The first training rows as a markdown table.")


class PredictionReport(BaseModel):
    """What the ``predict_class`` tool reports.

    Attributes:
        model_id (str): The model that produced the prediction.
        prediction (Prediction): The prediction itself.
    """

    model_id: str = Field(description="The model that produced the prediction.")
    prediction: Prediction = Field(description="Class probabilities and the most likely class.")
