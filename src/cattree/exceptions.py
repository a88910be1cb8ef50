"""Custom exceptions for cattree.

Dataset errors (subclass ValueError):
- InvalidDatasetError: The training table is empty, lacks a class column,
  has an inconsistent record schema, or contains missing values.

Induction errors (subclass RuntimeError):
- InvalidFeatureSelectionError: Internal invariant violation: an impure
  subset with remaining features produced no usable best feature.

Prediction errors (subclass LookupError):
- PredictionUnavailableError: No tree was supplied to the predictor.
- ModelNotFoundError: Storage holds no completed model for the request.
"""

from __future__ import annotations

from collections.abc import Mapping


class InvalidDatasetError(ValueError):
    """Raised when a dataset cannot be used for induction.

    Attributes:
        reason (str): Human-readable description of the problem.
        row_index (int | None): Zero-based index of the offending record, when
            the problem is local to one record.
        columns (list[str]): Column names involved in the problem, if any.

    Examples:
        >>> err = InvalidDatasetError("record keys differ from the header", row_index=3, columns=["colour"])
        >>> err.row_index
        3
        >>> str(err)
        'Invalid dataset: record keys differ from the header (row 3)'
    """

    reason: str
    row_index: int | None
    columns: list[str]

    def __init__(
        self,
        reason: str,
        *,
        row_index: int | None = None,
        columns: list[str] | None = None,
    ) -> None:
        """Initialize InvalidDatasetError.

        Args:
            reason (str): Description of the problem.
            row_index (int | None): Zero-based index of the offending record.
            columns (list[str] | None): Column names involved in the problem.
        """
        location = f" (row {row_index})" if row_index is not None else ""
        super().__init__(f"Invalid dataset: {reason}{location}")
        self.reason = reason
        self.row_index = row_index
        self.columns = columns or []

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including reason, row index and columns.
        """
        return (
            f"{self.__class__.__name__}(reason={self.reason!r}, "
            f"row_index={self.row_index!r}, columns={self.columns!r})"
        )


class InvalidFeatureSelectionError(RuntimeError):
    """Raised when induction cannot pick a split feature for an impure subset.

    This signals a broken invariant rather than bad input: every remaining
    feature should produce a finite information gain. Induction aborts instead
    of emitting a malformed tree.

    Attributes:
        features (list[str]): Candidate features at the failing node.
        gains (dict[str, float]): The gains computed for those features.
    """

    features: list[str]
    gains: dict[str, float]

    def __init__(self, features: list[str], gains: Mapping[str, float]) -> None:
        """Initialize InvalidFeatureSelectionError.

        Args:
            features (list[str]): Candidate features at the failing node.
            gains (Mapping[str, float]): Gains computed for the candidates.
        """
        super().__init__(f"No split feature could be selected among {features}")
        self.features = features
        self.gains = dict(gains)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(features={self.features!r}, gains={self.gains!r})"


class PredictionUnavailableError(LookupError):
    """Raised when a prediction is requested without a tree to traverse.

    Attributes:
        model_id (str | None): The model that was requested, if any.
    """

    model_id: str | None

    def __init__(self, message: str = "No decision tree available for prediction", *, model_id: str | None = None) -> None:
        """Initialize PredictionUnavailableError.

        Args:
            message (str): Description of why no tree is available.
            model_id (str | None): The model that was requested, if any.
        """
        super().__init__(message)
        self.model_id = model_id

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={str(self)!r}, model_id={self.model_id!r})"


class ModelNotFoundError(PredictionUnavailableError):
    """Raised when storage has no completed model under the requested id.

    Examples:
        >>> err = ModelNotFoundError(model_id="run_1a2b3c4d")
        >>> str(err)
        "Model 'run_1a2b3c4d' not found"
        >>> isinstance(err, PredictionUnavailableError)
        True
    """

    def __init__(self, *, model_id: str | None = None) -> None:
        """Initialize ModelNotFoundError.

        Args:
            model_id (str | None): The requested model id; ``None`` means no
                model exists in storage at all.
        """
        message = f"Model '{model_id}' not found" if model_id is not None else "No models found"
        super().__init__(message, model_id=model_id)
