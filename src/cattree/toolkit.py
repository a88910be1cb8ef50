"""LangChain tools for training categorical decision trees and classifying with them.

The toolkit lets an LLM agent train a model from a CSV file, list stored
models, inspect a model's tree, and classify feature vectors. Failures are
returned as ``ToolCallError`` values rather than raised, so the agent can
read the error and retry with corrected arguments.
"""

from __future__ import annotations

import inspect
from pathlib import Path

from langchain_core.tools import BaseTool, tool
from loguru import logger

from cattree.config import get_settings
from cattree.dataset import load_dataset_csv, preview_markdown
from cattree.exceptions import InvalidDatasetError, InvalidFeatureSelectionError, ModelNotFoundError
from cattree.logging import TOOL_CALL_LEVEL
from cattree.models import PredictionReport, ToolCallError, TrainingReport
from cattree.pipeline import latest_model, predict_with_model, train_model
from cattree.storage import FileSystemStorage, TreeStorage
from cattree.tree.models import DecisionTreeModel, Hyperparameters, LeafNode, ModelSummary, iter_nodes, tree_depth


class DecisionTreeToolkit:
    """Agent-facing tools over a model store.

    Attributes:
        SYSTEM_PROMPT (str): Guidance describing the tools and their workflow.

    Examples:
        >>> from cattree.storage import InMemoryStorage
        >>> toolkit = DecisionTreeToolkit(InMemoryStorage())
        >>> sorted(t.name for t in toolkit.get_tools())
        ['get_tree', 'list_models', 'predict_class', 'train_decision_tree']
        >>> toolkit.list_models()
        []
    """

    SYSTEM_PROMPT: str = (
        "You have access to a decision tree toolkit for categorical data:\n\n"
        "- **train_decision_tree**: Train a model from a CSV file whose last "
        "column is the class label and whose other columns are categorical "
        "features. Returns the model ID, class counts and the observed values "
        "of every feature.\n"
        "- **list_models**: List trained models, newest first.\n"
        "- **get_tree**: Show a model's full tree. Omit the model ID for the "
        "newest model.\n"
        "- **predict_class**: Classify one record given as a mapping of feature "
        "name to value. Omit the model ID for the newest model.\n\n"
        "Workflow: train a model (or pick one with list_models), then call "
        "predict_class with values taken from the reported feature categories. "
        "Unseen values are allowed; the prediction then comes from the last "
        "split the record could follow."
    )

    def __init__(self, storage: TreeStorage | None = None) -> None:
        """Initialize the toolkit.

        Args:
            storage (TreeStorage | None): Model store. Defaults to a
                ``FileSystemStorage`` rooted at ``Settings.storage_dir``.
        """
        self._storage = storage if storage is not None else FileSystemStorage()
        self._tools = (
            tool(self.train_decision_tree),
            tool(self.list_models),
            tool(self.get_tree),
            tool(self.predict_class),
        )

    @property
    def storage(self) -> TreeStorage:
        """The model store backing the tools."""
        return self._storage

    def get_tools(self, exclude: set[str] | None = None) -> list[BaseTool]:
        """Return the LangChain tools, minus any excluded by name.

        Args:
            exclude (set[str] | None): Tool names to leave out.

        Returns:
            list[BaseTool]: The tools.
        """
        tools = list(self._tools)
        if exclude is not None:
            tools = [t for t in tools if t.name not in exclude]
        return tools

    def get_system_prompt(self) -> str:
        """Return guidance text for an agent using these tools.

        Returns:
            str: The system prompt.
        """
        return self.SYSTEM_PROMPT

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    def train_decision_tree(
        self,
        csv_path: str,
        model_name: str | None = None,
        max_depth: int | None = None,
        min_samples_split: int | None = None,
        min_gain: float | None = None,
    ) -> TrainingReport | ToolCallError:
        """Train a categorical decision tree from a CSV file.

        The last CSV column is the class label; every other column is a
        categorical feature. All values are treated as text.

        Args:
            csv_path (str): Path to the CSV file.
            model_name (str | None): Name for the model. Defaults to Model_<date>.
            max_depth (int | None): Maximum number of splits on any path.
            min_samples_split (int | None): Minimum records a node needs to split.
            min_gain (float | None): Minimum information gain a split needs.

        Returns:
            TrainingReport | ToolCallError: Model summary, class counts, feature
                values and a preview of the data, or an error.
        """
        tool_name = _current_tool_name()
        logger.log(TOOL_CALL_LEVEL, _TOOL_CALL_MSG.format(tool_name=tool_name), csv_path=csv_path)

        if not Path(csv_path).is_file():
            return self._log_error(
                tool_name,
                ToolCallError(error_type="FileNotFound", message=f"CSV file '{csv_path}' does not exist"),
            )
        try:
            hyperparameters = Hyperparameters(
                max_depth=max_depth,
                min_samples_split=min_samples_split,
                min_gain=min_gain,
            )
        except ValueError as exc:
            return self._log_error(tool_name, ToolCallError(error_type="InvalidArgument", message=str(exc)))

        try:
            dataset = load_dataset_csv(csv_path)
            model = train_model(dataset, name=model_name, hyperparameters=hyperparameters, storage=self._storage)
        except InvalidDatasetError as exc:
            return self._log_error(
                tool_name,
                ToolCallError(
                    error_type="InvalidDataset",
                    message=str(exc),
                    details={"row_index": exc.row_index, "columns": list(exc.columns)},
                ),
            )
        except InvalidFeatureSelectionError as exc:
            return self._log_error(
                tool_name,
                ToolCallError(error_type="InductionFailed", message=str(exc), details={"gains": dict(exc.gains)}),
            )

        report = TrainingReport(
            model=ModelSummary.from_model(model),
            class_counts=model.class_counts,
            feature_categories=model.feature_categories,
            tree_depth=tree_depth(model.tree),
            leaf_count=sum(isinstance(node, LeafNode) for node in iter_nodes(model.tree)),
            preview=preview_markdown(dataset, get_settings().preview_rows),
        )
        logger.debug(_TOOL_CALL_RESULT_MSG.format(tool_name=tool_name), model_id=model.id)
        return report

    def list_models(self) -> list[ModelSummary]:
        """List trained models, newest first.

        Returns:
            list[ModelSummary]: ID, name, creation time and size of every model.
        """
        tool_name = _current_tool_name()
        logger.log(TOOL_CALL_LEVEL, _TOOL_CALL_MSG.format(tool_name=tool_name))
        summaries = self._storage.list_models()
        logger.debug(_TOOL_CALL_RESULT_MSG.format(tool_name=tool_name), count=len(summaries))
        return summaries

    def get_tree(self, model_id: str | None = None) -> DecisionTreeModel | ToolCallError:
        """Show a trained model including its full decision tree.

        Args:
            model_id (str | None): Model ID (run_xxxxxxxx). Omit for the newest model.

        Returns:
            DecisionTreeModel | ToolCallError: The model and tree, or an error
                if the model does not exist.
        """
        tool_name = _current_tool_name()
        logger.log(TOOL_CALL_LEVEL, _TOOL_CALL_MSG.format(tool_name=tool_name), model_id=model_id)
        try:
            model = self._storage.load_model(model_id) if model_id is not None else latest_model(self._storage)
        except ModelNotFoundError as exc:
            return self._log_error(tool_name, self._model_not_found(exc))
        logger.debug(_TOOL_CALL_RESULT_MSG.format(tool_name=tool_name), model_id=model.id)
        return model

    def predict_class(
        self,
        features: dict[str, str],
        model_id: str | None = None,
    ) -> PredictionReport | ToolCallError:
        """Classify one record with a trained model.

        Args:
            features (dict[str, str]): Feature name to categorical value.
            model_id (str | None): Model ID (run_xxxxxxxx). Omit, or pass an
                unknown ID, to use the newest model.

        Returns:
            PredictionReport | ToolCallError: Class probabilities and the most
                likely class, or an error if no model exists.
        """
        tool_name = _current_tool_name()
        logger.log(TOOL_CALL_LEVEL, _TOOL_CALL_MSG.format(tool_name=tool_name), model_id=model_id, features=features)
        try:
            model, prediction = predict_with_model(self._storage, features, model_id=model_id)
        except ModelNotFoundError as exc:
            return self._log_error(tool_name, self._model_not_found(exc))
        logger.debug(
            _TOOL_CALL_RESULT_MSG.format(tool_name=tool_name),
            model_id=model.id,
            most_likely=prediction.most_likely,
        )
        return PredictionReport(model_id=model.id, prediction=prediction)

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    def _model_not_found(self, error: ModelNotFoundError) -> ToolCallError:
        """Convert a missing-model error, listing the models that do exist.

        Args:
            error (ModelNotFoundError): The storage error.

        Returns:
            ToolCallError: The tool response.
        """
        return ToolCallError(
            error_type="ModelNotFound",
            message=str(error),
            details={"available_models": [summary.id for summary in self._storage.list_models()]},
        )

    @staticmethod
    def _log_error(tool_name: str, error: ToolCallError) -> ToolCallError:
        logger.warning(
            _TOOL_CALL_ERROR_MSG.format(tool_name=tool_name),
            error_type=error.error_type,
            message=error.message,
        )
        return error


_TOOL_CALL_MSG = "Tool call: {tool_name}"
_TOOL_CALL_ERROR_MSG = "Tool call error: {tool_name}"
_TOOL_CALL_RESULT_MSG = "Tool call result: {tool_name}"


def _current_tool_name() -> str:
    """Return the name of the calling function, or "unknown".

    Returns:
        str: The caller's function name.
    """
    frame = inspect.currentframe()
    caller_frame = frame.f_back if frame is not None else None
    return caller_frame.f_code.co_name if caller_frame is not None else "unknown"
