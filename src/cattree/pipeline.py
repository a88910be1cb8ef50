"""Model lifecycle: train a model from a table, then predict with a stored model.

A run becomes a model only after induction returns successfully: the model
metadata is the last thing written, so a failed run leaves subset tables
behind at most and never appears in ``list_models()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime

from loguru import logger

from cattree.dataset import DatasetLike, class_column, ensure_dataset, feature_columns
from cattree.exceptions import ModelNotFoundError
from cattree.identifier import generate_run_id
from cattree.storage import InMemoryStorage, TreeStorage
from cattree.tree.aggregation import aggregate_dataset
from cattree.tree.induction import induce
from cattree.tree.models import DecisionTreeModel, Hyperparameters, Prediction
from cattree.tree.prediction import predict


def train_model(
    data: DatasetLike,
    *,
    name: str | None = None,
    hyperparameters: Hyperparameters | None = None,
    storage: TreeStorage | None = None,
    run_id: str | None = None,
) -> DecisionTreeModel:
    """Induce a tree from ``data`` and store it as a new model.

    Args:
        data (DatasetLike): Training table; the last column is the class.
        name (str | None): Model name. Defaults to ``Model_<YYYY-MM-DD>``.
        hyperparameters (Hyperparameters | None): Stopping thresholds.
        storage (TreeStorage | None): Where to persist artifacts. Defaults to
            a fresh ``InMemoryStorage``.
        run_id (str | None): Run identifier; generated when omitted.

    Returns:
        DecisionTreeModel: The stored model.

    Raises:
        InvalidDatasetError: If ``data`` is not a valid dataset.
        InvalidFeatureSelectionError: If induction hits a broken invariant.

    Examples:
        >>> records = [
        ...     {"A": "x", "C": "yes"},
        ...     {"A": "x", "C": "no"},
        ...     {"A": "y", "C": "no"},
        ...     {"A": "y", "C": "no"},
        ... ]
        >>> model = train_model(records, name="toy")
        >>> model.feature_names, model.class_categories
        (['A'], ['yes', 'no'])
    """
    dataset = ensure_dataset(data)
    storage = storage if storage is not None else InMemoryStorage()
    run_id = run_id if run_id is not None else generate_run_id()
    params = hyperparameters if hyperparameters is not None else Hyperparameters()
    created_at = datetime.now(UTC)

    tree = induce(dataset, params, run_id, storage=storage)

    aggregate = aggregate_dataset(dataset)
    model = DecisionTreeModel(
        id=run_id,
        name=name or f"Model_{created_at:%Y-%m-%d}",
        tree=tree,
        class_column=class_column(dataset),
        feature_names=feature_columns(dataset),
        class_categories=list(aggregate.class_counts),
        class_counts=aggregate.class_counts,
        feature_categories=aggregate.feature_categories,
        total_records=dataset.height,
        created_at=created_at,
        hyperparameters=params,
    )
    storage.write_model(model)
    logger.info("Model trained", model_id=model.id, name=model.name, records=model.total_records)
    return model


def latest_model(storage: TreeStorage) -> DecisionTreeModel:
    """Load the most recently created model.

    Args:
        storage (TreeStorage): Storage to search.

    Returns:
        DecisionTreeModel: The newest model.

    Raises:
        ModelNotFoundError: If storage holds no model.
    """
    summaries = storage.list_models()
    if not summaries:
        raise ModelNotFoundError()
    return storage.load_model(summaries[0].id)


def resolve_model(storage: TreeStorage, model_id: str | None = None) -> DecisionTreeModel:
    """Load ``model_id``, falling back to the newest model.

    The fallback applies both when no id is given and when the given id does
    not name a stored model.

    Args:
        storage (TreeStorage): Storage to search.
        model_id (str | None): Requested model.

    Returns:
        DecisionTreeModel: The requested model, or the newest one.

    Raises:
        ModelNotFoundError: If storage holds no model at all.
    """
    if model_id is not None:
        try:
            return storage.load_model(model_id)
        except ModelNotFoundError:
            logger.warning("Requested model not found, using latest", model_id=model_id)
    return latest_model(storage)


def predict_with_model(
    storage: TreeStorage,
    feature_vector: Mapping[str, object],
    *,
    model_id: str | None = None,
) -> tuple[DecisionTreeModel, Prediction]:
    """Classify ``feature_vector`` with a stored model.

    Args:
        storage (TreeStorage): Storage holding the model.
        feature_vector (Mapping[str, object]): Feature name to value.
        model_id (str | None): Model to use; the newest model when omitted or
            unknown.

    Returns:
        tuple[DecisionTreeModel, Prediction]: The model used and its prediction.

    Raises:
        ModelNotFoundError: If storage holds no model.
    """
    model = resolve_model(storage, model_id)
    prediction = predict(model.tree, feature_vector)
    logger.debug(
        "Prediction made",
        model_id=model.id,
        node_type=prediction.node_type,
        most_likely=prediction.most_likely,
    )
    return model, prediction
