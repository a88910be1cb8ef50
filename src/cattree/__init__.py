"""cattree: categorical decision trees induced by information gain."""

from loguru import logger

from cattree.dataset import ensure_dataset, load_dataset_csv
from cattree.exceptions import (
    InvalidDatasetError,
    InvalidFeatureSelectionError,
    ModelNotFoundError,
    PredictionUnavailableError,
)
from cattree.logging import PACKAGE_NAME, enable_logging
from cattree.pipeline import predict_with_model, train_model
from cattree.storage import FileSystemStorage, InMemoryStorage, TreeStorage
from cattree.toolkit import DecisionTreeToolkit
from cattree.tree import DecisionTreeModel, Hyperparameters, LeafNode, Prediction, SplitNode, induce, predict

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the cattree package by default

__all__ = [
    "DecisionTreeModel",
    "DecisionTreeToolkit",
    "FileSystemStorage",
    "Hyperparameters",
    "InMemoryStorage",
    "InvalidDatasetError",
    "InvalidFeatureSelectionError",
    "LeafNode",
    "ModelNotFoundError",
    "Prediction",
    "PredictionUnavailableError",
    "SplitNode",
    "TreeStorage",
    "enable_logging",
    "ensure_dataset",
    "induce",
    "load_dataset_csv",
    "predict",
    "predict_with_model",
    "train_model",
]
