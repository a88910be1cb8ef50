"""Storage adapters for induction artifacts and trained models.

Induction writes two kinds of artifacts, always scoped by a run id:

1. The subset of records reaching each branch, as a flat table keyed by the
   ``(feature, value)`` path from the root.
2. A snapshot of the finished tree.

The training pipeline additionally writes the model metadata once induction
has succeeded. Only runs with model metadata are listed or loaded as models,
so the artifacts of a failed run are never mistaken for a usable model.

``FileSystemStorage`` lays a run out as::

    <root>/<run_id>/tree.json
    <root>/<run_id>/model.json
    <root>/<run_id>/subsets/<feature>/<value>.csv
    <root>/<run_id>/subsets/<feature>/<value>/<feature>/<value>.csv

Feature names and values are percent-encoded into path segments, so
distinct values always land in distinct files.
"""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

import polars as pl
from loguru import logger

from cattree.config import get_settings
from cattree.exceptions import ModelNotFoundError
from cattree.identifier import RUN_ID_PATTERN
from cattree.tree.models import (
    DecisionTreeModel,
    LeafNode,
    ModelSummary,
    SplitNode,
    SubsetPath,
    dump_tree_json,
    load_tree_json,
)

__all__ = ["FileSystemStorage", "InMemoryStorage", "TreeStorage"]

_UNSAFE_PATH_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")
_TREE_FILE = "tree.json"
_MODEL_FILE = "model.json"
_SUBSETS_DIR = "subsets"


@runtime_checkable
class TreeStorage(Protocol):
    """Protocol for storage backends used by induction and the training pipeline.

    Implementations own all naming and layout decisions. The only requirement
    is that everything written for one run id stays inside that run's
    namespace, so independent runs can proceed concurrently.
    """

    def write_table(self, run_id: str, path: SubsetPath, table: pl.DataFrame) -> None:
        """Persist the records reaching the branch identified by ``path``.

        Args:
            run_id (str): Identifier of the induction run.
            path (SubsetPath): ``(feature, value)`` pairs from the root to the branch.
            table (pl.DataFrame): The records; headers are the column names.
        """
        ...

    def write_tree_snapshot(self, run_id: str, tree: LeafNode | SplitNode) -> None:
        """Persist (or replace) the tree snapshot of a run.

        Args:
            run_id (str): Identifier of the induction run.
            tree (LeafNode | SplitNode): Root of the tree.
        """
        ...

    def write_model(self, model: DecisionTreeModel) -> None:
        """Persist the metadata that makes a run a listable model.

        Args:
            model (DecisionTreeModel): The trained model.
        """
        ...

    def load_model(self, run_id: str) -> DecisionTreeModel:
        """Load a completed model.

        Args:
            run_id (str): Model identifier.

        Returns:
            DecisionTreeModel: The model.

        Raises:
            ModelNotFoundError: If no completed model has this id.
        """
        ...

    def load_tree(self, run_id: str) -> LeafNode | SplitNode:
        """Load the tree snapshot of a run.

        Args:
            run_id (str): Run identifier.

        Returns:
            LeafNode | SplitNode: Root of the tree.

        Raises:
            ModelNotFoundError: If the run has no tree snapshot.
        """
        ...

    def list_models(self) -> list[ModelSummary]:
        """List completed models, newest first.

        Returns:
            list[ModelSummary]: Summaries sorted by creation time, descending.
        """
        ...


class FileSystemStorage:
    """Stores each run in its own directory below ``root``.

    Subset tables are written as CSV with polars; the tree snapshot and model
    metadata are written as JSON through a temporary file and an atomic
    rename, so readers never observe a half-written document.

    Examples:
        >>> storage = FileSystemStorage("/tmp/cattree-doctest")  # doctest: +SKIP
        >>> storage.list_models()  # doctest: +SKIP
        []
    """

    def __init__(self, root: str | Path | None = None) -> None:
        """Initialize the storage.

        Args:
            root (str | Path | None): Root directory. Defaults to
                ``Settings.storage_dir``.
        """
        self.root = Path(root) if root is not None else get_settings().storage_dir

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root={str(self.root)!r})"

    def run_dir(self, run_id: str) -> Path:
        """Return the directory holding the artifacts of ``run_id``.

        Args:
            run_id (str): Run identifier.

        Returns:
            Path: ``<root>/<run_id>``.

        Raises:
            ModelNotFoundError: If ``run_id`` is not a valid run identifier.
        """
        if not RUN_ID_PATTERN.match(run_id):
            raise ModelNotFoundError(model_id=run_id)
        return self.root / run_id

    def table_path(self, run_id: str, path: SubsetPath) -> Path:
        """Return the CSV file that holds the subset at ``path``.

        Args:
            run_id (str): Run identifier.
            path (SubsetPath): ``(feature, value)`` pairs from the root.

        Returns:
            Path: Location of the CSV file.

        Raises:
            ValueError: If ``path`` is empty; the full dataset is not a subset.
        """
        if not path:
            raise ValueError("Subset path must contain at least one (feature, value) pair")
        parts = [_safe_name(part) for pair in path for part in pair]
        *directories, file_stem = parts
        return self.run_dir(run_id).joinpath(_SUBSETS_DIR, *directories, f"{file_stem}.csv")

    def write_table(self, run_id: str, path: SubsetPath, table: pl.DataFrame) -> None:
        file_path = self.table_path(run_id, path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        table.write_csv(file_path)
        logger.debug("Subset table written", run_id=run_id, path=str(file_path), rows=table.height)

    def write_tree_snapshot(self, run_id: str, tree: LeafNode | SplitNode) -> None:
        _write_text_atomic(self.run_dir(run_id) / _TREE_FILE, dump_tree_json(tree))
        logger.debug("Tree snapshot written", run_id=run_id)

    def write_model(self, model: DecisionTreeModel) -> None:
        _write_text_atomic(self.run_dir(model.id) / _MODEL_FILE, model.model_dump_json(indent=2, by_alias=True))
        logger.info("Model stored", model_id=model.id, name=model.name, root=str(self.root))

    def load_model(self, run_id: str) -> DecisionTreeModel:
        model_path = self.run_dir(run_id) / _MODEL_FILE
        if not model_path.is_file():
            raise ModelNotFoundError(model_id=run_id)
        return DecisionTreeModel.model_validate_json(model_path.read_text(encoding="utf-8"))

    def load_tree(self, run_id: str) -> LeafNode | SplitNode:
        tree_path = self.run_dir(run_id) / _TREE_FILE
        if not tree_path.is_file():
            raise ModelNotFoundError(model_id=run_id)
        return load_tree_json(tree_path.read_text(encoding="utf-8"))

    def list_models(self) -> list[ModelSummary]:
        if not self.root.is_dir():
            return []
        summaries = [
            ModelSummary.from_model(self.load_model(entry.name))
            for entry in self.root.iterdir()
            if entry.is_dir() and RUN_ID_PATTERN.match(entry.name) and (entry / _MODEL_FILE).is_file()
        ]
        return _newest_first(summaries)


class InMemoryStorage:
    """Keeps every artifact in process memory. Safe to share between threads.

    Examples:
        >>> storage = InMemoryStorage()
        >>> storage.list_models()
        []
    """

    def __init__(self) -> None:
        """Initialize empty stores."""
        self._lock = threading.Lock()
        self._tables: dict[tuple[str, SubsetPath], pl.DataFrame] = {}
        self._trees: dict[str, LeafNode | SplitNode] = {}
        self._models: dict[str, DecisionTreeModel] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(runs={sorted(self._trees)})"

    def tables(self, run_id: str) -> dict[SubsetPath, pl.DataFrame]:
        """Return the subset tables written for ``run_id``, in write order.

        Args:
            run_id (str): Run identifier.

        Returns:
            dict[SubsetPath, pl.DataFrame]: Tables keyed by subset path.
        """
        with self._lock:
            return {path: table for (table_run_id, path), table in self._tables.items() if table_run_id == run_id}

    def write_table(self, run_id: str, path: SubsetPath, table: pl.DataFrame) -> None:
        with self._lock:
            self._tables[(run_id, path)] = table
        logger.debug("Subset table stored", run_id=run_id, path=path, rows=table.height)

    def write_tree_snapshot(self, run_id: str, tree: LeafNode | SplitNode) -> None:
        with self._lock:
            self._trees[run_id] = tree

    def write_model(self, model: DecisionTreeModel) -> None:
        with self._lock:
            self._models[model.id] = model
        logger.info("Model stored", model_id=model.id, name=model.name)

    def load_model(self, run_id: str) -> DecisionTreeModel:
        with self._lock:
            model = self._models.get(run_id)
        if model is None:
            raise ModelNotFoundError(model_id=run_id)
        return model

    def load_tree(self, run_id: str) -> LeafNode | SplitNode:
        with self._lock:
            tree = self._trees.get(run_id)
        if tree is None:
            raise ModelNotFoundError(model_id=run_id)
        return tree

    def list_models(self) -> list[ModelSummary]:
        with self._lock:
            models = list(self._models.values())
        return _newest_first([ModelSummary.from_model(model) for model in models])


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _safe_name(value: str) -> str:
    """Percent-encode every character outside ``[A-Za-z0-9_-]``.

    Each unsafe character becomes ``%XX`` per UTF-8 byte, so ``"a b"`` maps
    to ``a%20b`` while ``"a_b"`` stays ``a_b``. The mapping is injective:
    distinct values never share a file. Dots and separators are encoded
    too, so no name can step outside the run directory.

    Args:
        value (str): A feature name or category value.

    Returns:
        str: The encoded name; ``"%"`` for the empty string.

    Examples:
        >>> _safe_name("../up here")
        '%2E%2E%2Fup%20here'
    """
    return _UNSAFE_PATH_CHARS.sub(_percent_encode, value) or "%"


def _percent_encode(match: re.Match[str]) -> str:
    return "".join(f"%{byte:02X}" for byte in match.group().encode("utf-8"))


def _write_text_atomic(target: Path, text: str) -> None:
    """Write ``text`` to ``target`` via a sibling temporary file and rename.

    Args:
        target (Path): Destination file.
        text (str): Content to write.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    temporary = target.with_suffix(target.suffix + ".tmp")
    temporary.write_text(text, encoding="utf-8")
    temporary.replace(target)


def _newest_first(summaries: list[ModelSummary]) -> list[ModelSummary]:
    """Sort summaries by creation time, newest first.

    Args:
        summaries (list[ModelSummary]): Unsorted summaries.

    Returns:
        list[ModelSummary]: Sorted summaries.
    """
    return sorted(summaries, key=lambda summary: summary.created_at, reverse=True)
