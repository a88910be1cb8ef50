"""Conversion and validation of training tables into datasets.

A dataset is a ``polars.DataFrame`` whose columns all hold strings. Column
order matters: the last column is the class, every other column is a
categorical feature.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO

import polars as pl
from loguru import logger

from cattree.exceptions import InvalidDatasetError

type DatasetLike = pl.DataFrame | Sequence[Mapping[str, object]]


def ensure_dataset(data: DatasetLike) -> pl.DataFrame:
    """Validate ``data`` and return it as an all-string DataFrame.

    Record sequences must share one key set; the key order of the first
    record fixes the column order.

    Args:
        data (DatasetLike): A DataFrame or a sequence of records.

    Returns:
        pl.DataFrame: The dataset, every column cast to ``pl.String``.

    Raises:
        InvalidDatasetError: If there are no records, no columns, records
            with differing keys, or missing values.

    Examples:
        >>> df = ensure_dataset([{"A": "x", "C": "yes"}, {"A": "y", "C": "no"}])
        >>> df.columns
        ['A', 'C']
    """
    dataset = data if isinstance(data, pl.DataFrame) else _records_to_frame(data)

    if dataset.width == 0:
        raise InvalidDatasetError("dataset has no columns, so there is no class column")
    if dataset.height == 0:
        raise InvalidDatasetError("dataset is empty")

    dataset = dataset.select(pl.all().cast(pl.String))
    null_columns = [column for column in dataset.columns if dataset[column].null_count() > 0]
    if null_columns:
        raise InvalidDatasetError("missing values are not supported", columns=null_columns)
    return dataset


def load_dataset_csv(source: str | Path | IO[str] | IO[bytes]) -> pl.DataFrame:
    """Read a CSV training table into a dataset.

    Every column is read as a string; values are stripped of surrounding
    whitespace and blank lines are skipped. Empty cells count as missing
    values and are rejected.

    Args:
        source (str | Path | IO[str] | IO[bytes]): Path or file-like object.

    Returns:
        pl.DataFrame: The validated dataset.

    Raises:
        InvalidDatasetError: If the file cannot be parsed or the table is not
            a valid dataset.
    """
    try:
        frame = pl.read_csv(source, infer_schema_length=0)
    except (pl.exceptions.ComputeError, pl.exceptions.NoDataError) as exc:
        raise InvalidDatasetError(f"could not parse CSV: {exc}") from exc

    frame = frame.with_columns(pl.all().str.strip_chars())
    frame = frame.filter(~pl.all_horizontal(pl.all().is_null()))
    logger.debug("CSV dataset loaded", rows=frame.height, columns=frame.columns)
    return ensure_dataset(frame)


def class_column(dataset: pl.DataFrame) -> str:
    """Return the name of the class column (the last column).

    Args:
        dataset (pl.DataFrame): The dataset.

    Returns:
        str: The class column name.
    """
    return dataset.columns[-1]


def feature_columns(dataset: pl.DataFrame) -> list[str]:
    """Return the feature column names in order.

    Args:
        dataset (pl.DataFrame): The dataset.

    Returns:
        list[str]: Every column except the last.
    """
    return dataset.columns[:-1]


def preview_markdown(dataset: pl.DataFrame, num_rows: int) -> str:
    """Render the first ``num_rows`` records as a markdown table.

    Args:
        dataset (pl.DataFrame): The dataset.
        num_rows (int): Maximum number of records to show.

    Returns:
        str: Markdown table text.
    """
    head = dataset.head(num_rows)
    with pl.Config(
        tbl_formatting="MARKDOWN",
        tbl_hide_column_data_types=True,
        tbl_hide_dataframe_shape=True,
        tbl_rows=num_rows,
        tbl_cols=head.width,
    ):
        return str(head)


def _records_to_frame(records: Sequence[Mapping[str, object]]) -> pl.DataFrame:
    """Build a string DataFrame from records that share one key set.

    Args:
        records (Sequence[Mapping[str, object]]): The records.

    Returns:
        pl.DataFrame: One column per key, in the first record's key order.

    Raises:
        InvalidDatasetError: If there are no records or the key sets differ.
    """
    if len(records) == 0:
        raise InvalidDatasetError("dataset is empty")

    columns = list(records[0].keys())
    expected = set(columns)
    for row_index, record in enumerate(records):
        keys = set(record.keys())
        if keys != expected:
            raise InvalidDatasetError(
                "record keys differ from the first record",
                row_index=row_index,
                columns=sorted(keys ^ expected),
            )

    return pl.DataFrame(
        {column: [None if record[column] is None else str(record[column]) for record in records] for column in columns},
        schema=dict.fromkeys(columns, pl.String),
    )
