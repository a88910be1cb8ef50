"""Generation and validation of induction run identifiers.

A run id names the directory that holds one induction run's artifacts
(``<storage_dir>/<run_id>/``) and is accepted back from callers, including
agent tool calls, when a model is loaded or used for prediction. Only the
exact ``run_<8 lowercase hex chars>`` form is accepted.
"""

from __future__ import annotations

import re
from typing import Annotated
from uuid import uuid4

from pydantic import AfterValidator, Field

# \Z rather than $, which would also accept a trailing newline.
RUN_ID_PATTERN = re.compile(r"^run_[0-9a-f]{8}\Z")


def generate_run_id() -> str:
    """Generate a fresh identifier for one induction run.

    Returns:
        str: An identifier in the format 'run_<8 hex chars>'.
    """
    return f"run_{uuid4().hex[:8]}"


def validate_run_id(value: str) -> str:
    """Check that ``value`` is a directory-safe run id.

    The id is joined onto the storage root as a single path segment, and it
    can arrive from untrusted input such as a tool call argument. Restricting
    it to ``run_`` plus eight lowercase hex digits rules out separators,
    ``..`` segments, whitespace and control characters, and names that only
    differ by case (which collide on case-insensitive file systems). The
    fixed length keeps directory listings uniform and lets
    ``FileSystemStorage.list_models`` skip unrelated directories by name.

    Args:
        value (str): The candidate run ID.

    Returns:
        str: The run ID, unchanged.

    Raises:
        ValueError: If the value doesn't match 'run_<8 hex chars>'.
    """
    if not RUN_ID_PATTERN.match(value):
        raise ValueError(f"Run ID must match pattern 'run_<8 hex chars>', got: {value!r}")
    return value


RunId = Annotated[
    str,
    AfterValidator(validate_run_id),
    Field(
        description="Unique induction run identifier in the format run_<8 hex chars>.",
        examples=["run_1a2b3c4d", "run_abcd1234"],
    ),
]
