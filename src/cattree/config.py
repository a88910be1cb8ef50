"""Runtime settings for cattree, read from the environment or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings shared by the storage layer, logging and the agent toolkit.

    Every field can be overridden with a ``CATTREE_``-prefixed environment
    variable, e.g. ``CATTREE_STORAGE_DIR=/var/lib/cattree``.

    Attributes:
        storage_dir (Path): Root directory under which each induction run gets
            its own ``<storage_dir>/<run_id>/`` namespace.
        log_level (str): Default minimum level used by ``enable_logging()``.
        preview_rows (int): Number of training rows echoed back by the
            ``train_decision_tree`` tool.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_dir: Path = Field(default=Path("trees"), description="Root directory for persisted runs.")
    log_level: Literal["TRACE", "DEBUG", "TOOL_CALL", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="TOOL_CALL",
        description="Default minimum level for enable_logging().",
    )
    preview_rows: int = Field(default=20, ge=1, le=500, description="Rows shown in training previews.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once.

    Returns:
        Settings: The cached settings instance. Call ``get_settings.cache_clear()``
            after changing the environment to reload.
    """
    return Settings()
