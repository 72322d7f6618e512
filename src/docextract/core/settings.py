"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

The same object configures the batch handler, the API and the CLI, so bucket
names, polling cadence and the deadline margin live in exactly one place.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
StorageBackend = Literal["memory", "aws"]
TriggerMode = Literal["background", "event"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `DOCEXTRACT_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    storage_backend : StorageBackend
        `aws` (default) wires S3/DynamoDB; `memory` wires in-process stores,
        which Textract cannot read, so it only pairs with `event` mode.
    trigger_mode : TriggerMode
        `background` lets the API run the pipeline itself; `event` relies on the
        object-created notification firing the batch handler.
    poll_interval_seconds : float
        Fixed delay between two polls of a running analysis job.
    deadline_margin_seconds : float
        Polling stops once less than this much execution budget remains.
    """

    environment: EnvName = Field(default="dev", alias="DOCEXTRACT_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    aws_region: str = Field(default="us-east-1", alias="AWS_REGION_NAME")
    upload_bucket: str = Field(default="docextract-uploads", alias="UPLOAD_BUCKET")
    results_bucket: str = Field(default="docextract-results", alias="RESULTS_BUCKET")
    dynamodb_table: str | None = Field(default=None, alias="DYNAMODB_TABLE")

    storage_backend: StorageBackend = Field(default="aws", alias="STORAGE_BACKEND")
    trigger_mode: TriggerMode = Field(default="background", alias="TRIGGER_MODE")

    poll_interval_seconds: float = Field(default=5.0, ge=0.0, alias="POLL_INTERVAL_SECONDS")
    deadline_margin_seconds: float = Field(default=60.0, ge=0.0, alias="DEADLINE_MARGIN_SECONDS")
    max_results_per_page: int = Field(default=1000, ge=1, alias="MAX_RESULTS_PER_PAGE")
    default_budget_seconds: float = Field(default=900.0, gt=0.0, alias="DEFAULT_BUDGET_SECONDS")

    presign_ttl_seconds: int = Field(default=3600, ge=1, alias="PRESIGN_TTL_SECONDS")
    error_message_limit: int = Field(default=500, ge=1, alias="ERROR_MESSAGE_LIMIT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("DOCEXTRACT_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "docextract") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
