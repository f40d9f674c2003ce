"""Runtime settings: env-driven.

Centralized settings using pydantic-settings.  Reads from a ``.env`` file
and ``FEEDPUSHER_*`` environment variables.  Project-level choices (feeds,
projects, organization) live in ``feedpusher.models.config.PublishConfig``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from feedpusher.models.config import RetryPolicy
from feedpusher.models.routing import InteractionMode


class Settings(BaseSettings):
    """Runtime settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export FEEDPUSHER_LOG_LEVEL=DEBUG
        export FEEDPUSHER_INTERACTION_MODE=no_interaction
        export FEEDPUSHER_PUSH_TIMEOUT_SECONDS=60

    Nested retry policies use a double underscore::

        export FEEDPUSHER_EXISTENCE_RETRY__ATTEMPTS=3
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FEEDPUSHER_",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    interaction_mode: InteractionMode = InteractionMode.INTERACTIVE

    # Local feed discovery
    local_feed_dir_name: str = "LocalFeed"
    local_feed_root: Path | None = None

    # Network
    push_timeout_seconds: float = 20.0
    http_timeout_seconds: float = 30.0
    existence_retry: RetryPolicy = RetryPolicy()
    promotion_retry: RetryPolicy = RetryPolicy()

    # Keep going even when every feed already has every artifact
    ignore_no_artifacts: bool = False
