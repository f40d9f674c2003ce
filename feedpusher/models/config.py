"""Project and run configuration models."""

from __future__ import annotations

import tomllib
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from feedpusher.core.errors import ConfigurationError
from feedpusher.models.artifacts import ArtifactKind
from feedpusher.models.feeds import FeedTemplate
from feedpusher.models.routing import default_routing
from feedpusher.models.versioning import Channel


class RetryPolicy(BaseModel):
    """Retry behaviour for best-effort network calls.

    ``attempts=1`` means a single try: a failure is downgraded at once
    (existence → "must publish", promotion → logged error).
    """

    model_config = ConfigDict(frozen=True)

    attempts: int = Field(default=1, ge=1)
    initial_delay_seconds: float = Field(default=0.5, ge=0.0)
    max_delay_seconds: float = Field(default=8.0, ge=0.0)


class ToolPath(BaseModel):
    """A directory (or glob pattern) to prepend to ``PATH`` for the build.

    Static entries are expanded once when the resolver is built and only
    keep directories that already exist.  Dynamic entries are expanded
    again every time the search path is requested.
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    is_dynamic: bool = True


class PublishConfig(BaseModel):
    """Project-level publication configuration.

    Loaded from ``feedpusher.toml`` or ``[tool.feedpusher]`` in
    ``pyproject.toml``.
    """

    model_config = ConfigDict(frozen=True)

    organization: str = "Signature-OpenSource"
    artifact_kind: ArtifactKind = ArtifactKind.NUGET
    projects: list[str] = Field(default_factory=list)
    artifacts_dir: Path = Path("Releases")
    routing: dict[Channel, list[FeedTemplate]] = Field(default_factory=default_routing)
    tool_paths: list[ToolPath] = Field(default_factory=list)

    def templates_for(self, channel: Channel) -> list[FeedTemplate]:
        """Remote feed templates for *channel*, organization expanded."""
        return [t.expand(self.organization) for t in self.routing.get(channel, [])]


class RunConfig(BaseModel):
    """Per-run identity, created when the orchestrator starts."""

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=lambda: f"fp-{uuid.uuid4().hex[:12]}")
    publish_config: PublishConfig = PublishConfig()
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def load_publish_config(path: Path) -> PublishConfig:
    """Load a ``PublishConfig`` from a TOML file.

    ``pyproject.toml`` files are read from their ``[tool.feedpusher]``
    table; any other file is read as a whole.  Relative ``artifacts_dir``
    values are resolved against the file's directory.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not valid TOML or does not validate.
    """
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("feedpusher", {})

    try:
        config = PublishConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc

    if not config.artifacts_dir.is_absolute():
        config = config.model_copy(
            update={"artifacts_dir": path.parent / config.artifacts_dir}
        )
    return config
