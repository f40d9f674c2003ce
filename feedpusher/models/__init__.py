"""feedpusher data models: all Pydantic v2, all frozen (immutable)."""

from feedpusher.models.artifacts import ArtifactInstance, ArtifactKind
from feedpusher.models.config import PublishConfig, RetryPolicy, RunConfig, ToolPath
from feedpusher.models.feeds import FeedPlan, FeedTemplate
from feedpusher.models.outcome import (
    FeedPushResult,
    PromotionResult,
    RunOutcome,
    RunStatus,
)
from feedpusher.models.routing import InteractionMode
from feedpusher.models.versioning import (
    Channel,
    PackageQuality,
    RepositoryVersionInfo,
    ViewLabel,
)

__all__ = [
    # versioning
    "Channel",
    "PackageQuality",
    "RepositoryVersionInfo",
    "ViewLabel",
    # routing
    "InteractionMode",
    # artifacts
    "ArtifactKind",
    "ArtifactInstance",
    # feeds
    "FeedTemplate",
    "FeedPlan",
    # config
    "PublishConfig",
    "RetryPolicy",
    "RunConfig",
    "ToolPath",
    # outcome
    "FeedPushResult",
    "PromotionResult",
    "RunOutcome",
    "RunStatus",
]
