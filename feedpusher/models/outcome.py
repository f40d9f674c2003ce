"""Run outcome models: typed results returned by the orchestrator.

The orchestrator never terminates the process.  It returns a
``RunOutcome`` and the CLI maps it to an exit code at the outermost
boundary.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Process exit codes.
EXIT_SUCCESS = 0
EXIT_TERMINATED_WITH_ERROR = -1
EXIT_UNHANDLED_EXCEPTION = -2
EXIT_AGGREGATE_EXCEPTION = -3


class RunStatus(str, Enum):
    """How a run ended."""

    SUCCESS = "success"
    NOTHING_TO_PUBLISH = "nothing_to_publish"
    WARNING = "warning"
    ERROR = "error"


class FeedPushResult(BaseModel):
    """Result of the push phase for one feed."""

    model_config = ConfigDict(frozen=True)

    feed_name: str
    pushed: list[str] = Field(default_factory=list)
    skipped: bool = False
    skip_reason: str | None = None
    error: str | None = None
    failed_artifact: str | None = None

    @property
    def succeeded(self) -> bool:
        """True when every planned artifact reached the feed."""
        return not self.skipped and self.error is None


class PromotionResult(BaseModel):
    """Result of one promotion request."""

    model_config = ConfigDict(frozen=True)

    feed_name: str
    artifact: str
    view: str
    succeeded: bool
    error: str | None = None


class RunOutcome(BaseModel):
    """Final, typed outcome of a publication run."""

    model_config = ConfigDict(frozen=True)

    status: RunStatus
    run_id: str = ""
    message: str = ""
    version: str = ""
    channel: str = ""
    pushes: list[FeedPushResult] = Field(default_factory=list)
    promotions: list[PromotionResult] = Field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        if self.status == RunStatus.ERROR:
            return EXIT_TERMINATED_WITH_ERROR
        return EXIT_SUCCESS

    @property
    def failed_pushes(self) -> list[FeedPushResult]:
        return [p for p in self.pushes if p.error is not None]

    @property
    def failed_promotions(self) -> list[PromotionResult]:
        return [p for p in self.promotions if not p.succeeded]
