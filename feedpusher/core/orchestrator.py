"""Publication orchestrator: the central coordinator of a feedpusher run.

Plan → (gate) → build → confirm → push → promote.  The orchestrator never
exits the process: it returns a typed ``RunOutcome`` that the CLI maps to
an exit code.
"""

from __future__ import annotations

import asyncio
import logging

from feedpusher.core.build import BuildStep, PrebuiltArtifacts
from feedpusher.core.context import PublishContext
from feedpusher.core.errors import BuildFailure, ConfigurationError
from feedpusher.core.planner import PublicationPlan, PublicationPlanner
from feedpusher.core.promoter import ViewPromoter
from feedpusher.core.publisher import Publisher
from feedpusher.models.config import RunConfig
from feedpusher.models.outcome import FeedPushResult, PromotionResult, RunOutcome, RunStatus
from feedpusher.models.routing import InteractionMode
from feedpusher.models.versioning import VersionProvider

logger = logging.getLogger(__name__)


class PublishOrchestrator:
    """Runs one publication.

    Parameters
    ----------
    ctx:
        The run context.
    version_provider:
        Source of the repository version.
    build_step:
        Produces the artifact files.  Defaults to ``PrebuiltArtifacts`` on
        the configured artifacts directory.
    ignore_no_artifacts:
        Go on even when nothing must be published.
    """

    def __init__(
        self,
        ctx: PublishContext,
        version_provider: VersionProvider,
        *,
        build_step: BuildStep | None = None,
        ignore_no_artifacts: bool = False,
    ) -> None:
        self.ctx = ctx
        self.run_config = RunConfig(publish_config=ctx.config)
        self._planner = PublicationPlanner(
            ctx, version_provider, ignore_no_artifacts=ignore_no_artifacts
        )
        self._build_step = build_step or PrebuiltArtifacts(ctx.config.artifacts_dir)
        self.plan: PublicationPlan | None = None

    @property
    def run_id(self) -> str:
        return self.run_config.run_id

    def _outcome(self, status: RunStatus, message: str, **extra: object) -> RunOutcome:
        plan = self.plan
        return RunOutcome(
            status=status,
            run_id=self.run_id,
            message=message,
            version=plan.version if plan else "",
            channel=plan.channel.value if plan else "",
            **extra,
        )

    async def run(self) -> RunOutcome:
        """Execute the run and return its outcome."""
        logger.info(
            "Starting publication run %s at %s.",
            self.run_id,
            self.run_config.created_at.isoformat(timespec="seconds"),
        )
        try:
            self.plan = await self._planner.plan()
        except ConfigurationError as exc:
            logger.error("%s", exc)
            return self._outcome(RunStatus.ERROR, str(exc))

        plan = self.plan
        if plan.should_stop:
            return self._outcome(
                RunStatus.NOTHING_TO_PUBLISH,
                "All packages are already available in every feed.",
            )

        try:
            artifacts_dir = await asyncio.to_thread(self._build_step.build, plan, self.ctx)
        except (ConfigurationError, BuildFailure) as exc:
            logger.error("%s", exc)
            return self._outcome(RunStatus.ERROR, str(exc))

        feeds = plan.repository.feeds_to_push
        if not feeds:
            return self._outcome(RunStatus.SUCCESS, "No feed needs any package.")

        if self.ctx.interaction_mode == InteractionMode.INTERACTIVE:
            if self.ctx.ask("PushArtifacts", "Push packages to the feeds above?", default="Y") != "Y":
                logger.warning("Push cancelled by the operator.")
                return self._outcome(RunStatus.WARNING, "Push cancelled by the operator.")

        pushes = await Publisher(self.ctx, artifacts_dir).publish(feeds)
        promotions = await ViewPromoter(self.ctx).promote(feeds, pushes)
        return self._finish(pushes, promotions)

    def _finish(
        self,
        pushes: list[FeedPushResult],
        promotions: list[PromotionResult],
    ) -> RunOutcome:
        failed = [p for p in pushes if p.error is not None]
        skipped = [p for p in pushes if p.skipped]
        bad_promotions = [p for p in promotions if not p.succeeded]
        total = sum(len(p.pushed) for p in pushes)

        if failed:
            status = RunStatus.ERROR
            message = f"Push failed for {len(failed)} feed(s): " + ", ".join(
                p.feed_name for p in failed
            )
        elif skipped or bad_promotions:
            status = RunStatus.WARNING
            message = (
                f"{total} package push(es) done; {len(skipped)} feed(s) skipped, "
                f"{len(bad_promotions)} promotion(s) failed."
            )
        else:
            status = RunStatus.SUCCESS
            message = f"{total} package push(es) done."

        log = logger.error if status == RunStatus.ERROR else logger.info
        log("Run %s finished: %s", self.run_id, message)
        return self._outcome(status, message, pushes=pushes, promotions=promotions)
