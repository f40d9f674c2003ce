"""Push phase: every feed with a non-empty plan, feeds in parallel.

Inside a feed pushes are sequential and stop at the first failure.  One
feed's failure never affects another feed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from feedpusher.core.context import PublishContext
from feedpusher.core.errors import CredentialMissing, PushFailure
from feedpusher.feeds import Feed
from feedpusher.models.outcome import FeedPushResult

logger = logging.getLogger(__name__)


class Publisher:
    """Pushes planned artifacts to their feeds.

    Parameters
    ----------
    ctx:
        The run context.
    artifacts_dir:
        Directory holding the built artifact files.
    """

    def __init__(self, ctx: PublishContext, artifacts_dir: Path) -> None:
        self._ctx = ctx
        self._artifacts_dir = artifacts_dir

    async def publish(self, feeds: Sequence[Feed]) -> list[FeedPushResult]:
        """Push to every feed concurrently and return one result per feed.

        Credentials are resolved first, one feed at a time, so an operator
        prompt never runs while push deadlines are ticking.  Expected
        failures (missing credential, push failure) are reported in the
        results.  Anything else is raised as an ``ExceptionGroup`` once
        every feed has finished.
        """
        results: list[FeedPushResult | None] = []
        pending = []
        for feed in feeds:
            if feed.plan.is_empty:
                continue
            credential: str | None = None
            if not feed.is_local:
                credential = feed.resolve_credential(self._ctx)
                if credential is None:
                    results.append(self._skip(feed))
                    continue
            results.append(None)
            pending.append(self._publish_feed(feed, credential))

        outcomes = await asyncio.gather(*pending, return_exceptions=True)
        unexpected = [o for o in outcomes if isinstance(o, BaseException)]
        for exc in unexpected:
            if not isinstance(exc, Exception):
                raise exc
        if unexpected:
            raise ExceptionGroup("Unexpected errors while pushing packages", unexpected)

        pushed = iter(outcomes)
        return [r if r is not None else next(pushed) for r in results]

    @staticmethod
    def _skip(feed: Feed) -> FeedPushResult:
        missing = CredentialMissing(feed.name, feed.secret_key_name)
        logger.warning("%s", missing)
        return FeedPushResult(feed_name=feed.name, skipped=True, skip_reason=str(missing))

    async def _publish_feed(self, feed: Feed, credential: str | None) -> FeedPushResult:
        artifacts = list(feed.plan.artifacts_to_publish.values())

        timeout = self._ctx.settings.push_timeout_seconds
        pushed: list[str] = []
        for artifact in artifacts:
            try:
                await asyncio.wait_for(
                    feed.push_artifact(self._ctx, self._artifacts_dir, artifact, credential),
                    timeout=timeout,
                )
            except TimeoutError:
                failure = PushFailure(feed.name, str(artifact), f"timed out after {timeout:g}s")
            except PushFailure as exc:
                failure = exc
            else:
                pushed.append(str(artifact))
                continue

            logger.error("%s", failure)
            remaining = len(artifacts) - len(pushed) - 1
            if remaining:
                logger.error("Skipping %d remaining package(s) for '%s'.", remaining, feed.name)
            return FeedPushResult(
                feed_name=feed.name,
                pushed=pushed,
                error=str(failure),
                failed_artifact=str(artifact),
            )

        logger.info("Feed '%s': %d package(s) pushed.", feed.name, len(pushed))
        return FeedPushResult(feed_name=feed.name, pushed=pushed)
