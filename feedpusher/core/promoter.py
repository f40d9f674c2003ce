"""Promotion of pushed packages into quality views.

Best effort: failures are logged as errors and never stop the run.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Sequence

from feedpusher.core.context import PublishContext
from feedpusher.core.errors import PromotionFailure
from feedpusher.core.retry import call_with_retry
from feedpusher.feeds import Feed
from feedpusher.models.outcome import FeedPushResult, PromotionResult
from feedpusher.models.versioning import view_labels

logger = logging.getLogger(__name__)


class ViewPromoter:
    """Promotes the packages pushed to view-capable feeds.

    Feeds are promoted concurrently; requests for one feed are sent one
    after the other.
    """

    def __init__(self, ctx: PublishContext) -> None:
        self._ctx = ctx

    async def promote(
        self,
        feeds: Sequence[Feed],
        pushes: Sequence[FeedPushResult],
    ) -> list[PromotionResult]:
        results_by_feed = {p.feed_name: p for p in pushes}
        targets: list[tuple[Feed, FeedPushResult, str | None]] = []
        for feed in feeds:
            push = results_by_feed.get(feed.name)
            if feed.views is None or push is None:
                continue
            if not push.succeeded or not push.pushed:
                logger.info("Feed '%s': push incomplete, promotion skipped.", feed.name)
                continue
            # Resolved before the fan-out: a prompt must not stall other feeds.
            targets.append((feed, push, feed.resolve_credential(self._ctx)))

        batches = await asyncio.gather(*(self._promote_feed(*t) for t in targets))
        return [result for batch in batches for result in batch]

    async def _promote_feed(
        self, feed: Feed, push: FeedPushResult, secret: str | None
    ) -> list[PromotionResult]:
        assert feed.views is not None
        pushed = set(push.pushed)
        artifacts = [
            a for a in feed.plan.artifacts_to_publish.values() if str(a) in pushed
        ]

        results: list[PromotionResult] = []
        for artifact in artifacts:
            for view in view_labels(artifact.version):
                if secret is None:
                    failure = PromotionFailure(
                        feed.name, str(artifact), view.value, "no credential"
                    )
                else:
                    try:
                        await call_with_retry(
                            self._ctx.settings.promotion_retry,
                            PromotionFailure,
                            functools.partial(
                                feed.views.promote, self._ctx, artifact, view, secret
                            ),
                        )
                    except PromotionFailure as exc:
                        failure = exc
                    else:
                        results.append(
                            PromotionResult(
                                feed_name=feed.name,
                                artifact=str(artifact),
                                view=view.value,
                                succeeded=True,
                            )
                        )
                        continue

                logger.error("%s", failure)
                results.append(
                    PromotionResult(
                        feed_name=feed.name,
                        artifact=str(artifact),
                        view=view.value,
                        succeeded=False,
                        error=str(failure),
                    )
                )
        return results
