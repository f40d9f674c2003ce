"""Artifact repository: the feeds of a run and the global artifact set.

Each feed is the only writer of its own plan.  The repository only reads
plans, and only after every feed's existence check has been joined.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from feedpusher.core.context import PublishContext
from feedpusher.core.errors import PlanIntegrityError
from feedpusher.feeds import Feed
from feedpusher.feeds._formatting import summary_lines
from feedpusher.models.artifacts import ArtifactInstance
from feedpusher.models.versioning import RepositoryVersionInfo

logger = logging.getLogger(__name__)


class ArtifactRepository:
    """Aggregate of the version, the artifacts and the target feeds.

    Parameters
    ----------
    version_info:
        Repository version of the run.
    artifacts:
        Every publishable artifact keyed by name.
    feeds:
        Target feeds, in registry order.
    """

    def __init__(
        self,
        version_info: RepositoryVersionInfo,
        artifacts: Mapping[str, ArtifactInstance],
        feeds: Sequence[Feed],
    ) -> None:
        self.version_info = version_info
        self.artifacts: dict[str, ArtifactInstance] = dict(artifacts)
        self.feeds: list[Feed] = list(feeds)

    async def initialize_plans(self, ctx: PublishContext) -> None:
        """Run every feed's existence check concurrently and join them.

        Nothing is queried when the version is invalid: plans stay empty.
        Safe to call again; each feed replaces its previous plan.

        Raises
        ------
        PlanIntegrityError
            If a feed plans an artifact outside the run.
        """
        if not self.version_info.is_valid:
            logger.warning("Invalid version: no feed is queried.")
            return
        await asyncio.gather(
            *(feed.initialize_plan(self.artifacts, ctx) for feed in self.feeds)
        )
        self._check_plans()

    def _check_plans(self) -> None:
        for feed in self.feeds:
            stray = set(feed.plan.artifacts_to_publish) - set(self.artifacts)
            if stray:
                raise PlanIntegrityError(feed.name, sorted(stray))

    @property
    def actual_artifacts_to_publish(self) -> list[ArtifactInstance]:
        """De-duplicated union of every feed's plan, in first-seen order."""
        seen: dict[str, ArtifactInstance] = {}
        for feed in self.feeds:
            for key, artifact in feed.plan.artifacts_to_publish.items():
                seen.setdefault(key, artifact)
        return list(seen.values())

    @property
    def no_artifacts_to_produce(self) -> bool:
        return not self.actual_artifacts_to_publish

    @property
    def feeds_to_push(self) -> list[Feed]:
        """Feeds whose plan is not empty."""
        return [f for f in self.feeds if not f.plan.is_empty]

    def summary(self) -> list[str]:
        """Per-feed "must be pushed / already available" lines."""
        names = list(self.artifacts)
        lines: list[str] = []
        for feed in self.feeds:
            lines.extend(summary_lines(feed.name, feed.plan, names))
        return lines
