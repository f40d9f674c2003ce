"""Publication planning: version → channel → feeds → artifacts → plans.

The "nothing to publish" gate runs here, before any build step.
"""

from __future__ import annotations

import logging

from feedpusher.core.classifier import classify
from feedpusher.core.context import PublishContext
from feedpusher.core.errors import ConfigurationError
from feedpusher.core.repository import ArtifactRepository
from feedpusher.core.resolver import ArtifactResolver
from feedpusher.feeds.registry import FeedRegistry
from feedpusher.models.versioning import Channel, RepositoryVersionInfo, VersionProvider

logger = logging.getLogger(__name__)


class PublicationPlan:
    """Result of planning.

    Attributes
    ----------
    channel:
        Release channel of the version.
    repository:
        Feeds, artifacts and their joined plans.
    should_stop:
        True when nothing must be published and no override applies:
        the run ends with a "nothing to publish" success.
    """

    def __init__(
        self,
        channel: Channel,
        repository: ArtifactRepository,
        *,
        should_stop: bool = False,
    ) -> None:
        self.channel = channel
        self.repository = repository
        self.should_stop = should_stop

    @property
    def version(self) -> str:
        return self.repository.version_info.normalized_version

    def __repr__(self) -> str:
        return (
            f"PublicationPlan(channel={self.channel.value!r}, "
            f"feeds={len(self.repository.feeds)}, should_stop={self.should_stop})"
        )


class PublicationPlanner:
    """Sequences classification, feed selection and existence checks.

    Parameters
    ----------
    ctx:
        The run context.
    version_provider:
        Source of the repository version.
    ignore_no_artifacts:
        Continue even when every feed already has every artifact.  Also
        enabled by ``Settings.ignore_no_artifacts``.
    """

    def __init__(
        self,
        ctx: PublishContext,
        version_provider: VersionProvider,
        *,
        ignore_no_artifacts: bool = False,
    ) -> None:
        self._ctx = ctx
        self._version_provider = version_provider
        self._ignore_no_artifacts = ignore_no_artifacts or ctx.settings.ignore_no_artifacts

    async def plan(self) -> PublicationPlan:
        """Build the publication plan.

        Raises
        ------
        ConfigurationError
            If the version is invalid and the operator did not choose to
            proceed anyway.
        """
        info = self._version_provider.get_version_info()
        channel = classify(info)

        if channel == Channel.INVALID:
            return self._plan_invalid(info)

        feeds = FeedRegistry(self._ctx).build(channel)
        config = self._ctx.config
        artifacts = ArtifactResolver(config.artifact_kind).resolve(
            config.projects, info.normalized_version
        )
        repository = ArtifactRepository(info, artifacts, feeds)
        await repository.initialize_plans(self._ctx)

        for line in repository.summary():
            logger.info(line)

        to_publish = repository.actual_artifacts_to_publish
        if not to_publish:
            logger.info("No packages out of %d projects to publish.", len(artifacts))
            if self._ignore_no_artifacts:
                logger.info("Ignoring this since the ignore-no-artifacts option is set.")
            else:
                return PublicationPlan(channel, repository, should_stop=True)
        else:
            logger.info(
                "Should actually publish %d out of %d projects with version = %s",
                len(to_publish),
                len(artifacts),
                info.normalized_version,
            )
        return PublicationPlan(channel, repository)

    def _plan_invalid(self, info: RepositoryVersionInfo) -> PublicationPlan:
        answer = self._ctx.ask(
            "PublishDirtyRepo",
            "Repository is not ready to be published. Proceed anyway?",
            default="N",
        )
        if answer != "Y":
            raise ConfigurationError(
                "Repository is not ready to be published: invalid version."
            )
        logger.warning("Invalid version: continuing without any package to publish.")
        repository = ArtifactRepository(info, {}, [])
        return PublicationPlan(Channel.INVALID, repository)
