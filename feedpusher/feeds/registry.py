"""Feed selection: channel + configuration + local feed root → ordered feeds.

Routing is a data lookup (``PublishConfig.routing`` and
``LOCAL_FEED_SUBDIRS``), not branching per channel.  The local sub-feed
always comes first.
"""

from __future__ import annotations

import logging
from pathlib import Path

from feedpusher.core.context import PublishContext
from feedpusher.core.errors import ConfigurationError
from feedpusher.core.paths import find_directory_above
from feedpusher.feeds import Feed
from feedpusher.feeds.local import LocalFeed
from feedpusher.feeds.remote import RemoteFeed
from feedpusher.models.routing import LOCAL_FEED_SUBDIRS, LOCAL_ONLY_CHANNELS
from feedpusher.models.versioning import Channel

logger = logging.getLogger(__name__)


class FeedRegistry:
    """Builds the feed list of a run.

    Parameters
    ----------
    ctx:
        The run context (settings, configuration, interaction).
    """

    def __init__(self, ctx: PublishContext) -> None:
        self._ctx = ctx

    def local_feed_root(self) -> Path | None:
        """The configured local feed root, or the one found above the working directory."""
        settings = self._ctx.settings
        if settings.local_feed_root is not None:
            return settings.local_feed_root
        return find_directory_above(self._ctx.working_dir, settings.local_feed_dir_name)

    def remote_enabled(self) -> bool:
        """Whether remote feeds take part in the run.

        Enabled by default when nobody can be asked; otherwise the operator
        must answer ``Y`` to ``PushToRemote``.
        """
        return self._ctx.ask("PushToRemote", "Push to Remote feeds?", default="Y") == "Y"

    def build(self, channel: Channel) -> list[Feed]:
        """Return the ordered feeds for *channel*.

        ``LOCAL`` and ``BLANK`` artifacts only ever reach the local
        sub-feed.  ``INVALID`` has no feed at all.

        Raises
        ------
        ConfigurationError
            If two feeds of the channel share a name.
        """
        feeds: list[Feed] = []

        subdir = LOCAL_FEED_SUBDIRS.get(channel)
        if subdir is not None:
            root = self.local_feed_root()
            if root is None:
                logger.info(
                    "No '%s' directory found above '%s': local feed disabled.",
                    self._ctx.settings.local_feed_dir_name,
                    self._ctx.working_dir,
                )
            else:
                feeds.append(LocalFeed(root / subdir))

        if channel in LOCAL_ONLY_CHANNELS or channel == Channel.INVALID:
            return feeds

        templates = self._ctx.config.templates_for(channel)
        if templates and self.remote_enabled():
            feeds.extend(RemoteFeed.from_template(t) for t in templates)

        names = [f.name for f in feeds]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Feed names must be unique for channel {channel.value}: {', '.join(duplicates)}"
            )

        logger.debug(
            "Channel %s routes to: %s", channel.value, ", ".join(f.name for f in feeds) or "<none>"
        )
        return feeds
