"""Routing and interaction models: channel routing table + interaction modes."""

from __future__ import annotations

from enum import Enum

from feedpusher.models.feeds import FeedTemplate
from feedpusher.models.versioning import Channel


class InteractionMode(str, Enum):
    """How the run interacts with the operator.

    - ``NO_INTERACTION``: never prompt (``-nointeraction``).
    - ``AUTO_INTERACTION``: answers come from pre-supplied answers or the
      first option of each question (``-autointeraction``).
    - ``INTERACTIVE``: the operator answers every question.
    """

    NO_INTERACTION = "no_interaction"
    AUTO_INTERACTION = "auto_interaction"
    INTERACTIVE = "interactive"


# Channels whose artifacts never leave the machine.
LOCAL_ONLY_CHANNELS: frozenset[Channel] = frozenset({Channel.LOCAL, Channel.BLANK})

# Sub-directory of the local feed root that receives each channel.
LOCAL_FEED_SUBDIRS: dict[Channel, str] = {
    Channel.RELEASE: "Release",
    Channel.PREVIEW: "Release",
    Channel.CI: "CI",
    Channel.LOCAL: "Local",
    Channel.BLANK: "Blank",
}

AZURE_FEED_URL = (
    "https://pkgs.dev.azure.com/{organization}/_packaging/Default/nuget/v3/flat2"
)
AZURE_PUSH_URL = (
    "https://pkgs.dev.azure.com/{organization}/_packaging/Default/nuget/v2"
)
AZURE_VIEWS_URL = (
    "https://pkgs.dev.azure.com/{organization}/_apis/packaging/feeds/Default"
    "/nuget/packagesBatch?api-version=5.0-preview.1"
)


def default_feed_template() -> FeedTemplate:
    """The organization's Azure feed, promoted into views by quality."""
    return FeedTemplate(
        name="{organization}-Default",
        url=AZURE_FEED_URL,
        secret_key_name="AZURE_FEED_{ORGANIZATION}_PAT",
        push_url=AZURE_PUSH_URL,
        views_url=AZURE_VIEWS_URL,
    )


def default_routing() -> dict[Channel, list[FeedTemplate]]:
    """Routing table used when the configuration does not provide one.

    Every remote-capable channel goes to the same multi-view feed; the
    views a package lands in depend on its own quality.
    """
    template = default_feed_template()
    return {
        Channel.RELEASE: [template],
        Channel.PREVIEW: [template],
        Channel.CI: [template],
    }
