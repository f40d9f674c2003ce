"""Feed protocol for feedpusher destinations.

Every destination implements the ``Feed`` protocol: identity attributes,
its current ``FeedPlan``, an existence check that rebuilds the plan, a
credential resolver and a single-artifact push.  Promotion into quality
views is an optional capability carried by ``views``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from feedpusher.models.artifacts import ArtifactInstance
from feedpusher.models.feeds import FeedPlan

if TYPE_CHECKING:
    from feedpusher.core.context import PublishContext
    from feedpusher.feeds.remote import ViewEndpoint


@runtime_checkable
class Feed(Protocol):
    """Protocol that every feedpusher feed must implement.

    Attributes
    ----------
    name : str
        Human-readable name used in logs and summaries.
    url : str
        Directory path (local feeds) or index URL (remote feeds).
    is_local : bool
        Whether pushes are plain file copies.
    secret_key_name : str | None
        Environment variable holding the push secret (remote feeds).
    views : ViewEndpoint | None
        Promotion capability, ``None`` when the feed has no views.
    plan : FeedPlan
        The latest plan computed by ``initialize_plan``.
    """

    name: str
    url: str
    is_local: bool
    secret_key_name: str | None
    views: ViewEndpoint | None
    plan: FeedPlan

    async def initialize_plan(
        self,
        artifacts: Mapping[str, ArtifactInstance],
        ctx: PublishContext,
    ) -> FeedPlan:
        """Check which *artifacts* already exist and replace ``plan``.

        May be called any number of times; each call fully replaces the
        previous plan.
        """
        ...

    def resolve_credential(self, ctx: PublishContext) -> str | None:
        """Return the push secret, or ``None`` when it cannot be resolved."""
        ...

    async def push_artifact(
        self,
        ctx: PublishContext,
        artifacts_dir: Path,
        artifact: ArtifactInstance,
        credential: str | None,
    ) -> None:
        """Push one artifact file from *artifacts_dir*.

        Raises
        ------
        PushFailure
            If the artifact could not be delivered.
        """
        ...
