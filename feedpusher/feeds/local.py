"""Local feed: a directory that receives artifact files by copy.

Layout: {root}/{name}.{version}.{ext}
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from feedpusher.core.errors import PushFailure
from feedpusher.models.artifacts import ArtifactInstance
from feedpusher.models.feeds import FeedPlan

if TYPE_CHECKING:
    from feedpusher.core.context import PublishContext
    from feedpusher.feeds.remote import ViewEndpoint

logger = logging.getLogger(__name__)


class LocalFeed:
    """Directory feed.  Pushes are always possible: no credential needed.

    Parameters
    ----------
    path:
        Directory that holds the artifact files.  Created on first push.
    name:
        Display name.  Defaults to the last two path segments
        (``LocalFeed/Release``).
    """

    is_local = True
    secret_key_name: str | None = None
    views: ViewEndpoint | None = None

    def __init__(self, path: Path, name: str | None = None) -> None:
        self.path = Path(path)
        self.name = name or f"{self.path.parent.name}/{self.path.name}"
        self.url = str(self.path)
        self.plan = FeedPlan()

    def artifact_path(self, artifact: ArtifactInstance) -> Path:
        """Deterministic location of *artifact* in this feed."""
        return self.path / artifact.file_name

    async def initialize_plan(
        self,
        artifacts: Mapping[str, ArtifactInstance],
        ctx: PublishContext,
    ) -> FeedPlan:
        existing = [
            key for key, artifact in artifacts.items()
            if self.artifact_path(artifact).is_file()
        ]
        self.plan = FeedPlan.from_existing(artifacts, existing)
        logger.debug(
            " ==> %d package(s) must be published to local feed '%s'.",
            len(self.plan.artifacts_to_publish),
            self.name,
        )
        return self.plan

    def resolve_credential(self, ctx: PublishContext) -> str | None:
        return None

    async def push_artifact(
        self,
        ctx: PublishContext,
        artifacts_dir: Path,
        artifact: ArtifactInstance,
        credential: str | None,
    ) -> None:
        source = artifacts_dir / artifact.file_name
        if not source.is_file():
            raise PushFailure(self.name, str(artifact), f"file not found: {source}")
        try:
            await asyncio.to_thread(self._copy, source, self.artifact_path(artifact))
        except OSError as exc:
            raise PushFailure(self.name, str(artifact), str(exc)) from exc
        logger.info("Copied '%s' to '%s'.", artifact.file_name, self.path)

    def _copy(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

    def __repr__(self) -> str:
        return f"LocalFeed({self.path!r})"
