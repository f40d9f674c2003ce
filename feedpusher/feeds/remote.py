"""Remote feeds reached over HTTP.

Existence:  HEAD {url}/{id}/{version}/{id}.{version}.{ext}   (lower-cased)
Push:       PUT  {push_url}   multipart "package", X-NuGet-ApiKey header
Promotion:  POST {views_url}  JSON packagesBatch, Basic auth
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from feedpusher.core.credentials import basic_auth_header, resolve_secret
from feedpusher.core.errors import ExistenceCheckFailure, PromotionFailure, PushFailure
from feedpusher.core.retry import call_with_retry
from feedpusher.models.artifacts import ArtifactInstance
from feedpusher.models.feeds import FeedPlan, FeedTemplate
from feedpusher.models.versioning import ViewLabel

if TYPE_CHECKING:
    from feedpusher.core.context import PublishContext

logger = logging.getLogger(__name__)

# NuGet answers 409 when the exact version is already in the feed.
_ALREADY_PRESENT = 409


class ViewEndpoint:
    """Promotion capability of a feed with quality views.

    Parameters
    ----------
    url:
        The batch promotion endpoint.
    feed_name:
        Name of the owning feed, for messages.
    secret_key_name:
        Environment variable holding the personal access token.
    """

    def __init__(self, url: str, feed_name: str, secret_key_name: str | None) -> None:
        self.url = url
        self.feed_name = feed_name
        self.secret_key_name = secret_key_name

    @staticmethod
    def promotion_body(artifact: ArtifactInstance, view: ViewLabel) -> dict[str, Any]:
        """JSON body promoting one package version into *view*."""
        return {
            "data": {"viewId": view.value},
            "operation": 0,
            "packages": [
                {
                    "id": artifact.name,
                    "version": artifact.version,
                    "protocolType": artifact.kind.value,
                }
            ],
        }

    async def promote(
        self,
        ctx: PublishContext,
        artifact: ArtifactInstance,
        view: ViewLabel,
        secret: str,
    ) -> None:
        """Promote *artifact* into *view*.

        Raises
        ------
        PromotionFailure
            On a transport error or a non-success status.
        """
        try:
            response = await ctx.http_client.post(
                self.url,
                json=self.promotion_body(artifact, view),
                headers={"Authorization": basic_auth_header(secret)},
            )
        except httpx.HTTPError as exc:
            raise PromotionFailure(self.feed_name, str(artifact), view.value, str(exc)) from exc
        if not response.is_success:
            raise PromotionFailure(
                self.feed_name,
                str(artifact),
                view.value,
                f"HTTP {response.status_code}",
            )
        logger.info(
            "Package '%s' promoted to view '@%s'.", artifact, view.value
        )

    def __repr__(self) -> str:
        return f"ViewEndpoint({self.url!r})"


class RemoteFeed:
    """Package index reached over HTTP.

    Existence failures never stop a run: the artifact is considered absent
    and will be pushed again.
    """

    is_local = False

    def __init__(
        self,
        name: str,
        url: str,
        *,
        secret_key_name: str | None = None,
        push_url: str | None = None,
        views_url: str | None = None,
    ) -> None:
        self.name = name
        self.url = url.rstrip("/")
        self.secret_key_name = secret_key_name
        self.push_url = push_url or url
        self.views = (
            ViewEndpoint(views_url, name, secret_key_name) if views_url else None
        )
        self.plan = FeedPlan()

    @classmethod
    def from_template(cls, template: FeedTemplate) -> RemoteFeed:
        """Build a feed from an already expanded template."""
        return cls(
            template.name,
            template.url,
            secret_key_name=template.secret_key_name,
            push_url=template.push_url,
            views_url=template.views_url,
        )

    # ------------------------------------------------------------------
    # Existence
    # ------------------------------------------------------------------

    def artifact_url(self, artifact: ArtifactInstance) -> str:
        """Flat-container URL of one package version."""
        ident = artifact.name.lower()
        version = artifact.version.lower()
        return f"{self.url}/{ident}/{version}/{ident}.{version}.{artifact.kind.extension}"

    async def exists(self, ctx: PublishContext, artifact: ArtifactInstance) -> bool:
        """Ask the feed whether *artifact* is present.

        Raises
        ------
        ExistenceCheckFailure
            On a transport error or any status other than 200 and 404.
        """
        try:
            response = await ctx.http_client.head(self.artifact_url(artifact))
        except httpx.HTTPError as exc:
            raise ExistenceCheckFailure(self.name, str(artifact), str(exc)) from exc
        if response.status_code == 200:
            return True
        if response.status_code == 404:
            return False
        raise ExistenceCheckFailure(
            self.name, str(artifact), f"HTTP {response.status_code}"
        )

    async def _checked_exists(self, ctx: PublishContext, artifact: ArtifactInstance) -> bool:
        try:
            return await call_with_retry(
                ctx.settings.existence_retry,
                ExistenceCheckFailure,
                lambda: self.exists(ctx, artifact),
            )
        except ExistenceCheckFailure as exc:
            logger.warning("%s Considering that it does not exist.", exc)
            return False

    async def initialize_plan(
        self,
        artifacts: Mapping[str, ArtifactInstance],
        ctx: PublishContext,
    ) -> FeedPlan:
        keys = list(artifacts)
        found = await asyncio.gather(
            *(self._checked_exists(ctx, artifacts[k]) for k in keys)
        )
        existing = [k for k, present in zip(keys, found) if present]
        self.plan = FeedPlan.from_existing(artifacts, existing)
        logger.debug(
            " ==> %d package(s) must be published to remote feed '%s'.",
            len(self.plan.artifacts_to_publish),
            self.name,
        )
        return self.plan

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def resolve_credential(self, ctx: PublishContext) -> str | None:
        if not self.secret_key_name:
            return None
        return resolve_secret(ctx, self.secret_key_name)

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
        content = await asyncio.to_thread(source.read_bytes)
        try:
            response = await ctx.http_client.put(
                self.push_url,
                files={"package": (artifact.file_name, content, "application/octet-stream")},
                headers={"X-NuGet-ApiKey": credential or ""},
                timeout=ctx.settings.push_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise PushFailure(self.name, str(artifact), str(exc)) from exc

        if response.status_code == _ALREADY_PRESENT:
            logger.warning(
                "'%s' already contains %s; nothing pushed.", self.name, artifact
            )
            return
        if not response.is_success:
            raise PushFailure(self.name, str(artifact), f"HTTP {response.status_code}")
        logger.info("Pushed %s to '%s'.", artifact, self.name)

    def __repr__(self) -> str:
        return f"RemoteFeed({self.name!r}, {self.url!r})"
