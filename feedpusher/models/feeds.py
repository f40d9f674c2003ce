"""Feed configuration and per-feed plan models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from feedpusher.models.artifacts import ArtifactInstance


class FeedTemplate(BaseModel):
    """Configuration of one remote destination.

    ``{organization}`` in any string field is replaced by the configured
    organization when the registry builds the feed.

    Attributes
    ----------
    name:
        Display name of the feed.
    url:
        Base URL of the feed's package index (existence queries).
    secret_key_name:
        Environment variable that holds the push API key.  ``None``
        disables pushing to this feed.
    push_url:
        Upload endpoint.  Defaults to ``url``.
    views_url:
        Promotion endpoint.  ``None`` when the feed has no quality views.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    secret_key_name: str | None = None
    push_url: str | None = None
    views_url: str | None = None

    def expand(self, organization: str) -> FeedTemplate:
        """Return a copy with ``{organization}`` placeholders substituted."""
        env_org = organization.upper().replace("-", "_").replace(" ", "_")

        def _sub(value: str | None) -> str | None:
            if value is None:
                return None
            return value.replace("{ORGANIZATION}", env_org).replace(
                "{organization}", organization
            )

        return FeedTemplate(
            name=_sub(self.name) or self.name,
            url=_sub(self.url) or self.url,
            secret_key_name=_sub(self.secret_key_name),
            push_url=_sub(self.push_url),
            views_url=_sub(self.views_url),
        )


class FeedPlan(BaseModel):
    """Which artifacts a feed still needs.

    A plan is never edited: each existence check builds a new one that
    replaces the previous plan of the feed.
    """

    model_config = ConfigDict(frozen=True)

    artifacts_to_publish: dict[str, ArtifactInstance] = Field(default_factory=dict)
    already_published_count: int = 0

    @classmethod
    def from_existing(
        cls,
        artifacts: Mapping[str, ArtifactInstance],
        existing: Iterable[str],
    ) -> FeedPlan:
        """Build a plan from the full artifact set and the ids already present."""
        present = set(existing)
        missing = {
            key: artifact
            for key, artifact in artifacts.items()
            if key not in present
        }
        return cls(
            artifacts_to_publish=missing,
            already_published_count=len(artifacts) - len(missing),
        )

    @property
    def is_empty(self) -> bool:
        return not self.artifacts_to_publish
