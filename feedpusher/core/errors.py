"""Error taxonomy for publication runs.

Only ``ConfigurationError`` and ``PushFailure`` reach the run result.
The others are caught where they happen and downgraded: a missing
credential skips one feed, a failed existence query means "must
publish", a failed promotion is logged.  ``PlanIntegrityError`` is a
bug in a feed implementation and is never caught.
"""

from __future__ import annotations


class PublishError(RuntimeError):
    """Base class for every feedpusher error."""


class ConfigurationError(PublishError):
    """Invalid version, missing directory or bad configuration.

    Fatal: raised before any push happens.
    """


class CredentialMissing(PublishError):
    """The secret of a remote feed could not be resolved."""

    def __init__(self, feed_name: str, secret_key_name: str | None) -> None:
        self.feed_name = feed_name
        self.secret_key_name = secret_key_name
        super().__init__(
            f"Could not resolve {secret_key_name or '<no secret key name>'}. "
            f"Push to '{feed_name}' is skipped."
        )


class ExistenceCheckFailure(PublishError):
    """A feed could not tell whether an artifact exists."""

    def __init__(self, feed_name: str, artifact: str, reason: str) -> None:
        self.feed_name = feed_name
        self.artifact = artifact
        super().__init__(
            f"Unable to check that {artifact} exists on '{feed_name}': {reason}"
        )


class PushFailure(PublishError):
    """An artifact could not be pushed; the feed stops pushing."""

    def __init__(self, feed_name: str, artifact: str, reason: str) -> None:
        self.feed_name = feed_name
        self.artifact = artifact
        super().__init__(f"Push of {artifact} to '{feed_name}' failed: {reason}")


class PromotionFailure(PublishError):
    """A package could not be promoted into a view."""

    def __init__(self, feed_name: str, artifact: str, view: str, reason: str) -> None:
        self.feed_name = feed_name
        self.artifact = artifact
        self.view = view
        super().__init__(
            f"Package '{artifact}' promotion to view '@{view}' on "
            f"'{feed_name}' failed: {reason}"
        )


class BuildFailure(PublishError):
    """The build step did not produce the artifacts."""


class PlanIntegrityError(PublishError):
    """A feed planned artifacts that are not part of the run."""

    def __init__(self, feed_name: str, stray: list[str]) -> None:
        self.feed_name = feed_name
        self.stray = stray
        super().__init__(f"Feed '{feed_name}' plans unknown artifacts: {stray}")
