"""Project identifiers + version → immutable artifact records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from feedpusher.core.errors import ConfigurationError
from feedpusher.models.artifacts import ArtifactInstance, ArtifactKind

logger = logging.getLogger(__name__)


class ArtifactResolver:
    """Creates one ``ArtifactInstance`` per publishable project.

    Parameters
    ----------
    kind:
        Package kind shared by every artifact of the run.
    """

    def __init__(self, kind: ArtifactKind = ArtifactKind.NUGET) -> None:
        self.kind = kind

    def resolve(self, projects: Iterable[str], version: str) -> dict[str, ArtifactInstance]:
        """Return the artifacts keyed by name, in project order.

        Raises
        ------
        ConfigurationError
            If a project name is blank or appears twice (artifact names
            are identities within a run).
        """
        artifacts: dict[str, ArtifactInstance] = {}
        for project in projects:
            name = project.strip()
            if not name:
                raise ConfigurationError("Empty project name in the publishable projects.")
            if name in artifacts:
                raise ConfigurationError(f"Project '{name}' is listed more than once.")
            artifacts[name] = ArtifactInstance(kind=self.kind, name=name, version=version)
        logger.debug("Resolved %d artifact(s) for version %s.", len(artifacts), version)
        return artifacts
