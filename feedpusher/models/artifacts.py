"""Publishable artifact models (immutable once resolved)."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ArtifactKind(str, Enum):
    """Package protocol of an artifact.

    The value is the ``protocolType`` sent to promotion endpoints.
    """

    NUGET = "NuGet"
    NPM = "Npm"

    @property
    def extension(self) -> str:
        """File extension of a packed artifact of this kind."""
        return _EXTENSIONS[self]


_EXTENSIONS: dict[ArtifactKind, str] = {
    ArtifactKind.NUGET: "nupkg",
    ArtifactKind.NPM: "tgz",
}


class ArtifactInstance(BaseModel):
    """A named, versioned publishable unit.

    The name is the identity of the artifact inside a run.
    """

    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind = ArtifactKind.NUGET
    name: str
    version: str

    @property
    def file_name(self) -> str:
        """Deterministic file name: ``{name}.{version}.{ext}``."""
        return f"{self.name}.{self.version}.{self.kind.extension}"

    def __str__(self) -> str:
        return f"{self.name}.{self.version}"
