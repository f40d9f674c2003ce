"""Repository version models: channels, qualities and version parsing.

``RepositoryVersionInfo`` is what the VCS metadata provider hands us once
per run.  ``parse_version_info`` is the provider used by the CLI: it reads
a SemVer 2.0 string and decides whether it is a release or a CI build
using the CSemVer prerelease names.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

# CSemVer prerelease names, in order.  Anything else is a CI build.
PRERELEASE_NAMES: tuple[str, ...] = (
    "alpha",
    "beta",
    "delta",
    "epsilon",
    "gamma",
    "kappa",
    "prerelease",
    "rc",
)

RELEASE_CANDIDATE_NAMES: frozenset[str] = frozenset({"prerelease", "rc"})

LOCAL_MARKER = "local"
BLANK_MARKER = "blank"

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

# Name, then an optional prerelease number and fix number (rc.1.1).
_RELEASE_LABEL_RE = re.compile(
    r"^(?P<name>" + "|".join(PRERELEASE_NAMES) + r")"
    r"(?:\.(?:0|[1-9]\d*)(?:\.(?:0|[1-9]\d*))?)?$"
)


class Channel(str, Enum):
    """Release channel derived from a version; drives feed routing."""

    RELEASE = "release"
    PREVIEW = "preview"
    CI = "ci"
    LOCAL = "local"
    BLANK = "blank"
    INVALID = "invalid"


class PackageQuality(str, Enum):
    """Quality of a single package version, lowest first."""

    CI = "ci"
    EXPLORATORY = "exploratory"
    PREVIEW = "preview"
    RELEASE_CANDIDATE = "release_candidate"
    STABLE = "stable"


class ViewLabel(str, Enum):
    """Quality views a multi-view feed exposes (``@CI``, ``@Stable``, ...)."""

    CI = "CI"
    EXPLORATORY = "Exploratory"
    PREVIEW = "Preview"
    LATEST = "Latest"
    STABLE = "Stable"


# A higher quality is promoted into every lower view as well.
QUALITY_LABELS: dict[PackageQuality, tuple[ViewLabel, ...]] = {
    PackageQuality.CI: (ViewLabel.CI,),
    PackageQuality.EXPLORATORY: (ViewLabel.CI, ViewLabel.EXPLORATORY),
    PackageQuality.PREVIEW: (
        ViewLabel.CI,
        ViewLabel.EXPLORATORY,
        ViewLabel.PREVIEW,
    ),
    PackageQuality.RELEASE_CANDIDATE: (
        ViewLabel.CI,
        ViewLabel.EXPLORATORY,
        ViewLabel.PREVIEW,
        ViewLabel.LATEST,
    ),
    PackageQuality.STABLE: (
        ViewLabel.CI,
        ViewLabel.EXPLORATORY,
        ViewLabel.PREVIEW,
        ViewLabel.LATEST,
        ViewLabel.STABLE,
    ),
}


class RepositoryVersionInfo(BaseModel):
    """Version information computed once per run by the VCS provider."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool = False
    is_valid_release: bool = False
    is_valid_ci_build: bool = False
    prerelease_label: str = ""
    normalized_version: str = ""

    @property
    def prerelease_name(self) -> str:
        """Return the first prerelease identifier (``"rc"`` for ``rc.1``)."""
        return self.prerelease_label.split(".", 1)[0]


def release_label_name(label: str) -> str | None:
    """Return the CSemVer prerelease name of *label*, or ``None``.

    ``""`` is a stable release and returns ``""``.  Labels that are not a
    known name optionally followed by a number and a fix number
    (``beta.2``, ``rc.1.1``) return ``None``.
    """
    if not label:
        return ""
    match = _RELEASE_LABEL_RE.match(label)
    return match.group("name") if match else None


def parse_version_info(text: str) -> RepositoryVersionInfo:
    """Build a ``RepositoryVersionInfo`` from a version string.

    Examples
    --------
    >>> parse_version_info("1.2.3").is_valid_release
    True
    >>> parse_version_info("1.2.3-ci.5").is_valid_ci_build
    True
    >>> parse_version_info("not-a-version").is_valid
    False
    """
    match = _SEMVER_RE.match(text.strip())
    if match is None:
        return RepositoryVersionInfo()

    label = match.group("prerelease") or ""
    core = f"{match.group('major')}.{match.group('minor')}.{match.group('patch')}"
    normalized = f"{core}-{label}" if label else core
    is_release = release_label_name(label) is not None
    return RepositoryVersionInfo(
        is_valid=True,
        is_valid_release=is_release,
        is_valid_ci_build=not is_release,
        prerelease_label=label,
        normalized_version=normalized,
    )


def quality_of(version: str) -> PackageQuality:
    """Return the package quality of a normalized version string."""
    info = parse_version_info(version)
    if not info.is_valid_release:
        return PackageQuality.CI
    name = info.prerelease_name
    if not name:
        return PackageQuality.STABLE
    if name in RELEASE_CANDIDATE_NAMES:
        return PackageQuality.RELEASE_CANDIDATE
    if name in ("alpha", "beta", "delta"):
        return PackageQuality.EXPLORATORY
    return PackageQuality.PREVIEW


def view_labels(version: str) -> tuple[ViewLabel, ...]:
    """Return the views a package with *version* must be promoted into."""
    return QUALITY_LABELS[quality_of(version)]


@runtime_checkable
class VersionProvider(Protocol):
    """Source of the repository version, queried once per run."""

    def get_version_info(self) -> RepositoryVersionInfo:
        ...


class StaticVersionProvider:
    """Version provider for an explicitly given version string."""

    def __init__(self, version: str) -> None:
        self.version = version

    def get_version_info(self) -> RepositoryVersionInfo:
        return parse_version_info(self.version)
