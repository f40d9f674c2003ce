"""Version → release channel classification.

Pure and deterministic: the channel depends only on the version info.
"""

from __future__ import annotations

from feedpusher.models.versioning import (
    BLANK_MARKER,
    LOCAL_MARKER,
    RELEASE_CANDIDATE_NAMES,
    Channel,
    RepositoryVersionInfo,
    release_label_name,
)


def _ends_with_marker(label: str, marker: str) -> bool:
    return label == marker or label.endswith("." + marker)


def classify(info: RepositoryVersionInfo) -> Channel:
    """Return the release channel of *info*.

    Rules, first match wins:

    1. invalid version → ``INVALID``
    2. prerelease label ending with ``local`` → ``LOCAL``
    3. prerelease label ending with ``blank`` → ``BLANK``
    4. valid release, no label or a release-candidate label → ``RELEASE``
    5. any other valid release → ``PREVIEW``
    6. otherwise (CI build) → ``CI``

    Examples
    --------
    >>> from feedpusher.models.versioning import parse_version_info
    >>> classify(parse_version_info("1.2.3"))
    <Channel.RELEASE: 'release'>
    >>> classify(parse_version_info("0.0.0-0.local"))
    <Channel.LOCAL: 'local'>
    """
    if not info.is_valid:
        return Channel.INVALID

    label = info.prerelease_label
    if _ends_with_marker(label, LOCAL_MARKER):
        return Channel.LOCAL
    if _ends_with_marker(label, BLANK_MARKER):
        return Channel.BLANK

    if info.is_valid_release:
        name = release_label_name(label)
        if not label or name in RELEASE_CANDIDATE_NAMES:
            return Channel.RELEASE
        return Channel.PREVIEW

    return Channel.CI
