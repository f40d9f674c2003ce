"""Filesystem helpers: local feed discovery and tool search paths."""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from feedpusher.models.config import ToolPath

logger = logging.getLogger(__name__)


def find_directory_above(start: Path, name: str) -> Path | None:
    """Find a directory called *name* next to *start* or any of its parents.

    The search begins at the parent of *start* (a ``LocalFeed`` folder is
    a sibling of the repository, not a child of it).

    Returns ``None`` when the filesystem root is reached without a match.
    """
    current = start.resolve().parent
    while True:
        candidate = current / name
        if candidate.is_dir():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _expand(pattern: str, root: Path) -> list[Path]:
    expanded = os.path.expandvars(os.path.expanduser(pattern))
    if not os.path.isabs(expanded):
        expanded = str(root / expanded)
    return sorted(Path(p) for p in glob.glob(expanded, recursive=True) if os.path.isdir(p))


class ToolPathResolver:
    """Resolves configured ``ToolPath`` entries into directories.

    Static entries are globbed once here; dynamic entries are globbed
    again on each call to ``search_path``.

    Parameters
    ----------
    entries:
        Configured tool paths, in priority order.
    root:
        Directory relative patterns are resolved against.
    """

    def __init__(self, entries: Iterable[ToolPath], root: Path) -> None:
        self._root = root
        self._entries = list(entries)
        self._static: dict[int, list[Path]] = {
            i: _expand(e.pattern, root)
            for i, e in enumerate(self._entries)
            if not e.is_dynamic
        }
        if self._static:
            logger.info(
                "Path(s) added: %s",
                ", ".join(str(p) for paths in self._static.values() for p in paths),
            )

    def search_path(self) -> list[Path]:
        """Return the tool directories, in configuration order, without duplicates."""
        seen: set[Path] = set()
        result: list[Path] = []
        for i, entry in enumerate(self._entries):
            paths = self._static[i] if not entry.is_dynamic else _expand(entry.pattern, self._root)
            for p in paths:
                if p not in seen:
                    seen.add(p)
                    result.append(p)
        return result

    def path_env(self, base: str | None = None) -> str:
        """Return a ``PATH`` value with the tool directories prepended to *base*."""
        parts = [str(p) for p in self.search_path()]
        if base:
            parts.extend(p for p in base.split(os.pathsep) if p and p not in parts)
        return os.pathsep.join(parts)
