"""Build step boundary.

The build itself is not feedpusher's job: a ``BuildStep`` only has to
leave the artifact files in a directory and return it.  It runs after the
"nothing to publish" gate and before the push.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from feedpusher.core.errors import BuildFailure, ConfigurationError

if TYPE_CHECKING:
    from feedpusher.core.context import PublishContext
    from feedpusher.core.planner import PublicationPlan

logger = logging.getLogger(__name__)


@runtime_checkable
class BuildStep(Protocol):
    """Produces the artifact files of a plan."""

    def build(self, plan: PublicationPlan, ctx: PublishContext) -> Path:
        """Build and return the directory holding the artifact files."""
        ...


def _require_dir(path: Path) -> Path:
    if not path.is_dir():
        raise ConfigurationError(f"Artifacts directory not found: {path}")
    return path


class PrebuiltArtifacts:
    """Artifacts were built beforehand; only checks the directory exists."""

    def __init__(self, artifacts_dir: Path) -> None:
        self.artifacts_dir = Path(artifacts_dir)

    def build(self, plan: PublicationPlan, ctx: PublishContext) -> Path:
        return _require_dir(self.artifacts_dir)


class CommandBuildStep:
    """Runs an external build command with the tool directories on ``PATH``.

    The command receives the version to build in ``FEEDPUSHER_VERSION``.

    Parameters
    ----------
    command:
        Program and arguments.
    artifacts_dir:
        Directory the command writes the artifact files into.
    """

    def __init__(self, command: Sequence[str], artifacts_dir: Path) -> None:
        if not command:
            raise ConfigurationError("Build command must not be empty.")
        self.command = list(command)
        self.artifacts_dir = Path(artifacts_dir)

    def build(self, plan: PublicationPlan, ctx: PublishContext) -> Path:
        env = dict(ctx.environ)
        env["PATH"] = ctx.tool_paths.path_env(env.get("PATH"))
        env["FEEDPUSHER_VERSION"] = plan.version

        logger.info("Running build: %s", " ".join(self.command))
        try:
            completed = subprocess.run(
                self.command,
                cwd=ctx.working_dir,
                env=env,
                check=False,
            )
        except OSError as exc:
            raise BuildFailure(f"Unable to run {self.command[0]}: {exc}") from exc
        if completed.returncode != 0:
            raise BuildFailure(
                f"Build command exited with code {completed.returncode}."
            )
        return _require_dir(self.artifacts_dir)
