"""Run context: everything a component needs, passed explicitly.

A ``PublishContext`` is built once per run and handed by reference to the
registry, the feeds, the publisher and the promoter.  It owns the shared
HTTP client; open it with ``open_context`` so the client is closed when
the run ends.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, MutableMapping
from contextlib import asynccontextmanager
from pathlib import Path

import httpx

from feedpusher.config import Settings
from feedpusher.core.interaction import Interaction
from feedpusher.core.paths import ToolPathResolver
from feedpusher.models.config import PublishConfig
from feedpusher.models.routing import InteractionMode


class PublishContext:
    """Explicit per-run context.

    Parameters
    ----------
    settings:
        Runtime settings.
    config:
        Project publication configuration.
    http_client:
        Shared async client, reused read-only by every feed operation.
    interaction:
        Operator interaction; ``None`` means no question is ever asked.
    environ:
        Environment mapping used for secrets.  Defaults to ``os.environ``;
        secrets typed in by the operator are cached back into it.
    working_dir:
        Directory the run starts from (local feed discovery, tool paths).
    """

    def __init__(
        self,
        settings: Settings,
        config: PublishConfig,
        http_client: httpx.AsyncClient,
        *,
        interaction: Interaction | None = None,
        environ: MutableMapping[str, str] | None = None,
        working_dir: Path | None = None,
    ) -> None:
        self.settings = settings
        self.config = config
        self.http_client = http_client
        self.interaction = interaction
        self.environ: MutableMapping[str, str] = (
            environ if environ is not None else os.environ
        )
        self.working_dir = working_dir or Path.cwd()
        self.tool_paths = ToolPathResolver(config.tool_paths, self.working_dir)

    @property
    def interaction_mode(self) -> InteractionMode:
        if self.interaction is None:
            return InteractionMode.NO_INTERACTION
        return self.interaction.mode

    @property
    def can_ask(self) -> bool:
        """Whether questions may be put to the operator."""
        return self.interaction_mode != InteractionMode.NO_INTERACTION

    def ask(self, key: str, message: str, default: str = "N") -> str:
        """Ask a Y/N question, returning *default* when asking is not allowed."""
        if self.interaction is None or not self.can_ask:
            return default
        return self.interaction.read_option(key, message, ["Y", "N"])


@asynccontextmanager
async def open_context(
    settings: Settings,
    config: PublishConfig,
    *,
    interaction: Interaction | None = None,
    environ: MutableMapping[str, str] | None = None,
    working_dir: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[PublishContext]:
    """Open a ``PublishContext`` with its shared HTTP client.

    Redirects are not followed: existence queries must see the status
    code the feed actually returns.
    """
    async with httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        follow_redirects=False,
        transport=transport,
    ) as client:
        yield PublishContext(
            settings,
            config,
            client,
            interaction=interaction,
            environ=environ,
            working_dir=working_dir,
        )
