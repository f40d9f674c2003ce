"""Shared test fixtures for feedpusher."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, MutableMapping, Sequence
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from feedpusher.config import Settings
from feedpusher.core.context import PublishContext
from feedpusher.models.artifacts import ArtifactInstance
from feedpusher.models.config import PublishConfig
from feedpusher.models.feeds import FeedTemplate
from feedpusher.models.routing import InteractionMode
from feedpusher.models.versioning import Channel

ORGANIZATION = "acme"
FEED_URL = "https://feeds.example.test/acme/flat"
PUSH_URL = "https://feeds.example.test/acme/push"
VIEWS_URL = "https://feeds.example.test/acme/views"
SECRET_NAME = "FEED_ACME_KEY"
SECRET = "s3cret"


class ScriptedInteraction:
    """Interaction stub: answers from a script, records every question."""

    def __init__(
        self,
        answers: dict[str, str] | None = None,
        secrets: dict[str, str] | None = None,
        mode: InteractionMode = InteractionMode.INTERACTIVE,
    ) -> None:
        self.mode = mode
        self.answers = answers or {}
        self.secrets = secrets or {}
        self.asked: list[str] = []
        self.secret_requests: list[str] = []

    def read_option(self, key: str, message: str, options: Sequence[str]) -> str:
        self.asked.append(key)
        return self.answers.get(key, options[0])

    def read_secret(self, name: str) -> str | None:
        self.secret_requests.append(name)
        return self.secrets.get(name)


@pytest.fixture
def settings() -> Settings:
    """Settings that never read a .env file and never prompt."""
    return Settings(_env_file=None, interaction_mode=InteractionMode.NO_INTERACTION)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A repository directory with a sibling ``LocalFeed`` and a ``Releases`` dir."""
    (tmp_path / "LocalFeed").mkdir()
    repo = tmp_path / "repo"
    (repo / "Releases").mkdir(parents=True)
    return repo


@pytest.fixture
def local_feed_root(workspace: Path) -> Path:
    return workspace.parent / "LocalFeed"


@pytest.fixture
def feed_template() -> FeedTemplate:
    return FeedTemplate(
        name="{organization}-feed",
        url="https://feeds.example.test/{organization}/flat",
        secret_key_name="FEED_{ORGANIZATION}_KEY",
        push_url="https://feeds.example.test/{organization}/push",
        views_url="https://feeds.example.test/{organization}/views",
    )


@pytest.fixture
def make_config(workspace: Path, feed_template: FeedTemplate) -> Callable[..., PublishConfig]:
    """Factory fixture: a ``PublishConfig`` routing every remote channel to one feed."""

    def _factory(
        projects: Sequence[str] = ("pkg-a", "pkg-b"),
        *,
        views: bool = True,
        **overrides: Any,
    ) -> PublishConfig:
        template = feed_template if views else feed_template.model_copy(update={"views_url": None})
        defaults: dict[str, Any] = {
            "organization": ORGANIZATION,
            "projects": list(projects),
            "artifacts_dir": workspace / "Releases",
            "routing": {
                Channel.RELEASE: [template],
                Channel.PREVIEW: [template],
                Channel.CI: [template],
                # Ignored by construction: local-only channels.
                Channel.LOCAL: [template],
                Channel.BLANK: [template],
            },
        }
        defaults.update(overrides)
        return PublishConfig(**defaults)

    return _factory


@pytest_asyncio.fixture
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(follow_redirects=False) as client:
        yield client


@pytest.fixture
def make_context(
    settings: Settings,
    make_config: Callable[..., PublishConfig],
    workspace: Path,
) -> Callable[..., PublishContext]:
    """Factory fixture: build a ``PublishContext`` with test defaults.

    The HTTP client defaults to ``None``: pass the ``http_client`` fixture
    for anything that talks to a remote feed.
    """

    def _factory(
        *,
        config: PublishConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        interaction: Any = None,
        environ: MutableMapping[str, str] | None = None,
        working_dir: Path | None = None,
        **setting_overrides: Any,
    ) -> PublishContext:
        run_settings = settings.model_copy(update=setting_overrides) if setting_overrides else settings
        return PublishContext(
            run_settings,
            config or make_config(),
            http_client,  # type: ignore[arg-type]
            interaction=interaction,
            environ={SECRET_NAME: SECRET} if environ is None else environ,
            working_dir=working_dir or workspace,
        )

    return _factory


@pytest.fixture
def scripted() -> type[ScriptedInteraction]:
    """The scripted interaction class, for tests that need questions answered."""
    return ScriptedInteraction


@pytest.fixture
def make_artifact() -> Callable[..., ArtifactInstance]:
    def _factory(name: str = "pkg-a", version: str = "1.2.3", **overrides: Any) -> ArtifactInstance:
        return ArtifactInstance(name=name, version=version, **overrides)

    return _factory


@pytest.fixture
def write_packages(workspace: Path) -> Callable[..., list[Path]]:
    """Factory fixture: create ``{name}.{version}.nupkg`` files in a directory."""

    def _factory(
        names: Sequence[str],
        version: str,
        directory: Path | None = None,
    ) -> list[Path]:
        target = directory or workspace / "Releases"
        target.mkdir(parents=True, exist_ok=True)
        paths = []
        for name in names:
            path = target / f"{name}.{version}.nupkg"
            path.write_bytes(f"{name}-{version}".encode())
            paths.append(path)
        return paths

    return _factory


@pytest.fixture
def flat_url() -> Callable[[str, str], str]:
    """Existence query URL of a package on the test feed."""

    def _url(name: str, version: str) -> str:
        return f"{FEED_URL}/{name}/{version}/{name}.{version}.nupkg"

    return _url
