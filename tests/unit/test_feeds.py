"""Unit tests for local and remote feeds: existence checks, push and views."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from feedpusher.core.errors import ExistenceCheckFailure, PromotionFailure, PushFailure
from feedpusher.feeds import Feed
from feedpusher.feeds._formatting import summary_lines
from feedpusher.feeds.local import LocalFeed
from feedpusher.feeds.remote import RemoteFeed, ViewEndpoint
from feedpusher.models.artifacts import ArtifactInstance, ArtifactKind
from feedpusher.models.config import RetryPolicy
from feedpusher.models.feeds import FeedPlan
from feedpusher.models.versioning import ViewLabel

FEED_URL = "https://feeds.example.test/acme/flat"
PUSH_URL = "https://feeds.example.test/acme/push"
VIEWS_URL = "https://feeds.example.test/acme/views"


def _artifacts(*names: str, version: str = "1.2.3") -> dict[str, ArtifactInstance]:
    return {n: ArtifactInstance(name=n, version=version) for n in names}


def _remote(**kwargs) -> RemoteFeed:
    return RemoteFeed(
        "acme-feed",
        FEED_URL,
        secret_key_name="FEED_ACME_KEY",
        push_url=PUSH_URL,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Test: LocalFeed
# ---------------------------------------------------------------------------


class TestLocalFeed:
    def test_implements_feed_protocol(self, tmp_path: Path):
        feed = LocalFeed(tmp_path / "LocalFeed" / "Release")
        assert isinstance(feed, Feed)
        assert feed.is_local is True
        assert feed.views is None
        assert feed.name == "LocalFeed/Release"

    @pytest.mark.asyncio
    async def test_plan_from_existing_files(self, tmp_path: Path, make_context):
        root = tmp_path / "feed"
        root.mkdir()
        (root / "pkg-b.1.2.3.nupkg").write_bytes(b"x")
        feed = LocalFeed(root)

        plan = await feed.initialize_plan(_artifacts("pkg-a", "pkg-b"), make_context())
        assert list(plan.artifacts_to_publish) == ["pkg-a"]
        assert plan.already_published_count == 1
        assert feed.plan == plan

    @pytest.mark.asyncio
    async def test_missing_directory_means_nothing_published(self, tmp_path: Path, make_context):
        feed = LocalFeed(tmp_path / "does-not-exist")
        plan = await feed.initialize_plan(_artifacts("pkg-a"), make_context())
        assert list(plan.artifacts_to_publish) == ["pkg-a"]
        assert not (tmp_path / "does-not-exist").exists()

    @pytest.mark.asyncio
    async def test_plan_is_idempotent(self, tmp_path: Path, make_context):
        feed = LocalFeed(tmp_path)
        (tmp_path / "pkg-a.1.2.3.nupkg").write_bytes(b"x")
        artifacts = _artifacts("pkg-a", "pkg-b")
        first = await feed.initialize_plan(artifacts, make_context())
        second = await feed.initialize_plan(artifacts, make_context())
        assert first == second

    @pytest.mark.asyncio
    async def test_replan_replaces_previous_plan(self, tmp_path: Path, make_context):
        feed = LocalFeed(tmp_path)
        artifacts = _artifacts("pkg-a")
        await feed.initialize_plan(artifacts, make_context())
        (tmp_path / "pkg-a.1.2.3.nupkg").write_bytes(b"x")
        plan = await feed.initialize_plan(artifacts, make_context())
        assert plan.artifacts_to_publish == {}
        assert plan.already_published_count == 1

    @pytest.mark.asyncio
    async def test_push_copies_and_creates_directory(self, tmp_path: Path, make_context):
        source = tmp_path / "Releases"
        source.mkdir()
        (source / "pkg-a.1.2.3.nupkg").write_bytes(b"payload")
        feed = LocalFeed(tmp_path / "LocalFeed" / "CI")

        artifact = ArtifactInstance(name="pkg-a", version="1.2.3")
        await feed.push_artifact(make_context(), source, artifact, None)
        assert (tmp_path / "LocalFeed" / "CI" / "pkg-a.1.2.3.nupkg").read_bytes() == b"payload"

    @pytest.mark.asyncio
    async def test_push_missing_source(self, tmp_path: Path, make_context):
        feed = LocalFeed(tmp_path / "feed")
        artifact = ArtifactInstance(name="pkg-a", version="1.2.3")
        with pytest.raises(PushFailure, match="file not found"):
            await feed.push_artifact(make_context(), tmp_path, artifact, None)

    def test_needs_no_credential(self, tmp_path: Path, make_context):
        assert LocalFeed(tmp_path).resolve_credential(make_context()) is None


# ---------------------------------------------------------------------------
# Test: RemoteFeed existence checks
# ---------------------------------------------------------------------------


class TestRemoteFeedExistence:
    def test_artifact_url_is_lower_cased(self):
        feed = RemoteFeed("f", FEED_URL + "/")
        artifact = ArtifactInstance(name="Acme.Core", version="1.0.0-RC.1")
        assert feed.artifact_url(artifact) == (
            f"{FEED_URL}/acme.core/1.0.0-rc.1/acme.core.1.0.0-rc.1.nupkg"
        )

    def test_npm_extension(self):
        artifact = ArtifactInstance(kind=ArtifactKind.NPM, name="ui", version="1.0.0")
        assert RemoteFeed("f", FEED_URL).artifact_url(artifact).endswith("/ui.1.0.0.tgz")

    @pytest.mark.asyncio
    async def test_plan_from_head_status(self, httpx_mock, http_client, make_context, flat_url):
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-a", "1.2.3"), status_code=404)
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-b", "1.2.3"), status_code=200)
        feed = _remote()

        plan = await feed.initialize_plan(
            _artifacts("pkg-a", "pkg-b"), make_context(http_client=http_client)
        )
        assert list(plan.artifacts_to_publish) == ["pkg-a"]
        assert plan.already_published_count == 1

    @pytest.mark.asyncio
    async def test_plan_is_idempotent(self, httpx_mock, http_client, make_context, flat_url):
        for _ in range(2):
            httpx_mock.add_response(method="HEAD", url=flat_url("pkg-a", "1.2.3"), status_code=404)
            httpx_mock.add_response(method="HEAD", url=flat_url("pkg-b", "1.2.3"), status_code=200)
        feed = _remote()
        ctx = make_context(http_client=http_client)
        artifacts = _artifacts("pkg-a", "pkg-b")

        first = await feed.initialize_plan(artifacts, ctx)
        second = await feed.initialize_plan(artifacts, ctx)
        assert first == second

    @pytest.mark.asyncio
    async def test_unexpected_status_raises(self, httpx_mock, http_client, make_context, flat_url):
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-a", "1.2.3"), status_code=500)
        feed = _remote()
        with pytest.raises(ExistenceCheckFailure, match="HTTP 500"):
            await feed.exists(
                make_context(http_client=http_client), ArtifactInstance(name="pkg-a", version="1.2.3")
            )

    @pytest.mark.asyncio
    async def test_failure_means_must_publish(
        self, httpx_mock, http_client, make_context, flat_url, caplog
    ):
        httpx_mock.add_exception(httpx.ConnectError("unreachable"), url=flat_url("pkg-a", "1.2.3"))
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-b", "1.2.3"), status_code=302)
        feed = _remote()

        with caplog.at_level("WARNING"):
            plan = await feed.initialize_plan(
                _artifacts("pkg-a", "pkg-b"), make_context(http_client=http_client)
            )
        assert list(plan.artifacts_to_publish) == ["pkg-a", "pkg-b"]
        assert "Considering that it does not exist" in caplog.text

    @pytest.mark.asyncio
    async def test_retry_policy_applies(self, httpx_mock, http_client, make_context, flat_url):
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-a", "1.2.3"), status_code=503)
        httpx_mock.add_response(method="HEAD", url=flat_url("pkg-a", "1.2.3"), status_code=200)
        ctx = make_context(
            http_client=http_client,
            existence_retry=RetryPolicy(attempts=2, initial_delay_seconds=0, max_delay_seconds=0),
        )
        plan = await _remote().initialize_plan(_artifacts("pkg-a"), ctx)
        assert plan.artifacts_to_publish == {}
        assert plan.already_published_count == 1


# ---------------------------------------------------------------------------
# Test: RemoteFeed push
# ---------------------------------------------------------------------------


class TestRemoteFeedPush:
    @pytest.mark.asyncio
    async def test_multipart_put_with_api_key(
        self, httpx_mock, http_client, make_context, write_packages, workspace
    ):
        write_packages(["pkg-a"], "1.2.3")
        httpx_mock.add_response(method="PUT", url=PUSH_URL, status_code=201)

        await _remote().push_artifact(
            make_context(http_client=http_client),
            workspace / "Releases",
            ArtifactInstance(name="pkg-a", version="1.2.3"),
            "the-key",
        )

        (request,) = httpx_mock.get_requests()
        assert request.method == "PUT"
        assert request.headers["X-NuGet-ApiKey"] == "the-key"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="package"' in body
        assert b"pkg-a.1.2.3.nupkg" in body
        assert b"pkg-a-1.2.3" in body

    @pytest.mark.asyncio
    async def test_conflict_means_already_there(
        self, httpx_mock, http_client, make_context, write_packages, workspace
    ):
        write_packages(["pkg-a"], "1.2.3")
        httpx_mock.add_response(method="PUT", url=PUSH_URL, status_code=409)
        await _remote().push_artifact(
            make_context(http_client=http_client),
            workspace / "Releases",
            ArtifactInstance(name="pkg-a", version="1.2.3"),
            "k",
        )

    @pytest.mark.asyncio
    async def test_error_status_raises(
        self, httpx_mock, http_client, make_context, write_packages, workspace
    ):
        write_packages(["pkg-a"], "1.2.3")
        httpx_mock.add_response(method="PUT", url=PUSH_URL, status_code=401)
        with pytest.raises(PushFailure, match="HTTP 401"):
            await _remote().push_artifact(
                make_context(http_client=http_client),
                workspace / "Releases",
                ArtifactInstance(name="pkg-a", version="1.2.3"),
                "k",
            )

    def test_credential_from_environment(self, make_context):
        ctx = make_context(environ={"FEED_ACME_KEY": "abc"})
        assert _remote().resolve_credential(ctx) == "abc"

    def test_no_secret_key_name_means_no_credential(self, make_context):
        assert RemoteFeed("f", FEED_URL).resolve_credential(make_context()) is None


# ---------------------------------------------------------------------------
# Test: ViewEndpoint
# ---------------------------------------------------------------------------


class TestViewEndpoint:
    def test_feed_composes_views(self):
        assert _remote().views is None
        views = _remote(views_url=VIEWS_URL).views
        assert isinstance(views, ViewEndpoint)
        assert views.url == VIEWS_URL

    def test_promotion_body(self):
        artifact = ArtifactInstance(name="pkg-a", version="1.2.3")
        assert ViewEndpoint.promotion_body(artifact, ViewLabel.LATEST) == {
            "data": {"viewId": "Latest"},
            "operation": 0,
            "packages": [{"id": "pkg-a", "version": "1.2.3", "protocolType": "NuGet"}],
        }

    @pytest.mark.asyncio
    async def test_promote_posts_with_basic_auth(self, httpx_mock, http_client, make_context):
        httpx_mock.add_response(method="POST", url=VIEWS_URL, status_code=202)
        views = ViewEndpoint(VIEWS_URL, "acme-feed", "FEED_ACME_KEY")
        await views.promote(
            make_context(http_client=http_client),
            ArtifactInstance(name="pkg-a", version="1.2.3"),
            ViewLabel.STABLE,
            "pat",
        )
        (request,) = httpx_mock.get_requests()
        assert request.headers["Authorization"] == "Basic OnBhdA=="
        assert json.loads(request.content)["data"] == {"viewId": "Stable"}

    @pytest.mark.asyncio
    async def test_promote_failure(self, httpx_mock, http_client, make_context):
        httpx_mock.add_response(method="POST", url=VIEWS_URL, status_code=400)
        views = ViewEndpoint(VIEWS_URL, "acme-feed", "FEED_ACME_KEY")
        with pytest.raises(PromotionFailure, match="@CI"):
            await views.promote(
                make_context(http_client=http_client),
                ArtifactInstance(name="pkg-a", version="1.2.3"),
                ViewLabel.CI,
                "pat",
            )


# ---------------------------------------------------------------------------
# Test: plan summary lines
# ---------------------------------------------------------------------------


class TestSummaryLines:
    def test_nothing_to_push(self):
        lines = summary_lines("f", FeedPlan(already_published_count=2), ["a", "b"])
        assert lines == ["Feed 'f': No packages must be pushed (2 packages already available)."]

    def test_everything_to_push(self):
        plan = FeedPlan.from_existing(_artifacts("a", "b"), [])
        assert summary_lines("f", plan, ["a", "b"]) == ["Feed 'f': All 2 packages must be pushed."]

    def test_partial(self):
        plan = FeedPlan.from_existing(_artifacts("a", "b", "c"), ["b"])
        assert summary_lines("f", plan, ["a", "b", "c"]) == [
            "Feed 'f': 2 packages must be pushed: a, c.",
            "               => 1 packages already pushed: b.",
        ]
