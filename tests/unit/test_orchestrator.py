"""Unit tests for the PublishOrchestrator.

Covers construction, the build step boundary and how push and promotion
results fold into the final ``RunOutcome``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from feedpusher.core.build import PrebuiltArtifacts
from feedpusher.core.errors import BuildFailure
from feedpusher.core.orchestrator import PublishOrchestrator
from feedpusher.models.outcome import FeedPushResult, PromotionResult, RunStatus
from feedpusher.models.versioning import Channel, StaticVersionProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _FailingBuild:
    def build(self, plan, ctx) -> Path:
        raise BuildFailure("compiler exploded")


@pytest.fixture
def orchestrator(make_context, make_config) -> PublishOrchestrator:
    ctx = make_context(config=make_config(routing={}))
    return PublishOrchestrator(ctx, StaticVersionProvider("1.2.3"))


# ---------------------------------------------------------------------------
# Test: Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_run_id_auto_generated(self, orchestrator):
        assert orchestrator.run_id.startswith("fp-")
        assert orchestrator.run_config.publish_config is orchestrator.ctx.config

    def test_run_ids_are_unique(self, make_context):
        ctx = make_context()
        first = PublishOrchestrator(ctx, StaticVersionProvider("1.0.0"))
        second = PublishOrchestrator(ctx, StaticVersionProvider("1.0.0"))
        assert first.run_id != second.run_id

    def test_default_build_step(self, orchestrator, workspace: Path):
        step = orchestrator._build_step
        assert isinstance(step, PrebuiltArtifacts)
        assert step.artifacts_dir == workspace / "Releases"

    def test_no_plan_before_run(self, orchestrator):
        assert orchestrator.plan is None


# ---------------------------------------------------------------------------
# Test: Build boundary
# ---------------------------------------------------------------------------


class TestBuildBoundary:
    @pytest.mark.asyncio
    async def test_build_failure_is_an_error_outcome(self, make_context, make_config):
        ctx = make_context(config=make_config(routing={}))
        orchestrator = PublishOrchestrator(
            ctx, StaticVersionProvider("1.2.3"), build_step=_FailingBuild()
        )
        outcome = await orchestrator.run()
        assert outcome.status == RunStatus.ERROR
        assert outcome.message == "compiler exploded"
        assert outcome.version == "1.2.3"
        assert outcome.pushes == []

    @pytest.mark.asyncio
    async def test_missing_artifacts_directory(self, make_context, make_config, tmp_path):
        config = make_config(routing={}, artifacts_dir=tmp_path / "missing")
        outcome = await PublishOrchestrator(
            make_context(config=config), StaticVersionProvider("1.2.3")
        ).run()
        assert outcome.status == RunStatus.ERROR
        assert "Artifacts directory not found" in outcome.message

    @pytest.mark.asyncio
    async def test_duplicate_feed_names_are_an_error_outcome(
        self, make_context, make_config, feed_template
    ):
        config = make_config(routing={Channel.RELEASE: [feed_template, feed_template]})
        outcome = await PublishOrchestrator(
            make_context(config=config), StaticVersionProvider("1.2.3")
        ).run()
        assert outcome.status == RunStatus.ERROR
        assert "must be unique" in outcome.message

    @pytest.mark.asyncio
    async def test_start_is_logged_with_run_id(self, orchestrator, caplog):
        with caplog.at_level("INFO"):
            await orchestrator.run()
        assert f"Starting publication run {orchestrator.run_id} at " in caplog.text


# ---------------------------------------------------------------------------
# Test: Outcome folding
# ---------------------------------------------------------------------------


class TestFinish:
    def test_all_pushed(self, orchestrator):
        outcome = orchestrator._finish(
            [FeedPushResult(feed_name="a", pushed=["x.1.2.3"])], []
        )
        assert outcome.status == RunStatus.SUCCESS
        assert outcome.message == "1 package push(es) done."

    def test_failed_push_wins_over_warnings(self, orchestrator):
        outcome = orchestrator._finish(
            [
                FeedPushResult(feed_name="a", error="boom", failed_artifact="x.1.2.3"),
                FeedPushResult(feed_name="b", skipped=True, skip_reason="no key"),
            ],
            [],
        )
        assert outcome.status == RunStatus.ERROR
        assert outcome.exit_code == -1
        assert outcome.failed_pushes[0].feed_name == "a"

    def test_skipped_feed_is_a_warning(self, orchestrator):
        outcome = orchestrator._finish(
            [FeedPushResult(feed_name="b", skipped=True, skip_reason="no key")], []
        )
        assert outcome.status == RunStatus.WARNING
        assert outcome.exit_code == 0

    def test_failed_promotion_is_a_warning(self, orchestrator):
        outcome = orchestrator._finish(
            [FeedPushResult(feed_name="a", pushed=["x.1.2.3"])],
            [
                PromotionResult(
                    feed_name="a", artifact="x.1.2.3", view="CI", succeeded=False, error="HTTP 500"
                )
            ],
        )
        assert outcome.status == RunStatus.WARNING
        assert "1 promotion(s) failed" in outcome.message
