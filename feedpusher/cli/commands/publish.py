"""``feedpusher publish VERSION``: plan, build, push and promote.

Exit codes: ``0`` success (including "nothing to publish" and warnings),
``-1`` run terminated with an error, ``-2`` unhandled exception, ``-3``
several unexpected errors raised by concurrent feed work.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from pathlib import Path

import typer

from feedpusher.cli.options import (
    apply_overrides,
    build_interaction,
    build_settings,
    console,
    discover_publish_config,
    fail,
    parse_answers,
    setup_logging,
)
from feedpusher.config import Settings
from feedpusher.core.build import BuildStep, CommandBuildStep
from feedpusher.core.context import open_context
from feedpusher.core.errors import ConfigurationError
from feedpusher.core.interaction import Interaction
from feedpusher.core.orchestrator import PublishOrchestrator
from feedpusher.models.config import PublishConfig
from feedpusher.models.outcome import (
    EXIT_AGGREGATE_EXCEPTION,
    EXIT_TERMINATED_WITH_ERROR,
    EXIT_UNHANDLED_EXCEPTION,
    RunOutcome,
)
from feedpusher.models.versioning import StaticVersionProvider
from feedpusher.report.renderer import PlanRenderer

logger = logging.getLogger(__name__)


async def _publish(
    settings: Settings,
    config: PublishConfig,
    interaction: Interaction,
    version: str,
    working_dir: Path,
    build_step: BuildStep | None,
    renderer: PlanRenderer,
) -> RunOutcome:
    async with open_context(
        settings, config, interaction=interaction, environ=os.environ, working_dir=working_dir
    ) as ctx:
        orchestrator = PublishOrchestrator(
            ctx, StaticVersionProvider(version), build_step=build_step
        )
        outcome = await orchestrator.run()
        if orchestrator.plan is not None:
            renderer.print_plan(orchestrator.plan)
        return outcome


def publish_cmd(
    version: str = typer.Argument(..., help="Version of the packages to publish."),
    config_path: Path = typer.Option(
        None, "--config", "-c", help="feedpusher.toml or pyproject.toml to read."
    ),
    working_dir: Path = typer.Option(
        Path("."), "--working-dir", "-w", help="Directory the run starts from."
    ),
    projects: list[str] = typer.Option(
        None, "--project", "-p", help="Publishable project (repeatable)."
    ),
    artifacts_dir: Path = typer.Option(
        None, "--artifacts-dir", help="Directory holding the built packages."
    ),
    build_command: str = typer.Option(
        None, "--build-command", help="Command that builds the packages into the artifacts directory."
    ),
    ignore_no_artifacts: bool = typer.Option(
        False, "--ignore-no-artifacts", help="Go on even when every feed has every package."
    ),
    no_interaction: bool = typer.Option(
        False, "--no-interaction", "-nointeraction", help="Never ask any question."
    ),
    auto_interaction: bool = typer.Option(
        False, "--auto-interaction", "-autointeraction", help="Answer every question automatically."
    ),
    answers: list[str] = typer.Option(
        None, "--answer", help="Pre-supplied answer, e.g. PushToRemote=N (repeatable)."
    ),
    log_level: str = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Publish the packages of VERSION to every feed that still needs them."""
    settings = build_settings(
        no_interaction=no_interaction,
        auto_interaction=auto_interaction,
        ignore_no_artifacts=ignore_no_artifacts,
        log_level=log_level,
    )
    setup_logging(settings.log_level)
    working_dir = working_dir.resolve()
    renderer = PlanRenderer(console=console)
    interaction = build_interaction(settings, parse_answers(answers))

    try:
        config = apply_overrides(
            discover_publish_config(working_dir, config_path),
            projects=projects,
            artifacts_dir=artifacts_dir,
        )
        build_step = (
            CommandBuildStep(shlex.split(build_command), config.artifacts_dir)
            if build_command
            else None
        )
        outcome = asyncio.run(
            _publish(
                settings,
                config,
                interaction,
                version,
                working_dir,
                build_step,
                renderer,
            )
        )
    except ConfigurationError as exc:
        raise fail(str(exc), EXIT_TERMINATED_WITH_ERROR) from exc
    except ExceptionGroup as group:
        logger.error("Unexpected errors:", exc_info=group)
        raise fail(f"{len(group.exceptions)} unexpected error(s).", EXIT_AGGREGATE_EXCEPTION) from group
    except Exception as exc:
        logger.exception("Unhandled exception")
        raise fail(f"Unhandled exception: {exc}", EXIT_UNHANDLED_EXCEPTION) from exc

    renderer.print_outcome(outcome)
    raise typer.Exit(code=outcome.exit_code)
