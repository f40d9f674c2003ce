"""``feedpusher plan VERSION``: compute and show the publication plan.

Runs classification, feed selection and the existence checks, then prints
what would be pushed where.  Nothing is built or pushed.
"""

from __future__ import annotations

import asyncio
import os
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
from feedpusher.core.context import open_context
from feedpusher.core.errors import ConfigurationError
from feedpusher.core.interaction import Interaction
from feedpusher.core.planner import PublicationPlan, PublicationPlanner
from feedpusher.models.config import PublishConfig
from feedpusher.models.outcome import EXIT_TERMINATED_WITH_ERROR
from feedpusher.models.versioning import StaticVersionProvider
from feedpusher.report.renderer import PlanRenderer


async def _plan(
    settings: Settings,
    config: PublishConfig,
    interaction: Interaction,
    version: str,
    working_dir: Path,
) -> PublicationPlan:
    async with open_context(
        settings, config, interaction=interaction, environ=os.environ, working_dir=working_dir
    ) as ctx:
        planner = PublicationPlanner(ctx, StaticVersionProvider(version))
        return await planner.plan()


def plan_cmd(
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
    """Show which packages every feed still needs."""
    settings = build_settings(
        no_interaction=no_interaction, auto_interaction=auto_interaction, log_level=log_level
    )
    setup_logging(settings.log_level)
    working_dir = working_dir.resolve()
    interaction = build_interaction(settings, parse_answers(answers))

    try:
        config = apply_overrides(
            discover_publish_config(working_dir, config_path), projects=projects
        )
        plan = asyncio.run(
            _plan(settings, config, interaction, version, working_dir)
        )
    except ConfigurationError as exc:
        raise fail(str(exc), EXIT_TERMINATED_WITH_ERROR) from exc

    PlanRenderer(console=console).print_plan(plan)
