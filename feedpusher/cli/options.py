"""Shared CLI plumbing: logging, settings overrides, configuration discovery."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from feedpusher.config import Settings
from feedpusher.core.interaction import ConsoleInteraction
from feedpusher.models.config import PublishConfig, load_publish_config
from feedpusher.models.routing import InteractionMode

console = Console()
err_console = Console(stderr=True)

CONFIG_FILE_NAMES = ("feedpusher.toml", "pyproject.toml")


def setup_logging(level: str) -> None:
    """Route every feedpusher logger through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


def interaction_mode(
    no_interaction: bool,
    auto_interaction: bool,
    default: InteractionMode,
) -> InteractionMode:
    if no_interaction and auto_interaction:
        raise typer.BadParameter(
            "--no-interaction and --auto-interaction are mutually exclusive."
        )
    if no_interaction:
        return InteractionMode.NO_INTERACTION
    if auto_interaction:
        return InteractionMode.AUTO_INTERACTION
    return default


def parse_answers(values: Sequence[str] | None) -> dict[str, str]:
    """Parse ``KEY=VALUE`` pairs given with ``--answer``."""
    answers: dict[str, str] = {}
    for value in values or []:
        key, sep, answer = value.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{value}'.", param_hint="--answer")
        answers[key.strip()] = answer.strip()
    return answers


def build_settings(
    *,
    no_interaction: bool,
    auto_interaction: bool,
    ignore_no_artifacts: bool = False,
    log_level: str | None = None,
) -> Settings:
    """Environment settings with the command-line overrides applied."""
    settings = Settings()
    update: dict[str, object] = {
        "interaction_mode": interaction_mode(
            no_interaction, auto_interaction, settings.interaction_mode
        ),
        "ignore_no_artifacts": ignore_no_artifacts or settings.ignore_no_artifacts,
    }
    if log_level:
        update["log_level"] = log_level
    return settings.model_copy(update=update)


def build_interaction(settings: Settings, answers: dict[str, str]) -> ConsoleInteraction:
    return ConsoleInteraction(settings.interaction_mode, answers, console=err_console)


def discover_publish_config(working_dir: Path, config_path: Path | None) -> PublishConfig:
    """Load the publication configuration.

    An explicit *config_path* wins.  Otherwise ``feedpusher.toml`` and then
    ``pyproject.toml`` (only when it has a ``[tool.feedpusher]`` table) are
    looked up in *working_dir*.  Defaults apply when neither exists.

    Raises
    ------
    ConfigurationError
        If the chosen file cannot be read or validated.
    """
    if config_path is not None:
        return load_publish_config(config_path)
    for name in CONFIG_FILE_NAMES:
        candidate = working_dir / name
        if not candidate.is_file():
            continue
        if name == "pyproject.toml" and "[tool.feedpusher]" not in candidate.read_text(encoding="utf-8"):
            continue
        return load_publish_config(candidate)
    return PublishConfig(artifacts_dir=working_dir / PublishConfig().artifacts_dir)


def apply_overrides(
    config: PublishConfig,
    *,
    projects: Sequence[str] | None = None,
    artifacts_dir: Path | None = None,
) -> PublishConfig:
    update: dict[str, object] = {}
    if projects:
        update["projects"] = list(projects)
    if artifacts_dir is not None:
        update["artifacts_dir"] = artifacts_dir
    return config.model_copy(update=update) if update else config


def fail(message: str, code: int) -> typer.Exit:
    """Print *message* and return the ``typer.Exit`` to raise."""
    err_console.print(message, style="bold red", markup=False)
    return typer.Exit(code=code)
