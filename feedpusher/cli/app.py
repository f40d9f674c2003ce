"""Main Typer application: registers the feedpusher commands.

Entry point: ``feedpusher`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from feedpusher.cli.commands.classify import classify_cmd
from feedpusher.cli.commands.plan import plan_cmd
from feedpusher.cli.commands.publish import publish_cmd

app = typer.Typer(
    name="feedpusher",
    help="feedpusher: publish versioned packages to local and remote feeds.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="classify", help="Show the release channel of a version.")(classify_cmd)
app.command(name="plan", help="Show which packages every feed still needs.")(plan_cmd)
app.command(name="publish", help="Build, push and promote the packages of a version.")(publish_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
