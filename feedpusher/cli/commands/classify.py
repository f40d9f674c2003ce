"""``feedpusher classify VERSION``: show how a version is routed.

Prints the channel, the package quality and the views a package with this
version would be promoted into.  No file or network access.
"""

from __future__ import annotations

import typer
from rich.panel import Panel

from feedpusher.cli.options import console
from feedpusher.core.classifier import classify
from feedpusher.models.routing import LOCAL_FEED_SUBDIRS, LOCAL_ONLY_CHANNELS
from feedpusher.models.versioning import Channel, parse_version_info, quality_of, view_labels


def classify_cmd(
    version: str = typer.Argument(..., help="Version to classify (SemVer 2.0)."),
) -> None:
    """Classify a version into its release channel."""
    info = parse_version_info(version)
    channel = classify(info)

    lines = [
        f"[bold]Version:[/bold] {info.normalized_version or version}",
        f"[bold]Channel:[/bold] {channel.value}",
    ]
    if channel != Channel.INVALID:
        lines.append(f"[bold]Quality:[/bold] {quality_of(info.normalized_version).value}")
        views = ", ".join(v.value for v in view_labels(info.normalized_version))
        lines.append(f"[bold]Views:[/bold] {views}")
        lines.append(f"[bold]Local sub-feed:[/bold] {LOCAL_FEED_SUBDIRS[channel]}")
        remote = "never" if channel in LOCAL_ONLY_CHANNELS else "when enabled"
        lines.append(f"[bold]Remote feeds:[/bold] {remote}")
    else:
        lines.append("[red]Not a valid version: nothing can be published.[/red]")

    console.print(Panel("\n".join(lines), title="[bold]feedpusher classify[/bold]", border_style="blue"))
