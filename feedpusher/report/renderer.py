"""Rich terminal renderer for publication plans and run outcomes.

Color scheme
------------
- green     : SUCCESS, nothing left to push
- cyan      : NOTHING_TO_PUBLISH
- yellow    : WARNING, skipped feeds
- bold red  : ERROR, failed pushes and promotions
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from feedpusher.models.outcome import RunOutcome, RunStatus

if TYPE_CHECKING:
    from feedpusher.core.planner import PublicationPlan


# ---------------------------------------------------------------------------
# Status -> Rich style mapping
# ---------------------------------------------------------------------------

_STATUS_STYLES: dict[RunStatus, str] = {
    RunStatus.SUCCESS: "bold green",
    RunStatus.NOTHING_TO_PUBLISH: "bold cyan",
    RunStatus.WARNING: "bold yellow",
    RunStatus.ERROR: "bold red",
}


class PlanRenderer:
    """Renders plans and outcomes as Rich panels.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def render_plan(self, plan: PublicationPlan) -> Panel:
        """Render a publication plan: one row per feed."""
        repository = plan.repository
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Feed", min_width=20)
        table.add_column("Type", width=8)
        table.add_column("To push", min_width=20)
        table.add_column("Already published", justify="right", width=18)

        for feed in repository.feeds:
            to_push = feed.plan.artifacts_to_publish
            if feed.plan.is_empty:
                names = "[green]-[/green]"
            else:
                names = ", ".join(a.name for a in to_push.values())
            table.add_row(
                feed.name,
                "local" if feed.is_local else "remote",
                names,
                str(feed.plan.already_published_count),
            )

        actual = repository.actual_artifacts_to_publish
        summary_parts = [
            f"[bold]Version:[/bold] {plan.version or '-'}",
            f"[bold]Channel:[/bold] {plan.channel.value}",
            f"[bold]Projects:[/bold] {len(repository.artifacts)}",
            f"[bold]To publish:[/bold] {len(actual)}",
        ]
        if plan.should_stop:
            summary_parts.append("[cyan]nothing to publish[/cyan]")
        summary = "  |  ".join(summary_parts)

        if not repository.feeds:
            body = Group(Text("No target feed.", style="dim"), Text(""), Text.from_markup(summary))
        else:
            body = Group(table, Text(""), Text.from_markup(summary))
        return Panel(body, title="[bold]Publication plan[/bold]", border_style="blue", padding=(1, 2))

    # ------------------------------------------------------------------
    # Outcome
    # ------------------------------------------------------------------

    def render_outcome(self, outcome: RunOutcome) -> Panel:
        """Render the pushes and promotions of a finished run."""
        style = _STATUS_STYLES[outcome.status]
        lines: list[str] = [f"[{style}]{outcome.status.value.upper()}[/{style}]  {outcome.message}"]

        for push in outcome.pushes:
            if push.skipped:
                lines.append(f"[yellow]skipped[/yellow]  {push.feed_name}: {push.skip_reason}")
            elif push.error:
                lines.append(f"[bold red]failed[/bold red]   {push.feed_name}: {push.error}")
            else:
                lines.append(f"[green]pushed[/green]   {push.feed_name}: {len(push.pushed)} package(s)")

        failed = outcome.failed_promotions
        if outcome.promotions:
            lines.append(
                f"[bold]Promotions:[/bold] {len(outcome.promotions) - len(failed)}"
                f"/{len(outcome.promotions)} succeeded"
            )
        for promotion in failed:
            lines.append(f"[red]  {promotion.artifact} @{promotion.view}: {promotion.error}[/red]")

        subtitle = f"Run {outcome.run_id}" if outcome.run_id else None
        return Panel(
            Text.from_markup("\n".join(lines)),
            title=f"[bold]feedpusher {outcome.version}[/bold]" if outcome.version else "[bold]feedpusher[/bold]",
            subtitle=subtitle,
            border_style=style.split()[-1],
            padding=(1, 2),
        )

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_plan(self, plan: PublicationPlan) -> None:
        self.console.print(self.render_plan(plan))

    def print_outcome(self, outcome: RunOutcome) -> None:
        self.console.print(self.render_outcome(outcome))
