"""Shared plan-summary helpers for feeds.

Keeps the wording of the "what will be pushed where" lines identical for
logs and the Rich report.
"""

from __future__ import annotations

from collections.abc import Iterable

from feedpusher.models.feeds import FeedPlan


def join_names(names: Iterable[str]) -> str:
    """Join names with ``", "``.

    Examples
    --------
    >>> join_names(["pkg-a", "pkg-b"])
    'pkg-a, pkg-b'
    """
    return ", ".join(names)


def summary_lines(feed_name: str, plan: FeedPlan, all_names: Iterable[str]) -> list[str]:
    """Describe a feed plan in one or two lines.

    Examples
    --------
    >>> summary_lines("ci", FeedPlan(already_published_count=2), ["a", "b"])
    ["Feed 'ci': No packages must be pushed (2 packages already available)."]
    """
    to_push = plan.artifacts_to_publish
    if not to_push:
        return [
            f"Feed '{feed_name}': No packages must be pushed "
            f"({plan.already_published_count} packages already available)."
        ]
    if plan.already_published_count == 0:
        return [f"Feed '{feed_name}': All {len(to_push)} packages must be pushed."]

    missing = [a.name for a in to_push.values()]
    present = [n for n in all_names if n not in missing]
    return [
        f"Feed '{feed_name}': {len(to_push)} packages must be pushed: {join_names(missing)}.",
        f"               => {plan.already_published_count} packages already pushed: "
        f"{join_names(present)}.",
    ]
