"""Draft totals and a printable plan sheet."""

from __future__ import annotations

from dataclasses import dataclass

from practice_builder.config import settings
from practice_builder.drafts.plan_types import Draft


@dataclass(frozen=True)
class DraftSummary:
    total_minutes: int
    item_count: int
    long_session: bool


def is_long_session(total_minutes: int, threshold: int | None = None) -> bool:
    """Advisory only; a long session never blocks saving."""

    limit = settings.LONG_SESSION_MINUTES if threshold is None else threshold
    return total_minutes > limit


def summarize_draft(draft: Draft, threshold: int | None = None) -> DraftSummary:
    total = draft.total_minutes()
    return DraftSummary(
        total_minutes=total,
        item_count=draft.item_count(),
        long_session=is_long_session(total, threshold),
    )


def format_plan(draft: Draft) -> str:
    summary = summarize_draft(draft)
    lines = [
        draft.title,
        draft.practice_date.isoformat(),
        f"Total: {summary.total_minutes} min, {summary.item_count} items",
    ]
    if summary.long_session:
        lines.append("Long session warning")
    lines.append("")

    elapsed = 0
    for position, instance in enumerate(draft.instances, start=1):
        drill = instance.drill
        lines.append(
            f"{position:>2}. [{elapsed:>3}'] {drill.title} "
            f"({drill.duration_minutes} min, {drill.difficulty.value}, {drill.category.value})"
        )
        elapsed += drill.duration_minutes

    if not draft.instances:
        lines.append("Add drills to your practice timeline")
    return "\n".join(lines)
