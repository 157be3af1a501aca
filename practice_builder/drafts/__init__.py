"""Practice plan draft modules."""

from practice_builder.drafts.plan_types import (
    DEFAULT_PLAN_TITLE,
    Draft,
    Drill,
    DrillInstance,
)
from practice_builder.drafts.store import DraftStore, local_today
from practice_builder.drafts.summary import DraftSummary, format_plan, summarize_draft

__all__ = [
    "DEFAULT_PLAN_TITLE",
    "Draft",
    "DraftStore",
    "DraftSummary",
    "Drill",
    "DrillInstance",
    "format_plan",
    "local_today",
    "summarize_draft",
]
