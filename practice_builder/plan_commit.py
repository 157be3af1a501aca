"""Commit a builder draft as a practice plus its ordered items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from practice_builder.db import SessionLocal
from practice_builder.drafts.plan_types import Draft
from practice_builder.drafts.store import DraftStore
from practice_builder.drafts.summary import summarize_draft
from practice_builder.errors import PracticeBuilderError, TransientIO, ValidationError
from practice_builder.logging.commit_logging import log_commit_event
from practice_builder.practices import (
    create_practice,
    replace_practice_items,
    validate_practice_fields,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CommitResult:
    practice_id: str
    title: str
    practice_date: date
    item_count: int
    total_minutes: int
    long_session: bool


def validate_for_commit(draft: Draft) -> None:
    """Reject bad title, date or durations before anything is written."""

    validate_practice_fields(draft.title, draft.practice_date)
    bad = [
        instance.instance_id
        for instance in draft.instances
        if not isinstance(instance.duration_minutes, int) or instance.duration_minutes <= 0
    ]
    if bad:
        raise ValidationError(
            "invalid_duration",
            "Every drill needs a positive duration.",
            errors=[f"{instance_id}: duration must be positive" for instance_id in bad],
        )


def _in_transaction(session_factory: Callable[[], Session], work: Callable[[Session], T]) -> T:
    try:
        with session_factory() as db:
            with db.begin():
                return work(db)
    except PracticeBuilderError:
        raise
    except DBAPIError as exc:
        raise TransientIO() from exc


async def commit_draft(
    store: DraftStore,
    session_factory: Callable[[], Session] = SessionLocal,
    *,
    user_id: int | None = None,
    atomic: bool = False,
) -> CommitResult:
    """Write the current draft as a practice, then clear the draft.

    The draft is read once at the start. By default the practice and its items
    are written in two transactions: if the items fail, the practice stays
    behind without items and the draft is kept so the coach can retry (which
    creates a second practice). ``atomic=True`` writes both in one transaction.
    """

    owner_id = store.user_id if user_id is None else user_id
    draft = await store.current()
    validate_for_commit(draft)

    summary = summarize_draft(draft)
    if summary.long_session:
        logger.warning(
            "Committing long session for user %s: %s min", owner_id, summary.total_minutes
        )

    drill_ids = draft.drill_ids()

    if atomic:
        def _create_with_items(db: Session) -> str:
            practice = create_practice(db, owner_id, draft.title, draft.practice_date, "")
            replace_practice_items(db, practice.id, drill_ids)
            return practice.id

        try:
            practice_id = _in_transaction(session_factory, _create_with_items)
        except PracticeBuilderError as exc:
            log_commit_event({"event": "commit_failed", "user_id": owner_id, "step": "atomic", "code": exc.code})
            raise
    else:
        try:
            practice_id = _in_transaction(
                session_factory,
                lambda db: create_practice(db, owner_id, draft.title, draft.practice_date, "").id,
            )
        except PracticeBuilderError as exc:
            log_commit_event({"event": "commit_failed", "user_id": owner_id, "step": "create_practice", "code": exc.code})
            raise

        try:
            _in_transaction(session_factory, lambda db: replace_practice_items(db, practice_id, drill_ids))
        except PracticeBuilderError as exc:
            logger.error(
                "Practice %s saved without items for user %s: %s", practice_id, owner_id, exc.code
            )
            log_commit_event(
                {
                    "event": "commit_failed",
                    "user_id": owner_id,
                    "step": "replace_items",
                    "code": exc.code,
                    "practice_id": practice_id,
                }
            )
            raise

    await store.reset()

    result = CommitResult(
        practice_id=practice_id,
        title=draft.title,
        practice_date=draft.practice_date,
        item_count=len(drill_ids),
        total_minutes=summary.total_minutes,
        long_session=summary.long_session,
    )
    log_commit_event(
        {
            "event": "practice_committed",
            "user_id": owner_id,
            "practice_id": practice_id,
            "item_count": result.item_count,
            "total_minutes": result.total_minutes,
            "long_session": result.long_session,
        }
    )
    return result


__all__ = ["CommitResult", "commit_draft", "validate_for_commit"]
