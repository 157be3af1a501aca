"""Practice records: creation and wholesale replacement of the item list.

Functions here only add and flush; the caller owns the transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, selectinload

from practice_builder.db import DrillRecord, Practice, PracticeItem, User
from practice_builder.errors import (
    NotFound,
    ReferentialError,
    TransientIO,
    Unauthenticated,
    ValidationError,
)
from practice_builder.schemas.builder import PracticeCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewPracticeItem:
    """One row to insert: drill ``drill_id`` at ``sort_order`` in practice ``practice_id``."""

    practice_id: str
    drill_id: str
    sort_order: int


def _flush(db: Session) -> None:
    try:
        db.flush()
    except IntegrityError:
        raise
    except DBAPIError as exc:
        raise TransientIO() from exc


def require_active_user(db: Session, user_id: int | None) -> User:
    if user_id is None:
        raise Unauthenticated()
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except DBAPIError as exc:
        raise TransientIO() from exc
    if user is None or not user.is_active:
        raise Unauthenticated()
    return user


def validate_practice_fields(title: str, practice_date: date, notes: str = "") -> PracticeCreate:
    try:
        return PracticeCreate(title=title, practice_date=practice_date, notes=notes)
    except PydanticValidationError as exc:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise ValidationError(
            "invalid_practice",
            "The practice needs a title and a valid date.",
            errors=errors,
        ) from exc


def create_practice(
    db: Session,
    user_id: int | None,
    title: str,
    practice_date: date,
    notes: str = "",
) -> Practice:
    fields = validate_practice_fields(title, practice_date, notes)
    user = require_active_user(db, user_id)

    practice = Practice(
        user_id=user.id,
        title=fields.title,
        practice_date=fields.practice_date,
        notes=fields.notes,
    )
    db.add(practice)
    _flush(db)
    return practice


def _require_practice(db: Session, practice_id: str) -> Practice:
    try:
        practice = db.get(Practice, practice_id)
    except DBAPIError as exc:
        raise TransientIO() from exc
    if practice is None:
        raise NotFound("practice_not_found", "That practice no longer exists.")
    return practice


def delete_practice_items(db: Session, practice_id: str) -> int:
    """Remove every item of the practice. Safe to repeat."""

    _require_practice(db, practice_id)
    try:
        deleted = (
            db.query(PracticeItem)
            .filter(PracticeItem.practice_id == practice_id)
            .delete(synchronize_session=False)
        )
    except DBAPIError as exc:
        raise TransientIO() from exc
    _flush(db)
    return deleted


def insert_practice_items(db: Session, items: Iterable[NewPracticeItem]) -> List[PracticeItem]:
    new_items = list(items)
    if not new_items:
        return []

    for practice_id in {item.practice_id for item in new_items}:
        _require_practice(db, practice_id)

    drill_ids = {item.drill_id for item in new_items}
    try:
        known = {
            row.id
            for row in db.query(DrillRecord.id).filter(DrillRecord.id.in_(drill_ids)).all()
        }
    except DBAPIError as exc:
        raise TransientIO() from exc
    missing = sorted(drill_ids - known)
    if missing:
        logger.warning("Practice items reference missing drills: %s", missing)
        raise ReferentialError()

    rows = [
        PracticeItem(practice_id=item.practice_id, drill_id=item.drill_id, sort_order=item.sort_order)
        for item in new_items
    ]
    db.add_all(rows)
    try:
        _flush(db)
    except IntegrityError as exc:
        raise ReferentialError() from exc
    return rows


def replace_practice_items(db: Session, practice_id: str, drill_ids: Sequence[str]) -> List[PracticeItem]:
    """Delete-then-reinsert; sort orders come out as 0..N-1 in ``drill_ids`` order."""

    delete_practice_items(db, practice_id)
    return insert_practice_items(
        db,
        (
            NewPracticeItem(practice_id=practice_id, drill_id=drill_id, sort_order=index)
            for index, drill_id in enumerate(drill_ids)
        ),
    )


def list_practices(db: Session, user_id: int | None) -> List[Practice]:
    """The user's practices, latest practice date first."""

    user = require_active_user(db, user_id)
    try:
        return (
            db.query(Practice)
            .filter(Practice.user_id == user.id)
            .order_by(Practice.practice_date.desc(), Practice.created_at.desc())
            .all()
        )
    except DBAPIError as exc:
        raise TransientIO() from exc


def get_practice_with_items(db: Session, practice_id: str) -> Practice:
    try:
        practice = (
            db.query(Practice)
            .options(selectinload(Practice.items).selectinload(PracticeItem.drill))
            .filter(Practice.id == practice_id)
            .populate_existing()
            .first()
        )
    except DBAPIError as exc:
        raise TransientIO() from exc
    if practice is None:
        raise NotFound("practice_not_found", "That practice no longer exists.")
    return practice


__all__ = [
    "NewPracticeItem",
    "create_practice",
    "delete_practice_items",
    "get_practice_with_items",
    "insert_practice_items",
    "list_practices",
    "replace_practice_items",
    "require_active_user",
    "validate_practice_fields",
]
