"""Drill catalog: reusable drill records the builder picks from."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from practice_builder.db import DrillRecord, PracticeItem
from practice_builder.drafts.plan_types import Drill
from practice_builder.errors import NotFound, ReferentialError, TransientIO, ValidationError
from practice_builder.schemas.builder import Category, DrillFields, DrillUpdate
from practice_builder.practices import require_active_user

logger = logging.getLogger(__name__)


def _validation_error(exc: PydanticValidationError) -> ValidationError:
    errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return ValidationError("invalid_drill", "The drill has invalid fields.", errors=errors)


def list_drills(db: Session, search: str | None = None) -> List[Drill]:
    """All drills, most recently created first.

    ``search`` keeps drills whose title or description contains the term,
    ignoring case. A blank term lists everything.
    """

    query = db.query(DrillRecord)
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(DrillRecord.title.ilike(pattern), DrillRecord.description.ilike(pattern)))
    try:
        records = (
            query
            .order_by(DrillRecord.created_at.desc(), DrillRecord.id.desc())
            .all()
        )
    except DBAPIError as exc:
        raise TransientIO() from exc
    return [Drill.from_record(record) for record in records]


def _load_drill(db: Session, drill_id: str) -> DrillRecord:
    try:
        record = db.get(DrillRecord, drill_id)
    except DBAPIError as exc:
        raise TransientIO() from exc
    if record is None:
        raise NotFound("drill_not_found", "That drill no longer exists.")
    return record


def get_drill(db: Session, drill_id: str) -> Drill:
    return Drill.from_record(_load_drill(db, drill_id))


def create_drill(db: Session, user_id: int | None, fields: Dict[str, Any] | DrillFields) -> Drill:
    try:
        data = fields if isinstance(fields, DrillFields) else DrillFields.model_validate(fields)
    except PydanticValidationError as exc:
        raise _validation_error(exc) from exc

    user = require_active_user(db, user_id)
    record = DrillRecord(
        user_id=user.id,
        title=data.title,
        description=data.description,
        duration_minutes=data.duration_minutes,
        difficulty=data.difficulty,
        category=data.category,
        tags=list(data.tags),
        diagram_url=data.diagram_url,
    )
    try:
        db.add(record)
        db.commit()
    except DBAPIError as exc:
        db.rollback()
        raise TransientIO() from exc
    logger.info("Drill %s created by user %s", record.id, user.id)
    return Drill.from_record(record)


def update_drill(db: Session, drill_id: str, fields: Dict[str, Any] | DrillUpdate) -> Drill:
    try:
        data = fields if isinstance(fields, DrillUpdate) else DrillUpdate.model_validate(fields)
    except PydanticValidationError as exc:
        raise _validation_error(exc) from exc

    record = _load_drill(db, drill_id)

    for name, value in data.model_dump(exclude_unset=True).items():
        if value is None and name != "diagram_url":
            continue
        setattr(record, name, value)
    try:
        db.commit()
    except DBAPIError as exc:
        db.rollback()
        raise TransientIO() from exc
    return Drill.from_record(record)


def delete_drill(db: Session, drill_id: str) -> None:
    """Remove a drill. Drills used by a saved practice cannot be deleted."""

    record = _load_drill(db, drill_id)
    try:
        in_use = db.query(PracticeItem.id).filter(PracticeItem.drill_id == drill_id).first()
    except DBAPIError as exc:
        raise TransientIO() from exc
    if in_use is not None:
        raise ReferentialError("drill_in_use", "This drill is part of a saved practice.")
    try:
        db.delete(record)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ReferentialError("drill_in_use", "This drill is part of a saved practice.") from exc
    except DBAPIError as exc:
        db.rollback()
        raise TransientIO() from exc


def group_by_category(drills: Iterable[Drill]) -> Dict[Category, List[Drill]]:
    """Drills bucketed in display order; empty categories are left out."""

    grouped: Dict[Category, List[Drill]] = {category: [] for category in Category}
    for drill in drills:
        grouped[drill.category].append(drill)
    return {category: items for category, items in grouped.items() if items}


__all__ = [
    "create_drill",
    "delete_drill",
    "get_drill",
    "group_by_category",
    "list_drills",
    "update_drill",
]
