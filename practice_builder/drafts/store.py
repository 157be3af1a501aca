"""Builder draft state backed by Redis.

The store owns the draft of one user. Every mutation replaces the in-memory
draft and awaits the Redis write before returning. Redis problems are logged
and never surface to the caller: an unreadable record loads as an empty draft.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Sequence

import pytz
from redis.asyncio import Redis

from practice_builder.config import settings
from practice_builder.drafts import ordering
from practice_builder.drafts.plan_types import Draft, Drill, DrillInstance
from practice_builder.redis_client import create_redis_client

logger = logging.getLogger(__name__)


def _normalize_timezone(name: str | None) -> pytz.BaseTzInfo:
    try:
        return pytz.timezone(name or "UTC")
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def local_today(tz_name: str | None = None) -> date:
    """Current calendar date in the configured timezone."""

    tz = _normalize_timezone(tz_name or settings.TZ)
    return datetime.now(tz).date()


def _serialize_draft(draft: Draft) -> Dict[str, Any]:
    return {
        "title": draft.title,
        "date": draft.practice_date.isoformat(),
        "drills": [instance.to_dict() for instance in draft.instances],
    }


def _deserialize_draft(raw: Any) -> Draft | None:
    """Parse a persisted record; ``None`` for anything malformed."""

    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", "ignore")
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(parsed, dict):
        return None

    title = parsed.get("title")
    date_raw = parsed.get("date")
    drills = parsed.get("drills")
    if not isinstance(title, str) or not isinstance(date_raw, str) or not isinstance(drills, list):
        return None

    try:
        practice_date = date.fromisoformat(date_raw)
        instances = tuple(DrillInstance.from_dict(item) for item in drills)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None

    instance_ids = [instance.instance_id for instance in instances]
    if len(set(instance_ids)) != len(instance_ids):
        return None

    return Draft(title=title, practice_date=practice_date, instances=instances)


class DraftStore:
    """Single source of truth for one user's in-progress practice plan."""

    def __init__(
        self,
        user_id: int | None,
        redis_client: Redis | None = None,
        *,
        clock: Callable[[], date] | None = None,
        default_title: str | None = None,
    ) -> None:
        self.user_id = user_id
        self.redis = redis_client or create_redis_client()
        self.clock = clock or local_today
        self.default_title = default_title or settings.DEFAULT_PLAN_TITLE
        self._draft: Draft | None = None

    def _draft_key(self, user_id: int) -> str:
        return f"builder:{user_id}:draft"

    def _default_draft(self) -> Draft:
        return Draft.default(self.clock(), self.default_title)

    @property
    def is_persistent(self) -> bool:
        return self.user_id is not None and self.redis is not None

    async def load(self) -> Draft:
        """Restore the persisted draft, or start a fresh one.

        A draft dated before today is deleted and replaced by the default.
        """

        today = self.clock()
        self._draft = self._default_draft()
        if not self.is_persistent:
            return self._draft

        try:
            raw = await self.redis.get(self._draft_key(self.user_id))
        except Exception:
            logger.warning("Failed to fetch builder draft from Redis", exc_info=True)
            return self._draft

        if not raw:
            return self._draft

        restored = _deserialize_draft(raw)
        if restored is None:
            logger.warning("Ignoring malformed builder draft for user %s", self.user_id)
            return self._draft

        if restored.practice_date < today:
            logger.info(
                "Discarding stale builder draft for user %s (dated %s)",
                self.user_id,
                restored.practice_date.isoformat(),
            )
            await self._erase()
            return self._draft

        self._draft = restored
        return self._draft

    async def _ensure_loaded(self) -> Draft:
        if self._draft is None:
            return await self.load()
        return self._draft

    async def current(self) -> Draft:
        """Loaded draft; restores from Redis on first access."""

        return await self._ensure_loaded()

    @property
    def is_loaded(self) -> bool:
        return self._draft is not None

    def snapshot(self) -> Draft:
        """Current draft value; mutations never alter a returned snapshot.

        Does not read Redis. Before ``load()`` or ``current()`` this is the
        default draft even when a persisted record exists, and the store then
        counts as loaded.
        """

        if self._draft is None:
            if self.is_persistent:
                logger.warning("Builder draft for user %s read before load; using default", self.user_id)
            self._draft = self._default_draft()
        return self._draft

    async def _persist(self) -> None:
        if not self.is_persistent or self._draft is None:
            return

        try:
            payload = json.dumps(_serialize_draft(self._draft))
            await self.redis.set(self._draft_key(self.user_id), payload)
        except Exception:
            logger.warning("Failed to persist builder draft to Redis", exc_info=True)

    async def _erase(self) -> None:
        if not self.is_persistent:
            return

        try:
            await self.redis.delete(self._draft_key(self.user_id))
        except Exception:
            logger.warning("Failed to clear builder draft from Redis", exc_info=True)

    async def _replace(self, **changes: Any) -> Draft:
        current = await self._ensure_loaded()
        self._draft = current.with_changes(**changes)
        await self._persist()
        return self._draft

    async def set_instances(self, instances: Sequence[DrillInstance]) -> Draft:
        return await self._replace(instances=instances)

    async def set_title(self, title: str) -> Draft:
        return await self._replace(title=title)

    async def set_date(self, practice_date: date) -> Draft:
        return await self._replace(practice_date=practice_date)

    async def reset(self) -> Draft:
        """Back to the empty default draft; the persisted record is erased."""

        self._draft = self._default_draft()
        await self._erase()
        return self._draft

    async def add_drill(self, drill: Drill) -> DrillInstance:
        current = await self._ensure_loaded()
        instances = ordering.append(current.instances, drill)
        await self.set_instances(instances)
        return instances[-1]

    async def remove_instance(self, instance_id: str) -> Draft:
        current = await self._ensure_loaded()
        return await self.set_instances(ordering.remove_by_instance_id(current.instances, instance_id))

    async def move_instance(self, from_instance_id: str, to_instance_id: str) -> Draft:
        current = await self._ensure_loaded()
        return await self.set_instances(ordering.move(current.instances, from_instance_id, to_instance_id))


__all__ = ["DraftStore", "local_today"]
