"""
Core type definitions for the Practice Builder.
Drafts are plain values; only the draft store replaces them.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from practice_builder.schemas.builder import Category, Difficulty

DEFAULT_PLAN_TITLE = "New Practice Plan"


@dataclass(frozen=True)
class Drill:
    """
    Reusable drill from the catalog.
    Read-only from the builder's point of view.
    """

    id: str
    title: str
    description: str
    duration_minutes: int
    difficulty: Difficulty
    category: Category
    tags: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    diagram_url: Optional[str] = None

    @staticmethod
    def from_record(record: Any) -> "Drill":
        """Build from a ``DrillRecord`` row (or anything shaped like one)"""

        return Drill(
            id=str(record.id),
            title=record.title,
            description=record.description or "",
            duration_minutes=int(record.duration_minutes),
            difficulty=Difficulty(record.difficulty),
            category=Category(record.category),
            tags=tuple(record.tags or ()),
            created_at=record.created_at,
            diagram_url=record.diagram_url,
        )

    @staticmethod
    def from_dict(data: dict) -> "Drill":
        """Parse the drill part of a persisted draft entry"""

        created_at = data.get("created_at")
        return Drill(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            duration_minutes=int(data["duration_minutes"]),
            difficulty=Difficulty(data["difficulty"]),
            category=Category(data["category"]),
            tags=tuple(str(tag) for tag in data.get("tags") or ()),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            diagram_url=data.get("diagram_url"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "difficulty": self.difficulty.value,
            "category": self.category.value,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "diagram_url": self.diagram_url,
        }


@dataclass(frozen=True)
class DrillInstance:
    """
    One placement of a drill inside a plan.
    ``instance_id`` is unique within the plan, so the same drill may appear twice.
    """

    drill: Drill
    instance_id: str

    @property
    def drill_id(self) -> str:
        return self.drill.id

    @property
    def duration_minutes(self) -> int:
        return self.drill.duration_minutes

    def to_dict(self) -> dict:
        payload = self.drill.to_dict()
        payload["instance_id"] = self.instance_id
        return payload

    @staticmethod
    def from_dict(data: dict) -> "DrillInstance":
        instance_id = data["instance_id"]
        if not isinstance(instance_id, str) or not instance_id:
            raise ValueError("instance_id must be a non-empty string")
        return DrillInstance(drill=Drill.from_dict(data), instance_id=instance_id)


@dataclass(frozen=True)
class Draft:
    """
    The builder's working plan.
    Instance order is the order the drills are run in practice.
    """

    title: str
    practice_date: date
    instances: tuple[DrillInstance, ...] = field(default_factory=tuple)

    @classmethod
    def default(cls, today: date, title: str = DEFAULT_PLAN_TITLE) -> "Draft":
        return cls(title=title, practice_date=today, instances=())

    def with_changes(self, **changes: Any) -> "Draft":
        if "instances" in changes:
            changes["instances"] = tuple(changes["instances"])
        return replace(self, **changes)

    def is_empty(self) -> bool:
        return len(self.instances) == 0

    def total_minutes(self) -> int:
        """Sum of drill durations; duplicates count every time"""

        return sum(instance.duration_minutes for instance in self.instances)

    def item_count(self) -> int:
        return len(self.instances)

    def drill_ids(self) -> list[str]:
        return [instance.drill_id for instance in self.instances]

    def instance_ids(self) -> list[str]:
        return [instance.instance_id for instance in self.instances]
