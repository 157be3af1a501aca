"""
Ordering Engine - list transformations behind add, remove and drag-to-reorder.

Every function takes a sequence of DrillInstance and returns a new tuple.
Inputs are never mutated and no function raises for a well-formed sequence.
"""

from __future__ import annotations

import time
from typing import Iterable, Optional, Sequence

from practice_builder.drafts.plan_types import Drill, DrillInstance


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def make_instance_id(drill_id: str, existing: Iterable[str], *, now_ms: Optional[int] = None) -> str:
    """
    ``<drill_id>-<epoch millis>``; not cryptographic.
    Two adds of the same drill inside one millisecond get the next free tick.
    """

    taken = set(existing)
    tick = _now_ms() if now_ms is None else now_ms
    candidate = f"{drill_id}-{tick}"
    while candidate in taken:
        tick += 1
        candidate = f"{drill_id}-{tick}"
    return candidate


def index_of(sequence: Sequence[DrillInstance], instance_id: str) -> int:
    """Position of ``instance_id`` or -1"""

    for index, instance in enumerate(sequence):
        if instance.instance_id == instance_id:
            return index
    return -1


def append(
    sequence: Sequence[DrillInstance],
    drill: Drill,
    *,
    now_ms: Optional[int] = None,
) -> tuple[DrillInstance, ...]:
    instance_id = make_instance_id(
        drill.id,
        (instance.instance_id for instance in sequence),
        now_ms=now_ms,
    )
    return (*sequence, DrillInstance(drill=drill, instance_id=instance_id))


def remove_by_instance_id(sequence: Sequence[DrillInstance], instance_id: str) -> tuple[DrillInstance, ...]:
    return tuple(instance for instance in sequence if instance.instance_id != instance_id)


def move(
    sequence: Sequence[DrillInstance],
    from_instance_id: str,
    to_instance_id: str,
) -> tuple[DrillInstance, ...]:
    """
    Move ``from_instance_id`` to the index currently held by ``to_instance_id``.
    Items in between shift by one toward the vacated slot.
    """

    items = list(sequence)
    if from_instance_id == to_instance_id:
        return tuple(items)

    old_index = index_of(items, from_instance_id)
    new_index = index_of(items, to_instance_id)
    if old_index < 0 or new_index < 0:
        return tuple(items)

    moved = items.pop(old_index)
    items.insert(new_index, moved)
    return tuple(items)


__all__ = [
    "append",
    "index_of",
    "make_instance_id",
    "move",
    "remove_by_instance_id",
]
