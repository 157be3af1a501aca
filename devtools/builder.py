import argparse
import asyncio
import sys
from datetime import date
from typing import Optional

from devtools.common import (
    build_practice_context,
    ensure_user,
    require_dev_environment,
    sort_orders_are_dense,
)


def _store(user_id: int):
    from practice_builder.drafts import DraftStore

    return DraftStore(user_id)


async def _show(user_id: int) -> None:
    from practice_builder.drafts import format_plan

    store = _store(user_id)
    draft = await store.load()
    print(format_plan(draft))
    for instance in draft.instances:
        print(f"  instance_id: {instance.instance_id}")


async def _add(user_id: int, drill_id: str) -> None:
    from practice_builder.catalog import get_drill
    from practice_builder.db import SessionLocal

    with SessionLocal() as db:
        drill = get_drill(db, drill_id)
    store = _store(user_id)
    instance = await store.add_drill(drill)
    print(f"Added {drill.title} as {instance.instance_id}")


async def _remove(user_id: int, instance_id: str) -> None:
    store = _store(user_id)
    draft = await store.remove_instance(instance_id)
    print(f"Items: {draft.item_count()}")


async def _move(user_id: int, from_id: str, to_id: str) -> None:
    store = _store(user_id)
    draft = await store.move_instance(from_id, to_id)
    print("Order:")
    for position, instance in enumerate(draft.instances):
        print(f"  {position}: {instance.drill.title} ({instance.instance_id})")


async def _set_meta(user_id: int, title: Optional[str], practice_date: Optional[str]) -> None:
    store = _store(user_id)
    if title is not None:
        await store.set_title(title)
    if practice_date is not None:
        await store.set_date(date.fromisoformat(practice_date))
    draft = store.snapshot()
    print(f"{draft.title} on {draft.practice_date.isoformat()}")


async def _reset(user_id: int) -> None:
    await _store(user_id).reset()
    print("Builder cleared.")


async def _save(user_id: int, atomic: bool) -> None:
    from practice_builder.db import SessionLocal
    from practice_builder.plan_commit import commit_draft
    from practice_builder.practices import get_practice_with_items

    with SessionLocal() as db:
        ensure_user(db, user_id)

    result = await commit_draft(_store(user_id), SessionLocal, atomic=atomic)

    with SessionLocal() as db:
        context = build_practice_context(get_practice_with_items(db, result.practice_id))

    print("Practice Saved")
    print(f"  practice_id: {result.practice_id}")
    print(f"  items: {result.item_count}")
    print(f"  total_minutes: {result.total_minutes}")
    print(f"  long_session: {result.long_session}")
    print(f"  dense_sort_orders: {sort_orders_are_dense(context)}")


def _list_drills() -> None:
    from practice_builder.catalog import group_by_category, list_drills
    from practice_builder.db import SessionLocal

    with SessionLocal() as db:
        drills = list_drills(db)
    print(f"Available Drills ({len(drills)})")
    for category, items in group_by_category(drills).items():
        print(f"  {category.value}")
        for drill in items:
            print(f"    {drill.id}  {drill.title} [{drill.difficulty.value}, {drill.duration_minutes}m]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Practice builder devtools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("drills", help="List the drill catalog by category")

    for name, help_text in (
        ("show", "Print the current draft"),
        ("reset", "Clear the current draft"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--user-id", type=int, required=True)

    add = subparsers.add_parser("add", help="Append a catalog drill to the draft")
    add.add_argument("--user-id", type=int, required=True)
    add.add_argument("--drill-id", required=True)

    remove = subparsers.add_parser("remove", help="Remove a drill instance from the draft")
    remove.add_argument("--user-id", type=int, required=True)
    remove.add_argument("--instance-id", required=True)

    move = subparsers.add_parser("move", help="Move a drill instance onto another's position")
    move.add_argument("--user-id", type=int, required=True)
    move.add_argument("--from-id", required=True)
    move.add_argument("--to-id", required=True)

    meta = subparsers.add_parser("meta", help="Set draft title and/or date")
    meta.add_argument("--user-id", type=int, required=True)
    meta.add_argument("--title")
    meta.add_argument("--date", dest="practice_date", help="YYYY-MM-DD")

    save = subparsers.add_parser("save", help="Commit the draft as a practice")
    save.add_argument("--user-id", type=int, required=True)
    save.add_argument("--atomic", action="store_true", help="Single transaction for practice and items")

    return parser


def main() -> None:
    try:
        require_dev_environment()
        parser = build_parser()
        args = parser.parse_args()

        if args.command == "drills":
            _list_drills()
        elif args.command == "show":
            asyncio.run(_show(args.user_id))
        elif args.command == "add":
            asyncio.run(_add(args.user_id, args.drill_id))
        elif args.command == "remove":
            asyncio.run(_remove(args.user_id, args.instance_id))
        elif args.command == "move":
            asyncio.run(_move(args.user_id, args.from_id, args.to_id))
        elif args.command == "meta":
            asyncio.run(_set_meta(args.user_id, args.title, args.practice_date))
        elif args.command == "reset":
            asyncio.run(_reset(args.user_id))
        elif args.command == "save":
            asyncio.run(_save(args.user_id, args.atomic))
        else:
            parser.error("Unknown command")
    except Exception as exc:  # noqa: BLE001 - CLI entrypoint
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
