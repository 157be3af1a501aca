import os
from typing import Any, Dict, List


def require_dev_environment() -> None:
    env_value = os.getenv("ENV")
    if env_value != "dev":
        raise RuntimeError(
            f"devtools are only available when ENV=dev (current ENV={env_value!r})"
        )


def load_user(db: Any, user_id: int) -> Any:
    from practice_builder.db import User

    return db.query(User).filter(User.id == user_id).first()


def ensure_user(db: Any, user_id: int) -> Any:
    from practice_builder.db import User

    user = load_user(db, user_id)
    if user is None:
        user = User(id=user_id, email=f"coach-{user_id}@example.test", is_active=True)
        db.add(user)
        db.commit()
    return user


def build_practice_context(practice: Any) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = []
    for item in sorted(practice.items, key=lambda row: row.sort_order):
        drill = item.drill
        items.append(
            {
                "sort_order": item.sort_order,
                "drill_id": item.drill_id,
                "title": drill.title if drill else None,
                "duration_minutes": drill.duration_minutes if drill else None,
            }
        )
    return {
        "practice_id": practice.id,
        "title": practice.title,
        "practice_date": practice.practice_date.isoformat(),
        "items": items,
    }


def sort_orders_are_dense(practice_context: Dict[str, Any]) -> bool:
    orders = [item["sort_order"] for item in practice_context.get("items") or []]
    return orders == list(range(len(orders)))
