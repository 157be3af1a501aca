"""Seed the drill catalog from a JSON file.

Usage:
    DATABASE_URL=... python scripts/seed_drills.py resource/sample_drills.json --user-id 1

The file holds ``{"drills": [...]}`` where each entry has the catalog fields
(title, description, duration_minutes, difficulty, category, tags). Drills whose
title already exists are skipped, so the script can be re-run.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from practice_builder.catalog import create_drill
from practice_builder.db import DrillRecord, SessionLocal, User, init_db
from practice_builder.errors import ValidationError

logger = logging.getLogger("seed_drills")

DEFAULT_PATH = Path(__file__).resolve().parent.parent / "resource" / "sample_drills.json"


def _load_entries(path: Path) -> List[Dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    entries = data.get("drills") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"{path} does not contain a drill list")
    return entries


def seed(path: Path, user_id: int) -> int:
    init_db()
    created = 0
    with SessionLocal() as db:
        if db.get(User, user_id) is None:
            db.add(User(id=user_id, is_active=True))
            db.commit()

        existing = {title for (title,) in db.query(DrillRecord.title).all()}
        for entry in _load_entries(path):
            if entry.get("title") in existing:
                continue
            try:
                create_drill(db, user_id, entry)
            except ValidationError as exc:
                logger.warning("Skipping drill %r: %s", entry.get("title"), exc.errors)
                continue
            created += 1
    return created


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Seed drill catalog")
    parser.add_argument("path", nargs="?", type=Path, default=DEFAULT_PATH)
    parser.add_argument("--user-id", type=int, default=1)
    args = parser.parse_args()

    created = seed(args.path, args.user_id)
    print(f"Created {created} drills")


if __name__ == "__main__":
    main()
