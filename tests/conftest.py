import os
import pathlib
import sys
from datetime import date, datetime, timedelta, timezone

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("TZ", "UTC")

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from practice_builder.db import Base, DrillRecord, User
from practice_builder.drafts.plan_types import Drill
from practice_builder.schemas.builder import Category, Difficulty

TODAY = date(2026, 10, 19)
COACH_ID = 7


class FakeRedis:
    """In-memory stand-in for the async Redis calls the draft store makes."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.set_calls = 0

    async def get(self, key):
        if self.fail_reads:
            raise RedisConnectionError("redis down")
        return self.data.get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise RedisConnectionError("redis down")
        self.set_calls += 1
        self.data[key] = value
        return True

    async def delete(self, key):
        if self.fail_writes:
            raise RedisConnectionError("redis down")
        return 1 if self.data.pop(key, None) is not None else 0


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def coach_id(session_factory):
    with session_factory() as db:
        db.add(User(id=COACH_ID, email="coach@example.test", is_active=True))
        db.commit()
    return COACH_ID


def make_drill(drill_id: str, minutes: int, *, title: str | None = None, category: Category = Category.PASSING) -> Drill:
    return Drill(
        id=drill_id,
        title=title or f"Drill {drill_id}",
        description="",
        duration_minutes=minutes,
        difficulty=Difficulty.BEGINNER,
        category=category,
        tags=("warmup",),
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def catalog_drills(session_factory, coach_id):
    """Drills A (10 min), B (15 min) and C (100 min) stored in the catalog."""

    drills = {
        "A": make_drill("drill-a", 10, title="Butterfly Passing"),
        "B": make_drill("drill-b", 15, title="Serve Receive", category=Category.SERVING),
        "C": make_drill("drill-c", 100, title="Scrimmage", category=Category.COMPETITION),
    }
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    with session_factory() as db:
        for offset, drill in enumerate(drills.values()):
            db.add(
                DrillRecord(
                    id=drill.id,
                    user_id=coach_id,
                    title=drill.title,
                    description=drill.description,
                    duration_minutes=drill.duration_minutes,
                    difficulty=drill.difficulty,
                    category=drill.category,
                    tags=list(drill.tags),
                    created_at=base + timedelta(minutes=offset),
                )
            )
        db.commit()
    return drills
