"""Database models and session management for the practice builder."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.sql import func

from practice_builder.config import settings
from practice_builder.schemas.builder import Category, Difficulty


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


engine = create_engine(settings.DATABASE_URL, echo=False, future=True, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _record):
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# -------------------- CORE --------------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now())

    drills = relationship("DrillRecord", back_populates="user")
    practices = relationship("Practice", back_populates="user", cascade="all, delete-orphan")


# -------------------- CATALOG --------------------
class DrillRecord(Base):
    __tablename__ = "drills"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False)
    difficulty = Column(Enum(Difficulty, values_callable=lambda e: [m.value for m in e], name="drill_difficulty_enum"), nullable=False)
    category = Column(Enum(Category, values_callable=lambda e: [m.value for m in e], name="drill_category_enum"), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    diagram_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), index=True)

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_drills_duration_positive"),
    )

    user = relationship("User", back_populates="drills")


# -------------------- PRACTICES --------------------
class Practice(Base):
    __tablename__ = "practices"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    practice_date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now())

    user = relationship("User", back_populates="practices")
    items = relationship(
        "PracticeItem",
        back_populates="practice",
        cascade="all, delete-orphan",
        order_by="PracticeItem.sort_order",
    )


class PracticeItem(Base):
    __tablename__ = "practice_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    practice_id = Column(String(36), ForeignKey("practices.id", ondelete="CASCADE"), nullable=False, index=True)
    drill_id = Column(String(36), ForeignKey("drills.id"), nullable=False, index=True)
    sort_order = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("practice_id", "sort_order", name="uq_practice_items_practice_sort"),
    )

    practice = relationship("Practice", back_populates="items")
    drill = relationship("DrillRecord")


# -------------------- SESSION HELPERS --------------------
def init_db():
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
