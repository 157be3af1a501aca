import pytest
from sqlalchemy.exc import OperationalError

from practice_builder.catalog import (
    create_drill,
    delete_drill,
    get_drill,
    group_by_category,
    list_drills,
    update_drill,
)
from practice_builder.errors import NotFound, ReferentialError, TransientIO, Unauthenticated, ValidationError
from practice_builder.practices import create_practice, replace_practice_items
from practice_builder.schemas.builder import Category, Difficulty


def _fields(**overrides):
    fields = {
        "title": "Six-Person Serve Receive",
        "description": "Full rotation serve receive.",
        "duration_minutes": 20,
        "difficulty": "Intermediate",
        "category": "Passing",
        "tags": ["serve receive", " rotation ", "serve receive"],
    }
    fields.update(overrides)
    return fields


def test_create_drill_validates_and_normalizes(session_factory, coach_id):
    with session_factory() as db:
        drill = create_drill(db, coach_id, _fields())

    assert drill.difficulty is Difficulty.INTERMEDIATE
    assert drill.category is Category.PASSING
    assert drill.tags == ("serve receive", "rotation")
    assert drill.created_at is not None


@pytest.mark.parametrize(
    "overrides",
    [
        {"duration_minutes": 0},
        {"duration_minutes": -5},
        {"title": "  "},
        {"difficulty": "Expert"},
        {"category": "Juggling"},
    ],
)
def test_create_drill_rejects_bad_fields(session_factory, coach_id, overrides):
    with session_factory() as db:
        with pytest.raises(ValidationError) as excinfo:
            create_drill(db, coach_id, _fields(**overrides))

    assert excinfo.value.errors


def test_create_drill_requires_user(session_factory, coach_id):
    with session_factory() as db:
        with pytest.raises(Unauthenticated):
            create_drill(db, None, _fields())


def test_list_drills_newest_first(session_factory, catalog_drills):
    with session_factory() as db:
        drills = list_drills(db)

    assert [drill.id for drill in drills] == ["drill-c", "drill-b", "drill-a"]


def test_list_drills_search_matches_title_or_description_ignoring_case(session_factory, catalog_drills, coach_id):
    with session_factory() as db:
        create_drill(db, coach_id, _fields(title="Pepper", description="Partner SERVE and dig warm-up."))

    with session_factory() as db:
        assert sorted(drill.title for drill in list_drills(db, search="serve")) == ["Pepper", "Serve Receive"]
        assert [drill.id for drill in list_drills(db, search="  scrim ")] == ["drill-c"]
        assert list_drills(db, search="jump float") == []
        assert len(list_drills(db, search="   ")) == 4


def _failing_get(*_args, **_kwargs):
    raise OperationalError("SELECT drills", {}, Exception("database is down"))


@pytest.mark.parametrize(
    "operation",
    [
        lambda db: get_drill(db, "drill-a"),
        lambda db: update_drill(db, "drill-a", {"duration_minutes": 12}),
        lambda db: delete_drill(db, "drill-a"),
    ],
)
def test_drill_lookup_outage_is_transient(session_factory, catalog_drills, monkeypatch, operation):
    with session_factory() as db:
        monkeypatch.setattr(db, "get", _failing_get)
        with pytest.raises(TransientIO):
            operation(db)


def test_update_drill_changes_only_given_fields(session_factory, catalog_drills):
    with session_factory() as db:
        updated = update_drill(db, "drill-a", {"duration_minutes": 12})

    assert updated.duration_minutes == 12
    assert updated.title == "Butterfly Passing"

    with session_factory() as db:
        with pytest.raises(NotFound):
            update_drill(db, "missing", {"duration_minutes": 12})
        with pytest.raises(ValidationError):
            update_drill(db, "drill-a", {"duration_minutes": 0})


def test_delete_drill_in_use_is_refused(session_factory, catalog_drills, coach_id):
    from datetime import date

    with session_factory() as db:
        practice = create_practice(db, coach_id, "Monday", date(2026, 10, 19))
        replace_practice_items(db, practice.id, ["drill-a"])
        db.commit()

    with session_factory() as db:
        with pytest.raises(ReferentialError):
            delete_drill(db, "drill-a")
        delete_drill(db, "drill-b")

    with session_factory() as db:
        with pytest.raises(NotFound):
            get_drill(db, "drill-b")


def test_group_by_category_uses_display_order_and_skips_empty(catalog_drills):
    grouped = group_by_category(list(catalog_drills.values()))

    assert list(grouped) == [Category.PASSING, Category.SERVING, Category.COMPETITION]
    assert [drill.id for drill in grouped[Category.SERVING]] == ["drill-b"]
