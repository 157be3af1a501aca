from datetime import date

from conftest import make_drill

from practice_builder.drafts import ordering
from practice_builder.drafts.plan_types import Draft


def _build(*drill_ids: str) -> tuple:
    sequence = ()
    for tick, drill_id in enumerate(drill_ids):
        sequence = ordering.append(sequence, make_drill(drill_id, 10), now_ms=1000 + tick)
    return sequence


def _ids(sequence) -> list[str]:
    return [instance.instance_id for instance in sequence]


def test_append_returns_new_sequence_and_keeps_input() -> None:
    original = _build("a", "b")
    drill = make_drill("c", 5)

    updated = ordering.append(original, drill, now_ms=5000)

    assert len(original) == 2
    assert len(updated) == 3
    assert updated[-1].drill is drill
    assert updated[-1].instance_id == "c-5000"


def test_same_drill_twice_gets_distinct_instance_ids_in_one_tick() -> None:
    drill = make_drill("drill-1", 10)

    sequence = ordering.append((), drill, now_ms=42)
    sequence = ordering.append(sequence, drill, now_ms=42)

    assert [instance.drill_id for instance in sequence] == ["drill-1", "drill-1"]
    assert sequence[0].instance_id != sequence[1].instance_id
    assert Draft(title="t", practice_date=date(2026, 10, 19), instances=sequence).total_minutes() == 20


def test_make_instance_id_skips_taken_ticks() -> None:
    taken = ["x-10", "x-11"]

    assert ordering.make_instance_id("x", taken, now_ms=10) == "x-12"


def test_remove_after_append_restores_sequence() -> None:
    original = _build("a", "b", "c")

    appended = ordering.append(original, make_drill("d", 10), now_ms=9999)
    restored = ordering.remove_by_instance_id(appended, appended[-1].instance_id)

    assert restored == original


def test_remove_absent_id_is_noop() -> None:
    original = _build("a", "b")

    assert _ids(ordering.remove_by_instance_id(original, "missing")) == _ids(original)


def test_remove_twice_does_not_fail() -> None:
    original = _build("a", "b")
    target = original[0].instance_id

    once = ordering.remove_by_instance_id(original, target)
    twice = ordering.remove_by_instance_id(once, target)

    assert _ids(twice) == _ids(once) == [original[1].instance_id]


def test_move_forward_shifts_intervening_items_back() -> None:
    a, b, c, d = _build("a", "b", "c", "d")

    moved = ordering.move((a, b, c, d), a.instance_id, c.instance_id)

    assert moved == (b, c, a, d)


def test_move_backward_shifts_intervening_items_forward() -> None:
    a, b, c, d = _build("a", "b", "c", "d")

    moved = ordering.move((a, b, c, d), d.instance_id, b.instance_id)

    assert moved == (a, d, b, c)


def test_move_noops() -> None:
    sequence = _build("a", "b", "c")
    first = sequence[0].instance_id

    assert ordering.move(sequence, first, first) == sequence
    assert ordering.move(sequence, first, "missing") == sequence
    assert ordering.move(sequence, "missing", first) == sequence
    assert ordering.move((), "x", "y") == ()


def test_move_preserves_instance_ids_as_multiset() -> None:
    sequence = _build("a", "b", "c", "d", "e")

    for source in sequence:
        for target in sequence:
            moved = ordering.move(sequence, source.instance_id, target.instance_id)
            assert sorted(_ids(moved)) == sorted(_ids(sequence))


def test_adjacent_move_is_undone_by_swapped_move() -> None:
    a, b, c = _build("a", "b", "c")

    there = ordering.move((a, b, c), b.instance_id, c.instance_id)
    back = ordering.move(there, c.instance_id, b.instance_id)

    assert there == (a, c, b)
    assert back == (a, b, c)


def test_move_is_undone_by_moving_back_onto_original_slot() -> None:
    sequence = _build("a", "b", "c", "d", "e")

    for i, source in enumerate(sequence):
        for target in sequence:
            moved = ordering.move(sequence, source.instance_id, target.instance_id)
            occupant = moved[i].instance_id
            assert ordering.move(moved, source.instance_id, occupant) == sequence


def test_non_adjacent_swapped_move_keeps_other_items_in_order() -> None:
    a, b, c, d = _build("a", "b", "c", "d")

    there = ordering.move((a, b, c, d), a.instance_id, c.instance_id)
    back = ordering.move(there, c.instance_id, a.instance_id)

    others = [x for x in back if x not in (a, c)]
    assert others == [b, d]
