from dataclasses import replace
from datetime import date

import pytest

from core.domain import TaskDependency, TaskStatus, Track
from core.exceptions import BusinessRuleError, ConcurrencyError, ValidationError
from core.services.scheduling.cascade import ScheduleCascadeEngine
from core.services.scheduling.cascade_models import CascadeOutcome
from core.services.scheduling.final_track import repack_final_track


@pytest.fixture
def engine(calendar):
    return ScheduleCascadeEngine(calendar)


@pytest.fixture
def a_b_lot(make_task, make_lot):
    a = make_task("A", date(2024, 1, 1), date(2024, 1, 3), duration_days=3, track=Track.FOUNDATION, sort_order=1)
    b = make_task(
        "B",
        date(2024, 1, 4),
        date(2024, 1, 5),
        duration_days=2,
        track=Track.STRUCTURE,
        sort_order=2,
        dependencies=(TaskDependency.create(a.id),),
    )
    return make_lot(a, b)


def test_delay_shifts_dependents_and_completion(engine, calendar, a_b_lot):
    preview = engine.preview_delay(a_b_lot, "a", 2)

    assert preview.outcome == CascadeOutcome.RESCHEDULED
    assert preview.shift_working_days == 2
    assert [item.task_id for item in preview.affected] == ["a", "b"]
    a, b = preview.affected
    assert (a.new_start, a.new_end) == (date(2024, 1, 3), date(2024, 1, 5))
    assert (b.new_start, b.new_end) == (date(2024, 1, 8), date(2024, 1, 9))
    assert preview.old_completion == date(2024, 1, 5)
    assert preview.new_completion == date(2024, 1, 9)
    assert calendar.working_day_offset(preview.old_completion, preview.new_completion) == 2


def test_preview_does_not_mutate_the_lot(engine, a_b_lot):
    engine.preview_delay(a_b_lot, "a", 2)

    assert a_b_lot.get_task("a").scheduled_start == date(2024, 1, 1)
    assert a_b_lot.version == 1


def test_apply_writes_preview_and_history(engine, a_b_lot):
    preview = engine.preview_delay(a_b_lot, "a", 2)
    updated = engine.apply(a_b_lot, preview, reason="weather", notes="rain", notified=True)

    a = updated.get_task("a")
    b = updated.get_task("b")
    assert (a.scheduled_start, a.scheduled_end) == (date(2024, 1, 3), date(2024, 1, 5))
    assert b.scheduled_start == date(2024, 1, 8)
    assert a.delay_days == 2
    assert a.delay_reason == "weather"
    assert a.status == TaskStatus.DELAYED
    assert b.delay_days == 0
    assert updated.version == 2

    (change,) = updated.schedule_changes
    assert change.task_id == "a"
    assert (change.old_start, change.new_start) == (date(2024, 1, 1), date(2024, 1, 3))
    assert change.affected_count == 2
    assert change.notified is True


def test_preview_is_applied_once(engine, a_b_lot):
    preview = engine.preview_delay(a_b_lot, "a", 2)
    updated = engine.apply(a_b_lot, preview)

    with pytest.raises(ConcurrencyError) as exc:
        engine.apply(updated, preview)
    assert exc.value.code == "STALE_PREVIEW"
    assert exc.value.as_dict() == {
        "error": "ConcurrencyError",
        "code": "STALE_PREVIEW",
        "message": exc.value.message,
        "lot_id": "lot-1",
        "task_id": "a",
    }


def test_preview_for_another_lot_is_rejected(engine, a_b_lot, make_task, make_lot):
    other = make_lot(make_task("X", date(2024, 1, 1), date(2024, 1, 1), lot_id="lot-2"))
    preview = engine.preview_delay(a_b_lot, "a", 1)

    with pytest.raises(ValidationError) as exc:
        engine.apply(other, preview)
    assert exc.value.code == "PREVIEW_LOT_MISMATCH"


def test_delay_by_zero_is_a_no_op(engine, a_b_lot):
    preview = engine.preview_delay(a_b_lot, "a", 0)

    assert preview.is_no_op
    assert preview.affected == ()
    assert not preview.can_apply
    assert engine.apply(a_b_lot, preview) is a_b_lot


def test_negative_delay_is_rejected(engine, a_b_lot):
    with pytest.raises(ValidationError) as exc:
        engine.preview_delay(a_b_lot, "a", -1)
    assert exc.value.code == "DELAY_NEGATIVE"


def test_move_before_predecessor_is_a_violation(engine, a_b_lot):
    preview = engine.preview_reschedule(a_b_lot, "b", date(2024, 1, 2))

    assert preview.dependency_violation
    assert preview.earliest_start == date(2024, 1, 4)
    assert preview.affected == ()
    assert engine.apply(a_b_lot, preview) is a_b_lot


def test_move_to_weekend_normalizes_forward(engine, a_b_lot):
    preview = engine.preview_reschedule(a_b_lot, "b", date(2024, 1, 6))

    assert preview.normalized_date == date(2024, 1, 8)
    assert preview.shift_working_days == 2
    (b,) = preview.affected
    assert (b.new_start, b.new_end) == (date(2024, 1, 8), date(2024, 1, 9))
    assert preview.delay_days is None


def test_move_earlier_within_slack(engine, make_task, make_lot):
    a = make_task("A", date(2024, 1, 1), date(2024, 1, 3), duration_days=3)
    b = make_task(
        "B",
        date(2024, 1, 10),
        date(2024, 1, 11),
        duration_days=2,
        track=Track.STRUCTURE,
        dependencies=(TaskDependency.create(a.id),),
    )
    lot = make_lot(a, b)

    updated, preview = engine.commit_reschedule(lot, "b", date(2024, 1, 4))

    assert preview.shift_working_days == -4
    assert updated.get_task("b").scheduled_end == date(2024, 1, 5)
    assert updated.get_task("b").delay_days == 0


def test_completed_tasks_are_immutable_anchors(engine, make_task, make_lot):
    c = make_task(
        "C",
        date(2024, 1, 1),
        date(2024, 1, 2),
        duration_days=2,
        sort_order=2,
        actual_end=date(2024, 1, 2),
        status=TaskStatus.COMPLETE,
    )
    d = make_task(
        "D",
        date(2024, 1, 3),
        date(2024, 1, 4),
        duration_days=2,
        track=Track.STRUCTURE,
        dependencies=(TaskDependency.create(c.id),),
    )
    lot = make_lot(c, d)

    preview = engine.preview_delay(lot, "c", 3)
    assert preview.outcome == CascadeOutcome.TASK_COMPLETE
    assert preview.affected == ()
    assert engine.apply(lot, preview) is lot
    assert lot.get_task("d").scheduled_start == date(2024, 1, 3)


def test_completed_same_track_task_is_not_shifted(engine, make_task, make_lot):
    first = make_task("First", date(2024, 1, 1), date(2024, 1, 1), sort_order=1)
    done = make_task(
        "Done",
        date(2024, 1, 2),
        date(2024, 1, 2),
        sort_order=2,
        actual_end=date(2024, 1, 2),
    )
    later = make_task("Later", date(2024, 1, 3), date(2024, 1, 3), sort_order=3)
    lot = make_lot(first, done, later)

    preview = engine.preview_delay(lot, "first", 2)

    assert {item.task_id for item in preview.affected} == {"first", "later"}
    assert preview.get_affected("later").new_start == date(2024, 1, 5)


def test_same_track_heuristic_moves_non_dependents(engine, make_task, make_lot):
    # Trim and Paint share a track but have no formal dependency
    trim = make_task("Trim", date(2024, 1, 1), date(2024, 1, 2), duration_days=2, track=Track.INTERIOR, sort_order=1)
    paint = make_task("Paint", date(2024, 1, 8), date(2024, 1, 9), duration_days=2, track=Track.INTERIOR, sort_order=2)
    gutters = make_task(
        "Gutters", date(2024, 1, 8), date(2024, 1, 8), track=Track.EXTERIOR, sort_order=3, blocks_final=False
    )
    lot = make_lot(trim, paint, gutters)

    preview = engine.preview_delay(lot, "trim", 1)

    assert {item.task_id for item in preview.affected} == {"trim", "paint"}
    assert preview.get_affected("paint").new_start == date(2024, 1, 9)


def test_final_track_repacks_behind_latest_blocking_end(engine, make_task, make_lot):
    interior = make_task("Interior", date(2024, 1, 8), date(2024, 1, 10), duration_days=3, track=Track.INTERIOR, sort_order=1)
    exterior = make_task("Exterior", date(2024, 1, 8), date(2024, 1, 12), duration_days=5, track=Track.EXTERIOR, sort_order=2)
    final_1 = make_task("Final 1", date(2024, 1, 15), date(2024, 1, 16), duration_days=2, track=Track.FINAL, sort_order=10)
    final_2 = make_task("Final 2", date(2024, 1, 17), date(2024, 1, 17), duration_days=1, track=Track.FINAL, sort_order=11)
    lot = make_lot(interior, exterior, final_1, final_2)

    preview = engine.preview_delay(lot, "interior", 5)
    updated = engine.apply(lot, preview)

    f1 = updated.get_task("final-1")
    f2 = updated.get_task("final-2")
    assert updated.get_task("interior").scheduled_end == date(2024, 1, 17)
    assert updated.get_task("exterior").scheduled_start == date(2024, 1, 8)
    assert (f1.scheduled_start, f1.scheduled_end) == (date(2024, 1, 18), date(2024, 1, 19))
    assert f2.scheduled_start == date(2024, 1, 22)
    assert f1.scheduled_end < f2.scheduled_start
    assert preview.new_completion == date(2024, 1, 22)


def test_repack_respects_completed_final_tasks(calendar, make_task):
    blocker = make_task("Blocker", date(2024, 1, 1), date(2024, 1, 5), track=Track.INTERIOR)
    walk = make_task(
        "Walk",
        date(2024, 1, 8),
        date(2024, 1, 9),
        duration_days=2,
        track=Track.FINAL,
        sort_order=1,
        actual_end=date(2024, 1, 10),
    )
    punch = make_task("Punch", date(2024, 1, 8), date(2024, 1, 8), track=Track.FINAL, sort_order=2)

    tasks = {t.id: t for t in repack_final_track([blocker, walk, punch], calendar)}

    assert tasks["walk"].scheduled_start == date(2024, 1, 8)
    assert tasks["punch"].scheduled_start == date(2024, 1, 11)


def test_unscheduled_task_cannot_be_delayed(engine, make_task, make_lot):
    lot = make_lot(make_task("Loose", None, None))

    with pytest.raises(ValidationError) as exc:
        engine.preview_delay(lot, "loose", 1)
    assert exc.value.code == "TASK_NOT_SCHEDULED"


def test_preview_as_dict(engine, a_b_lot):
    payload = engine.preview_delay(a_b_lot, "a", 1).as_dict()

    assert payload["dependency_violation"] is False
    assert payload["normalized_date"] == date(2024, 1, 2)
    assert [row["task_id"] for row in payload["affected"]] == ["a", "b"]
    assert payload["affected"][0]["track"] == "foundation"


def test_delay_by_zero_after_apply_is_a_no_op(engine, a_b_lot):
    updated = engine.apply(a_b_lot, engine.preview_delay(a_b_lot, "a", 2))

    preview = engine.preview_delay(updated, "a", 0)

    assert preview.is_no_op
    assert preview.affected == ()
    assert preview.lot_version == updated.version
    assert engine.apply(updated, preview) is updated


def test_repeated_previews_are_identical(engine, a_b_lot, structure_lot):
    assert engine.preview_delay(a_b_lot, "a", 2) == engine.preview_delay(a_b_lot, "a", 2)
    assert engine.preview_reschedule(a_b_lot, "b", date(2024, 1, 6)) == engine.preview_reschedule(
        a_b_lot, "b", date(2024, 1, 6)
    )
    assert engine.preview_duration_change(a_b_lot, "a", 5) == engine.preview_duration_change(a_b_lot, "a", 5)
    assert engine.preview_buffer(structure_lot, "frame", 2) == engine.preview_buffer(structure_lot, "frame", 2)


# ---------- duration changes ----------


def test_longer_duration_pushes_dependents(engine, a_b_lot):
    preview = engine.preview_duration_change(a_b_lot, "a", 5)

    assert preview.outcome == CascadeOutcome.RESCHEDULED
    assert preview.new_duration == 5
    assert preview.delay_days is None
    assert preview.shift_working_days == 2
    assert preview.normalized_date == date(2024, 1, 1)
    a, b = preview.affected
    assert (a.task_id, a.new_start, a.new_end) == ("a", date(2024, 1, 1), date(2024, 1, 5))
    assert (b.task_id, b.new_start, b.new_end) == ("b", date(2024, 1, 8), date(2024, 1, 9))
    assert preview.new_completion == date(2024, 1, 9)


def test_shorter_duration_pulls_dependents_in(engine, a_b_lot):
    preview = engine.preview_duration_change(a_b_lot, "a", 1)

    assert preview.shift_working_days == -2
    assert preview.get_affected("a").new_end == date(2024, 1, 1)
    b = preview.get_affected("b")
    assert (b.new_start, b.new_end) == (date(2024, 1, 2), date(2024, 1, 3))


def test_apply_duration_change_updates_the_task(engine, a_b_lot):
    updated = engine.apply(a_b_lot, engine.preview_duration_change(a_b_lot, "a", 5), reason="scope change")

    a = updated.get_task("a")
    assert a.duration_days == 5
    assert a.scheduled_end == date(2024, 1, 5)
    assert a.status != TaskStatus.DELAYED
    assert a.delay_days == 0
    assert updated.get_task("b").duration_days == 2
    assert updated.version == 2
    (change,) = updated.schedule_changes
    assert (change.old_end, change.new_end) == (date(2024, 1, 3), date(2024, 1, 5))
    assert change.delay_days == 0


def test_same_duration_is_a_no_op(engine, a_b_lot):
    preview = engine.preview_duration_change(a_b_lot, "a", 3)

    assert preview.is_no_op
    assert engine.apply(a_b_lot, preview) is a_b_lot


def test_duration_below_one_day_is_rejected(engine, a_b_lot):
    with pytest.raises(ValidationError) as exc:
        engine.preview_duration_change(a_b_lot, "a", 0)
    assert exc.value.code == "DURATION_INVALID"


def test_completed_task_duration_cannot_change(engine, make_task, make_lot):
    done = make_task("Done", date(2024, 1, 1), date(2024, 1, 2), duration_days=2, actual_end=date(2024, 1, 2))
    lot = make_lot(done)

    preview = engine.preview_duration_change(lot, "done", 4)

    assert preview.outcome == CascadeOutcome.TASK_COMPLETE
    assert not preview.can_apply


# ---------- buffers ----------


@pytest.fixture
def structure_lot(make_task, make_lot):
    frame = make_task("Frame", date(2024, 1, 1), date(2024, 1, 3), duration_days=3, track=Track.STRUCTURE, sort_order=1)
    roof = make_task(
        "Roof",
        date(2024, 1, 4),
        date(2024, 1, 5),
        duration_days=2,
        track=Track.STRUCTURE,
        sort_order=2,
        dependencies=(TaskDependency.create(frame.id),),
    )
    walk = make_task("Walk", date(2024, 1, 8), date(2024, 1, 8), track=Track.FINAL, sort_order=3)
    return make_lot(frame, roof, walk)


def test_buffer_days_slide_unstarted_followers(engine, structure_lot):
    preview = engine.preview_buffer(structure_lot, "frame", 2)

    assert preview.outcome == CascadeOutcome.RESCHEDULED
    assert preview.buffer_days == 2
    assert preview.normalized_date == date(2024, 1, 4)
    assert preview.get_affected("frame") is None
    roof = preview.get_affected("roof")
    assert (roof.new_start, roof.new_end) == (date(2024, 1, 8), date(2024, 1, 9))
    assert preview.get_affected("walk").new_start == date(2024, 1, 10)

    updated = engine.apply(structure_lot, preview)
    assert updated.get_task("frame").scheduled_end == date(2024, 1, 3)
    assert updated.get_task("roof").status != TaskStatus.DELAYED
    assert updated.version == 2


def test_buffer_skips_started_followers(engine, structure_lot):
    started = structure_lot.with_tasks([replace(structure_lot.get_task("roof"), actual_start=date(2024, 1, 4))])

    preview = engine.preview_buffer(started, "frame", 2)

    assert preview.get_affected("roof") is None


def test_zero_buffer_is_a_no_op_and_negative_is_rejected(engine, structure_lot):
    preview = engine.preview_buffer(structure_lot, "frame", 0)
    assert preview.is_no_op
    assert preview.normalized_date == date(2024, 1, 4)

    with pytest.raises(ValidationError) as exc:
        engine.preview_buffer(structure_lot, "frame", -1)
    assert exc.value.code == "BUFFER_NEGATIVE"


def test_insert_buffer_task_after_anchor(engine, structure_lot):
    updated = engine.insert_buffer_task(structure_lot, "frame", 2, buffer_task_id="pad")

    assert [t.id for t in updated.tasks] == ["frame", "pad", "roof", "walk"]
    pad = updated.get_task("pad")
    assert pad.is_buffer
    assert pad.track == Track.STRUCTURE
    assert not pad.blocks_final
    assert pad.sort_order == 2
    assert (pad.scheduled_start, pad.scheduled_end) == (date(2024, 1, 4), date(2024, 1, 5))
    roof = updated.get_task("roof")
    assert roof.sort_order == 3
    assert (roof.scheduled_start, roof.scheduled_end) == (date(2024, 1, 8), date(2024, 1, 9))
    assert updated.get_task("walk").scheduled_start == date(2024, 1, 10)
    assert pad.status == TaskStatus.PENDING
    assert updated.version == 2
    assert updated.schedule_changes == ()


def test_remove_buffer_task_pulls_followers_back(engine, structure_lot):
    padded = engine.insert_buffer_task(structure_lot, "frame", 2, buffer_task_id="pad")

    updated = engine.remove_buffer_task(padded, "pad")

    assert "pad" not in updated.task_map()
    roof = updated.get_task("roof")
    assert (roof.scheduled_start, roof.scheduled_end) == (date(2024, 1, 4), date(2024, 1, 5))
    assert updated.version == 3


def test_remove_buffer_task_never_breaks_dependencies(engine, make_task, make_lot):
    crane = make_task("Crane", date(2024, 1, 1), date(2024, 1, 5), duration_days=5, sort_order=0)
    frame = make_task("Frame", date(2024, 1, 1), date(2024, 1, 3), duration_days=3, track=Track.STRUCTURE, sort_order=1)
    pad = make_task(
        "Pad",
        date(2024, 1, 4),
        date(2024, 1, 8),
        duration_days=3,
        track=Track.STRUCTURE,
        sort_order=2,
        blocks_final=False,
        is_buffer=True,
    )
    roof = make_task(
        "Roof",
        date(2024, 1, 9),
        date(2024, 1, 10),
        duration_days=2,
        track=Track.STRUCTURE,
        sort_order=3,
        dependencies=(TaskDependency.create(frame.id), TaskDependency.create(crane.id)),
    )
    lot = make_lot(crane, frame, pad, roof)

    updated = engine.remove_buffer_task(lot, "pad")

    roof = updated.get_task("roof")
    assert (roof.scheduled_start, roof.scheduled_end) == (date(2024, 1, 8), date(2024, 1, 9))


def test_buffer_task_validation(engine, structure_lot):
    with pytest.raises(ValidationError) as exc:
        engine.insert_buffer_task(structure_lot, "frame", 0)
    assert exc.value.code == "BUFFER_INVALID"

    with pytest.raises(BusinessRuleError) as exc:
        engine.remove_buffer_task(structure_lot, "roof")
    assert exc.value.code == "TASK_NOT_BUFFER"
    assert exc.value.task_id == "roof"
