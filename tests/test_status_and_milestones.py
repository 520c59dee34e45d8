from dataclasses import replace
from datetime import date

import pytest

from core.domain import (
    DEFAULT_MILESTONES,
    Inspection,
    InspectionResult,
    LotStatus,
    TaskDependency,
    TaskStatus,
    Track,
)
from core.services.scheduling.milestones import (
    NOT_STARTED_MILESTONE,
    get_current_milestone,
    is_milestone_achieved,
    list_achieved_milestones,
)
from core.services.scheduling.status import derive_lot_statuses, derive_task_status, refresh_ready_statuses


def _pair(make_task, *, pred_done=False, **succ_extra):
    pred = make_task(
        "Pred",
        date(2024, 1, 1),
        date(2024, 1, 3),
        actual_end=date(2024, 1, 3) if pred_done else None,
    )
    succ = make_task(
        "Succ",
        date(2024, 1, 4),
        date(2024, 1, 8),
        dependencies=(TaskDependency.create(pred.id),),
        **succ_extra,
    )
    return pred, succ


def test_complete_wins_over_everything(make_task):
    task = make_task(
        "Done",
        date(2024, 1, 1),
        date(2024, 1, 2),
        actual_end=date(2024, 1, 5),
        requires_inspection=True,
        delay_days=3,
    )

    assert derive_task_status(task, [task], [], date(2024, 2, 1)) == TaskStatus.COMPLETE


def test_inspection_gate_blocks_until_passed(make_task):
    pred, succ = _pair(make_task, pred_done=True, requires_inspection=True, inspection_type="framing")
    failed = Inspection.create(succ.id, "framing", result=InspectionResult.FAIL)
    passed = Inspection.create(succ.id, "framing", result=InspectionResult.PASS)
    today = date(2024, 1, 4)

    assert derive_task_status(succ, [pred, succ], [], today) == TaskStatus.BLOCKED
    assert derive_task_status(succ, [pred, succ], [failed], today) == TaskStatus.BLOCKED
    assert derive_task_status(succ, [pred, succ], [failed, passed], today) == TaskStatus.READY


def test_past_scheduled_end_is_delayed(make_task):
    pred, succ = _pair(make_task, pred_done=True, actual_start=date(2024, 1, 4))

    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 8)) == TaskStatus.IN_PROGRESS
    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 9)) == TaskStatus.DELAYED


def test_logged_delay_is_delayed_before_the_end(make_task):
    pred, succ = _pair(make_task, pred_done=True, delay_days=2)

    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 4)) == TaskStatus.DELAYED


def test_ready_needs_predecessors_and_start_date(make_task):
    pred, succ = _pair(make_task)
    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 4)) == TaskStatus.PENDING

    pred, succ = _pair(make_task, pred_done=True)
    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 3)) == TaskStatus.PENDING
    assert derive_task_status(succ, [pred, succ], [], date(2024, 1, 4)) == TaskStatus.READY


def test_derive_lot_statuses(make_task, make_lot):
    pred, succ = _pair(make_task, pred_done=True)
    lot = make_lot(pred, succ)

    assert derive_lot_statuses(lot, [], date(2024, 1, 4)) == {
        pred.id: TaskStatus.COMPLETE,
        succ.id: TaskStatus.READY,
    }


def _milestone(milestone_id):
    return next(m for m in DEFAULT_MILESTONES if m.id == milestone_id)


def test_single_task_trigger(make_task, make_lot):
    slab = make_task("Slab Grade", date(2024, 1, 1), date(2024, 1, 3), actual_end=date(2024, 1, 3))
    framing = make_task("Framing", date(2024, 1, 4), date(2024, 1, 10))
    lot = make_lot(slab, framing)

    assert is_milestone_achieved(_milestone("foundation_complete"), lot)
    assert not is_milestone_achieved(_milestone("framing_complete"), lot)
    assert get_current_milestone(lot).id == "foundation_complete"


def test_multi_task_trigger_needs_every_task(make_task, make_lot):
    elec = make_task("Rough Electrical", date(2024, 1, 1), date(2024, 1, 2), actual_end=date(2024, 1, 2))
    plumb = make_task("Rough Plumbing", date(2024, 1, 1), date(2024, 1, 2), actual_end=date(2024, 1, 2))
    hvac = make_task("Rough HVAC", date(2024, 1, 1), date(2024, 1, 2))
    rough = _milestone("rough_complete")

    assert not is_milestone_achieved(rough, make_lot(elec, plumb, hvac))
    assert not is_milestone_achieved(rough, make_lot(elec, plumb))

    done_hvac = make_task("Rough HVAC", date(2024, 1, 1), date(2024, 1, 2), status=TaskStatus.COMPLETE)
    assert is_milestone_achieved(rough, make_lot(elec, plumb, done_hvac))


def test_manual_milestones_and_sentinel(make_task, make_lot):
    lot = make_lot(make_task("Slab Grade", date(2024, 1, 1), date(2024, 1, 3)))

    assert list_achieved_milestones(lot) == []
    assert get_current_milestone(lot) == NOT_STARTED_MILESTONE
    assert get_current_milestone(lot).percent == 0

    permitted = make_lot(*lot.tasks, manual_milestones={"permit_issued": True}, status=LotStatus.NOT_STARTED)
    assert [m.id for m in list_achieved_milestones(permitted)] == ["permit_issued"]
    assert get_current_milestone(permitted).id == "permit_issued"


def test_lot_snapshots_are_hashable_and_milestone_flags_read_only(make_task, make_lot):
    flags = {"permit_issued": True}
    lot = make_lot(make_task("Slab Grade", date(2024, 1, 1), date(2024, 1, 3)), manual_milestones=flags)
    flags["permit_issued"] = False

    assert lot.manual_milestones == {"permit_issued": True}
    assert hash(lot) == hash(make_lot(*lot.tasks, manual_milestones={"permit_issued": True}))
    with pytest.raises(TypeError):
        lot.manual_milestones["permit_issued"] = False


def test_refresh_ready_statuses_picks_next_task_per_track(make_task):
    frame = make_task("Frame", date(2024, 1, 1), date(2024, 1, 3), track=Track.STRUCTURE, sort_order=1)
    roof = make_task("Roof", date(2024, 1, 4), date(2024, 1, 5), track=Track.STRUCTURE, sort_order=2)
    pad = make_task("Pad", date(2024, 1, 1), date(2024, 1, 1), track=Track.EXTERIOR, sort_order=3, is_buffer=True)
    siding = make_task("Siding", date(2024, 1, 2), date(2024, 1, 4), track=Track.EXTERIOR, sort_order=4)

    tasks = {t.id: t for t in refresh_ready_statuses([frame, roof, pad, siding])}
    assert tasks["frame"].status == TaskStatus.READY
    assert tasks["roof"].status == TaskStatus.PENDING
    assert tasks["pad"].status == TaskStatus.PENDING
    assert tasks["siding"].status == TaskStatus.READY

    started = [replace(frame, status=TaskStatus.IN_PROGRESS), roof]
    tasks = {t.id: t for t in refresh_ready_statuses(started)}
    assert tasks["frame"].status == TaskStatus.IN_PROGRESS
    assert tasks["roof"].status == TaskStatus.READY

    done = [replace(frame, actual_end=date(2024, 1, 3)), roof]
    tasks = {t.id: t for t in refresh_ready_statuses(done)}
    assert tasks["roof"].status == TaskStatus.READY
