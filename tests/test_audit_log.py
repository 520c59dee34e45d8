from datetime import date

import pytest

from conftest import MONDAY
from core.exceptions import ConcurrencyError
from core.services.audit import preview_audit_action, preview_audit_details, record_audit


def test_audit_record_commit_and_filters(services):
    audit = services["audit_service"]

    audit.record(action="lot.note", entity_type="lot", entity_id="lot-1", lot_id="lot-1", commit=True)
    audit.record(
        action="calendar.review",
        entity_type="working_calendar",
        entity_id="default",
        details={"reviewed_on": date(2024, 1, 2)},
        commit=True,
    )

    assert [e.action for e in audit.list_recent(lot_id="lot-1")] == ["lot.note"]
    (review,) = audit.list_recent(entity_type="working_calendar")
    assert review.details == {"reviewed_on": "2024-01-02"}
    assert len(audit.list_recent(limit=1)) == 1


def test_actor_is_stamped_on_entries(services, house_template):
    audit = services["audit_service"]
    audit.set_actor("  superintendent  ")

    lot = services["lot_schedule_service"].start_lot(house_template, MONDAY)

    (entry,) = audit.list_recent(lot_id=lot.id)
    assert entry.actor == "superintendent"

    audit.set_actor("")
    entry = audit.record(action="lot.note", entity_type="lot", entity_id=lot.id)
    assert entry.actor is None


def test_failed_change_leaves_no_audit_entry(services, house_template):
    svc = services["lot_schedule_service"]
    audit = services["audit_service"]
    lot = svc.start_lot(house_template, MONDAY)
    first = svc.preview_delay(lot.id, lot.tasks[0].id, 1)
    second = svc.preview_delay(lot.id, lot.tasks[1].id, 1)
    svc.apply_preview(first)

    with pytest.raises(ConcurrencyError):
        svc.apply_preview(second)

    actions = [e.action for e in audit.list_recent(lot_id=lot.id)]
    assert sorted(actions) == ["lot.start", "task.delay"]


def test_record_audit_files_entry_under_lot_snapshot(services, make_task, make_lot):
    owner = services["lot_schedule_service"]
    lot = make_lot(make_task("Slab Grade", date(2024, 1, 1), date(2024, 1, 3)), id="lot-9", version=4)

    record_audit(
        owner,
        action="lot.note",
        entity_type="lot",
        entity_id=lot.id,
        lot=lot,
        details={"on": date(2024, 1, 5)},
    )
    services["session"].commit()

    (entry,) = services["audit_service"].list_recent(lot_id="lot-9")
    assert entry.details == {"on": "2024-01-05", "lot_version": 4}


def test_record_audit_without_audit_service_is_silent():
    record_audit(object(), action="lot.note", entity_type="lot", entity_id="lot-1")


def test_preview_audit_action_names_the_change(services, house_template):
    svc = services["lot_schedule_service"]
    lot = svc.start_lot(house_template, MONDAY)
    slab_id = lot.tasks[0].id

    assert preview_audit_action(svc.preview_delay(lot.id, slab_id, 1)) == "task.delay"
    assert preview_audit_action(svc.preview_reschedule(lot.id, slab_id, date(2024, 1, 2))) == "task.reschedule"
    assert preview_audit_action(svc.preview_duration_change(lot.id, slab_id, 4)) == "task.duration"
    buffer_preview = svc.preview_buffer(lot.id, slab_id, 2)
    assert preview_audit_action(buffer_preview) == "task.buffer"
    assert preview_audit_details(buffer_preview, reason="rain")["buffer_days"] == 2
    assert "delay_days" not in preview_audit_details(buffer_preview)
