"""
Test editor sessions: loading guard, drag state and surfaced messages.
"""
import pytest
from models.schemas import ScheduleParameters, SlotRef
from service.editor import ingest_timetable
from service.exceptions import GenerationInProgressError, SessionNotFoundError
from service.session_store import SessionStore


def get_store_with_timetable(max_concurrent=3):
    store = SessionStore()
    params = ScheduleParameters(
        grade_counts={1: 2, 2: 1},
        max_concurrent_classes=max_concurrent,
        sessions_per_day=3,
        included_days=["Monday"],
        number_of_rooms=1,
    )
    session = store.create(params)
    store.begin_generation(session.session_id)
    store.finish_generation(session.session_id, ingest_timetable({
        "Room 1": {"Monday": {"Slot 1": ["Grade 1 - A", "Grade 1 - B"], "Slot 2": ["Grade 2 - A"], "Slot 3": []}},
    }))
    return store, session.session_id


SLOT_1 = SlotRef(room="Room 1", day="Monday", slot="Slot 1")
SLOT_2 = SlotRef(room="Room 1", day="Monday", slot="Slot 2")
SLOT_3 = SlotRef(room="Room 1", day="Monday", slot="Slot 3")


def test_unknown_session():
    store = SessionStore()
    with pytest.raises(SessionNotFoundError):
        store.get("missing")


def test_second_generation_while_loading_is_refused():
    store = SessionStore()
    session = store.create(ScheduleParameters(grade_counts={1: 1}))
    store.begin_generation(session.session_id)

    with pytest.raises(GenerationInProgressError):
        store.begin_generation(session.session_id)
    with pytest.raises(GenerationInProgressError):
        store.update_parameters(session.session_id, ScheduleParameters())


def test_failed_generation_keeps_previous_timetable():
    store, session_id = get_store_with_timetable()
    before = store.get(session_id).timetable

    store.begin_generation(session_id)
    store.fail_generation(session_id, "Failed to generate timetable: boom")

    session = store.get(session_id)
    assert session.timetable is before
    assert session.message == "Failed to generate timetable: boom"
    assert not session.is_loading


def test_begin_generation_clears_message():
    store, session_id = get_store_with_timetable()
    store.move(session_id, "Grade 1 - A", SLOT_1, SLOT_2)
    assert store.get(session_id).message is not None

    store.begin_generation(session_id)
    assert store.get(session_id).message is None


def test_rejected_move_sets_message_and_accepted_move_clears_it():
    store, session_id = get_store_with_timetable()

    rejected = store.move(session_id, "Grade 1 - A", SLOT_1, SLOT_2)
    assert not rejected.accepted
    assert store.get(session_id).message == rejected.reason

    accepted = store.move(session_id, "Grade 2 - A", SLOT_2, SLOT_3)
    assert accepted.accepted
    session = store.get(session_id)
    assert session.message is None
    assert [c.name for c in session.timetable["Room 1"]["Monday"]["Slot 3"]] == ["Grade 2 - A"]
    assert session.timetable["Room 1"]["Monday"]["Slot 2"] == []


def test_drag_then_drop_returns_to_idle():
    store, session_id = get_store_with_timetable()

    store.start_drag(session_id, "Grade 2 - A", SLOT_2)
    store.start_drag(session_id, "Grade 1 - B", SLOT_1)
    assert store.get(session_id).drag.class_name == "Grade 1 - B"

    result = store.drop(session_id, SLOT_2)
    assert not result.accepted
    assert store.get(session_id).drag is None


def test_drop_without_drag_is_silent():
    store, session_id = get_store_with_timetable()
    result = store.drop(session_id, SLOT_2)
    assert not result.accepted
    assert result.silent


def test_cancel_drag():
    store, session_id = get_store_with_timetable()
    store.start_drag(session_id, "Grade 2 - A", SLOT_2)
    store.cancel_drag(session_id)
    assert store.get(session_id).drag is None
    assert store.drop_targets(session_id) == []


def test_move_without_timetable():
    store = SessionStore()
    session = store.create(ScheduleParameters(grade_counts={1: 1}))
    result = store.move(session.session_id, "Grade 1 - A", SLOT_1, SLOT_2)
    assert not result.accepted
    assert "no timetable" in result.reason


def test_move_of_absent_class_applies_nothing():
    store, session_id = get_store_with_timetable()
    before = store.get(session_id).timetable

    result = store.move(session_id, "Grade 5 - A", SLOT_1, SLOT_2)

    assert not result.accepted
    assert store.get(session_id).timetable is before


def test_delete_session():
    store = SessionStore()
    session = store.create(ScheduleParameters())
    store.delete(session.session_id)
    with pytest.raises(SessionNotFoundError):
        store.get(session.session_id)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
