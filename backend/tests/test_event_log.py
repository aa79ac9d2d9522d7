import pytest

from notes_drive.storage.event_log import Event, EventLog, events_path


def test_events_are_appended_per_user(tmp_path):
    log = EventLog(tmp_path)
    log.emit(Event(event_type="NOTE_CREATED", user_id="userA", note_id="n1"))
    log.emit(Event(event_type="NOTE_DELETED", user_id="userA", note_id="n1"))
    log.emit(Event(event_type="NOTE_CREATED", user_id="userB", note_id="n2", meta={"k": 1}))

    a = log.read("userA")
    assert [e["event_type"] for e in a] == ["NOTE_CREATED", "NOTE_DELETED"]
    assert len({e["event_id"] for e in a}) == 2
    assert log.read("userB")[0]["meta"] == {"k": 1}
    assert events_path(tmp_path, "userA") == tmp_path / "users" / "userA" / "events" / "events.log"


def test_read_without_events_is_empty(tmp_path):
    assert EventLog(tmp_path).read("nobody") == []


def test_invalid_user_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        EventLog(tmp_path).emit(Event(event_type="NOTE_CREATED", user_id="../x"))
