"""Tests for applying browser event batches."""

from tests.conftest import FakeClock
from vidya_integrity.components.telemetry.models import TrackingSession
from vidya_integrity.components.telemetry.schemas import TelemetryEvent
from vidya_integrity.components.telemetry.service import apply_events
from vidya_integrity.components.telemetry.tracker import (
    get_all_question_telemetry,
    handle_key_down,
    handle_visibility_change,
    record_paste,
    start_question_tracking,
    stop_question_tracking,
    summarize_integrity_flags,
)

CLIENT_T0 = 1_700_000_000_000
SERVER_NOW = 1_800_000_000_000


def _events(*raw):
    return [TelemetryEvent.model_validate(e) for e in raw]


def _session(clock):
    return TrackingSession(clock=clock, paste_threshold=50)


def test_batch_matches_direct_calls():
    direct_clock = FakeClock(start_ms=CLIENT_T0)
    direct = _session(direct_clock)
    start_question_tracking(direct, "Q1")
    direct_clock.advance(1_000)
    handle_key_down(direct)
    direct_clock.advance(1_000)
    handle_key_down(direct)
    direct_clock.advance(3_000)
    record_paste(direct, 120)
    direct_clock.advance(5_000)
    handle_visibility_change(direct)
    direct_clock.advance(50_000)
    stop_question_tracking(direct, "Q1")
    direct_clock.advance(1_000)
    start_question_tracking(direct, "Q2")
    direct_clock.advance(1_000)
    handle_key_down(direct)

    # Server clock is unrelated to the browser's; only event times matter.
    batched = _session(FakeClock(start_ms=SERVER_NOW))
    count = apply_events(
        batched,
        _events(
            {"kind": "focus", "questionId": "Q1", "at": CLIENT_T0},
            {"kind": "keydown", "at": CLIENT_T0 + 1_000},
            {"kind": "keydown", "at": CLIENT_T0 + 2_000},
            {"kind": "paste", "pasteLength": 120, "at": CLIENT_T0 + 5_000},
            {"kind": "visibility", "at": CLIENT_T0 + 10_000},
            {"kind": "blur", "questionId": "Q1", "at": CLIENT_T0 + 60_000},
            {"kind": "focus", "questionId": "Q2", "at": CLIENT_T0 + 61_000},
            {"kind": "keydown", "at": CLIENT_T0 + 62_000},
        ),
    )

    assert count == 8
    assert batched.focused_question_id == "Q2"
    assert get_all_question_telemetry(batched) == get_all_question_telemetry(direct)


def test_timed_batch_reports_elapsed_time_and_speed():
    session = _session(FakeClock(start_ms=SERVER_NOW))
    events = [{"kind": "focus", "questionId": "Q1", "at": CLIENT_T0}]
    events += [{"kind": "keydown", "at": CLIENT_T0 + i * 1_000} for i in range(1, 51)]
    events.append({"kind": "blur", "questionId": "Q1", "at": CLIENT_T0 + 60_000})
    apply_events(session, _events(*events))

    q1 = get_all_question_telemetry(session).per_question["Q1"]
    assert q1.time_on_question == 60_000
    assert q1.time_taken_seconds == 60
    assert q1.typing_speed == 10
    assert summarize_integrity_flags(session).last_keystroke_at == CLIENT_T0 + 50_000


def test_report_after_batch_stays_in_client_time():
    clock = FakeClock(start_ms=SERVER_NOW)
    session = _session(clock)
    apply_events(
        session,
        _events(
            {"kind": "focus", "questionId": "Q1", "at": CLIENT_T0},
            {"kind": "keydown", "at": CLIENT_T0 + 20_000},
        ),
    )
    clock.advance(10_000)

    report = get_all_question_telemetry(session)
    assert report.per_question["Q1"].time_on_question == 30_000
    assert report.submission_level.total_time_ms == 30_000
    assert session.focused_question_id == "Q1"


def test_later_batches_keep_first_visit_start():
    clock = FakeClock(start_ms=SERVER_NOW)
    session = _session(clock)
    apply_events(session, _events({"kind": "focus", "questionId": "Q1", "at": CLIENT_T0}))
    clock.advance(45_000)
    apply_events(session, _events({"kind": "blur", "questionId": "Q1", "at": CLIENT_T0 + 45_000}))
    assert session.questions["Q1"].time_on_question_ms == 45_000


def test_untimed_events_use_receive_time(session, clock):
    apply_events(session, _events({"kind": "focus", "questionId": "Q1"}))
    assert session.questions["Q1"].raw_started_at == clock.now_ms
    assert session.clock_offset_ms is None
    assert session.pinned_at is None


def test_focus_without_question_id_is_noop(session):
    apply_events(session, _events({"kind": "focus"}, {"kind": "blur"}))
    assert session.questions == {}


def test_numeric_question_id_is_tracked(session):
    apply_events(session, _events({"kind": "focus", "questionId": 7}, {"kind": "keydown"}))
    assert session.questions["7"].keystroke_count == 1


def test_visible_event_is_ignored(session):
    apply_events(
        session,
        _events({"kind": "focus", "questionId": "Q1"}, {"kind": "visibility", "hidden": False}),
    )
    assert session.global_tab_switch_count == 0


def test_empty_batch(session):
    assert apply_events(session, []) == 0
