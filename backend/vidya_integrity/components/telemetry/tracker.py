"""
Integrity tracker -- lifecycle control, event attribution and reporting.

Every function takes the ``TrackingSession`` it acts on, so independent
attempts never share state. None of them raise: empty or unknown question
ids are no-ops and ambient events that cannot be attributed to a question
are dropped (and counted in ``session.dropped_event_count``). Telemetry must
never block a student's submission.

Ambient events (paste, keystroke, visibility) are attributed to the explicit
question id when one is given, otherwise to the question most recently
started. Only one question is focused at a time.
"""

import logging
from typing import Any, Optional

from .metrics import finalize_question, ms_to_seconds
from .models import QuestionRecord, TrackingSession
from .schemas import IntegrityFlags, QuestionTelemetry, SubmissionLevel, TelemetryReport

logger = logging.getLogger(__name__)


def normalize_question_id(question_id: Any) -> Optional[str]:
    """Coerce a question id to a non-empty string, or None when blank."""
    if question_id is None:
        return None
    cleaned = str(question_id).strip()
    return cleaned or None


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def start_question_tracking(session: TrackingSession, question_id: Any) -> None:
    """Mark ``question_id`` as focused, creating its record on first focus.

    Refocusing an existing question keeps its first-focus start time and
    counters, so time on question is always measured from the first visit.
    """
    qid = normalize_question_id(question_id)
    if qid is None:
        return
    session.focused_question_id = qid
    if qid not in session.questions:
        session.questions[qid] = QuestionRecord(raw_started_at=session.now())


def stop_question_tracking(session: TrackingSession, question_id: Any) -> None:
    """Finalize ``question_id`` and release focus."""
    qid = normalize_question_id(question_id)
    if qid is None:
        return
    record = session.questions.get(qid)
    if record is None:
        return
    finalize_question(record, session.now())

    focused = session.focused_question_id
    if focused == qid:
        session.focused_question_id = None
        return
    if focused is not None:
        logger.warning(
            "Blur for question=%s while question=%s is focused (clear_focus=%s)",
            qid,
            focused,
            session.blur_clears_any_focus,
        )
        if session.blur_clears_any_focus:
            session.focused_question_id = None


# ---------------------------------------------------------------------------
# Attribution
# ---------------------------------------------------------------------------

def _drop(session: TrackingSession, kind: str, question_id: Optional[str]) -> None:
    session.dropped_event_count += 1
    logger.debug("Dropped %s event (question_id=%s, no tracked target)", kind, question_id)


def resolve_target(session: TrackingSession, question_id: Any = None) -> Optional[QuestionRecord]:
    """Record an ambient event belongs to: explicit id first, then the focused question."""
    qid = normalize_question_id(question_id)
    if qid is None:
        qid = session.focused_question_id
    if qid is None:
        return None
    return session.questions.get(qid)


def record_paste(session: TrackingSession, paste_length: int, question_id: Any = None) -> None:
    """Count a paste of ``paste_length`` characters if it is significant."""
    record = resolve_target(session, question_id)
    if record is None:
        _drop(session, "paste", normalize_question_id(question_id))
        return
    if paste_length > session.paste_threshold:
        record.pasted = True
        record.paste_count += 1


def handle_paste(session: TrackingSession, pasted_text: Optional[str], question_id: Any = None) -> None:
    record_paste(session, len(pasted_text or ""), question_id)


def handle_key_down(session: TrackingSession, question_id: Any = None) -> None:
    """Count one keystroke; every key counts, control keys included."""
    record = resolve_target(session, question_id)
    if record is None:
        _drop(session, "keydown", normalize_question_id(question_id))
        return
    record.keystroke_count += 1
    record.last_keystroke_at = session.now()


def handle_visibility_change(session: TrackingSession, hidden: bool = True) -> None:
    """Count a tab switch against the focused question when the page is hidden."""
    if not hidden:
        return
    focused = session.focused_question_id
    record = session.questions.get(focused) if focused is not None else None
    if record is None:
        _drop(session, "visibility", None)
        return
    session.global_tab_switch_count += 1
    record.tab_switch_count += 1


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def _question_snapshot(record: QuestionRecord) -> QuestionTelemetry:
    return QuestionTelemetry(
        pasted=record.pasted,
        paste_count=record.paste_count,
        tab_switches=record.tab_switch_count,
        time_on_question=record.time_on_question_ms,
        time_taken_seconds=ms_to_seconds(record.time_on_question_ms),
        typing_speed=record.typing_speed_wpm,
    )


def get_all_question_telemetry(session: TrackingSession) -> TelemetryReport:
    """Build the full report, flushing the focused question without ending it."""
    now = session.now()
    focused = session.focused_question_id
    if focused is not None and focused in session.questions:
        finalize_question(session.questions[focused], now)

    total_ms = now - session.started_at
    return TelemetryReport(
        per_question={qid: _question_snapshot(rec) for qid, rec in session.questions.items()},
        submission_level=SubmissionLevel(
            total_time_ms=total_ms,
            total_time_seconds=ms_to_seconds(total_ms),
            total_tab_switches=session.global_tab_switch_count,
            questions_attempted=len(session.questions),
        ),
    )


def summarize_integrity_flags(session: TrackingSession) -> IntegrityFlags:
    records = session.questions.values()
    return IntegrityFlags(
        pasted=any(r.pasted for r in records),
        paste_count=sum(r.paste_count for r in records),
        tab_switches=session.global_tab_switch_count,
        last_keystroke_at=max(
            (r.last_keystroke_at for r in records if r.last_keystroke_at is not None),
            default=None,
        ),
    )


def reset_tracking(session: TrackingSession) -> None:
    session.questions.clear()
    session.focused_question_id = None
    session.global_tab_switch_count = 0
    session.dropped_event_count = 0
    session.started_at = session.now()
    logger.info("Integrity tracking reset")
