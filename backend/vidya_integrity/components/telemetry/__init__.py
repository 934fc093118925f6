"""
Academic-integrity telemetry.

Convenience imports for the tracker operations and report models.
"""

from .models import QuestionRecord, TrackingSession
from .schemas import IntegrityFlags, QuestionTelemetry, SubmissionLevel, TelemetryReport
from .tracker import (
    get_all_question_telemetry,
    handle_key_down,
    handle_paste,
    handle_visibility_change,
    record_paste,
    reset_tracking,
    start_question_tracking,
    stop_question_tracking,
    summarize_integrity_flags,
)

__all__ = [
    "IntegrityFlags",
    "QuestionRecord",
    "QuestionTelemetry",
    "SubmissionLevel",
    "TelemetryReport",
    "TrackingSession",
    "get_all_question_telemetry",
    "handle_key_down",
    "handle_paste",
    "handle_visibility_change",
    "record_paste",
    "reset_tracking",
    "start_question_tracking",
    "stop_question_tracking",
    "summarize_integrity_flags",
]
