"""
Metric finalizer -- derived per-question metrics.

Elapsed time always runs from the first focus of a question to "now", so
finalizing the same record again reports cumulative effort rather than the
length of the latest focus interval.
"""

import math

from .models import QuestionRecord

CHARS_PER_WORD = 5
MS_PER_MINUTE = 60_000
MS_PER_SECOND = 1_000


def js_round(value: float) -> int:
    """Round half up, matching JavaScript's Math.round."""
    # value + 0.5 can round up in float arithmetic; the fractional part is exact.
    whole = math.floor(value)
    return int(whole + 1 if value - whole >= 0.5 else whole)


def compute_typing_speed(keystroke_count: int, elapsed_ms: int) -> int:
    """Words per minute, treating every CHARS_PER_WORD keystrokes as one word."""
    if elapsed_ms <= 0:
        return 0
    words = keystroke_count / CHARS_PER_WORD
    minutes = elapsed_ms / MS_PER_MINUTE
    return js_round(words / minutes)


def ms_to_seconds(elapsed_ms: int) -> int:
    return js_round(elapsed_ms / MS_PER_SECOND)


def finalize_question(record: QuestionRecord, now_ms: int) -> QuestionRecord:
    """Compute time on question and typing speed for ``record`` as of ``now_ms``."""
    elapsed = now_ms - record.raw_started_at
    record.time_on_question_ms = elapsed
    record.typing_speed_wpm = compute_typing_speed(record.keystroke_count, elapsed)
    record.finalized = True
    return record
