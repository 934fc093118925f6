"""In-memory state for one tracked assignment attempt.

Nothing here is persisted; a fresh process always starts with an empty
session. The state is mutated only through the functions in ``tracker``.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional

from ...platform.config import settings

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


@dataclass
class QuestionRecord:
    """Raw counters and derived metrics for a single question."""

    raw_started_at: int
    keystroke_count: int = 0
    pasted: bool = False
    paste_count: int = 0
    tab_switch_count: int = 0
    last_keystroke_at: Optional[int] = None
    # Derived by metrics.finalize_question
    time_on_question_ms: int = 0
    typing_speed_wpm: int = 0
    finalized: bool = False


@dataclass
class TrackingSession:
    """Session-level counters plus the per-question records of one attempt."""

    clock: Clock = wall_clock_ms
    paste_threshold: int = field(default_factory=lambda: settings.INTEGRITY_PASTE_THRESHOLD_CHARS)
    blur_clears_any_focus: bool = field(default_factory=lambda: settings.INTEGRITY_BLUR_CLEARS_ANY_FOCUS)
    started_at: int = -1
    global_tab_switch_count: int = 0
    focused_question_id: Optional[str] = None
    questions: Dict[str, QuestionRecord] = field(default_factory=dict)
    dropped_event_count: int = 0
    # Server clock minus client clock, once the browser supplies event times.
    clock_offset_ms: Optional[int] = None
    pinned_at: Optional[int] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.started_at < 0:
            self.started_at = self.clock()

    def now(self) -> int:
        if self.pinned_at is not None:
            return self.pinned_at
        return self.clock() - (self.clock_offset_ms or 0)

    def adopt_client_clock(self, offset_ms: int) -> None:
        """Switch session time to the client's clock, re-expressing ``started_at`` in it."""
        if self.clock_offset_ms is None:
            self.started_at -= offset_ms
        self.clock_offset_ms = offset_ms

    @contextmanager
    def pinned_time(self, at_ms: Optional[int]) -> Iterator[None]:
        """Make ``now()`` return ``at_ms`` for the duration of the block."""
        if at_ms is None:
            yield
            return
        self.pinned_at = at_ms
        try:
            yield
        finally:
            self.pinned_at = None
