"""Apply batches of browser telemetry events to a tracking session.

Events may carry the browser's timestamp (``at``, epoch ms). Each event is
then applied as of that time, and the session keeps the offset between the
server clock and the browser clock so later reports stay in the browser's
time frame. Events without ``at`` are applied at receive time.
"""

import logging
from typing import Iterable, Optional

from . import tracker
from .models import TrackingSession
from .schemas import TelemetryEvent

logger = logging.getLogger(__name__)


def apply_event(session: TrackingSession, event: TelemetryEvent) -> None:
    kind = event.kind
    with session.pinned_time(event.at):
        if kind == "focus":
            tracker.start_question_tracking(session, event.question_id)
        elif kind == "blur":
            tracker.stop_question_tracking(session, event.question_id)
        elif kind == "paste":
            tracker.record_paste(session, event.paste_length, event.question_id)
        elif kind == "keydown":
            tracker.handle_key_down(session, event.question_id)
        elif kind == "visibility":
            tracker.handle_visibility_change(session, hidden=event.hidden)


def apply_events(session: TrackingSession, events: Iterable[TelemetryEvent]) -> int:
    """Apply ``events`` in order and return how many were processed."""
    received_at = session.clock()
    latest_at: Optional[int] = None
    count = 0
    for event in events:
        if event.at is not None:
            if session.clock_offset_ms is None:
                session.adopt_client_clock(received_at - event.at)
            latest_at = event.at if latest_at is None else max(latest_at, event.at)
        apply_event(session, event)
        count += 1
    if latest_at is not None:
        session.adopt_client_clock(received_at - latest_at)
    return count
