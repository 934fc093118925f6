import logging

from fastapi import APIRouter, HTTPException, Response, status

from . import tracker
from .registry import tracker_registry
from .schemas import EventBatchResult, IntegrityFlags, TelemetryEventBatch, TelemetryReport
from .service import apply_events

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrity", tags=["Integrity"])

_NOT_FOUND = "Telemetry session not found"


@router.post("/attempts/{attempt_id}/events", response_model=EventBatchResult)
def post_events(attempt_id: str, batch: TelemetryEventBatch):
    """Apply a batch of focus/blur/paste/keydown/visibility events in order."""
    tracker_registry.cleanup_expired()
    with tracker_registry.locked(attempt_id, create=True) as session:
        accepted = apply_events(session, batch.events)
        result = EventBatchResult(
            accepted=accepted,
            focused_question_id=session.focused_question_id,
            dropped_events=session.dropped_event_count,
        )
    logger.debug("Applied %d telemetry events", accepted, extra={"attempt_id": attempt_id})
    return result


@router.get("/attempts/{attempt_id}/report", response_model=TelemetryReport)
def get_report(attempt_id: str):
    with tracker_registry.locked(attempt_id) as session:
        if session is None:
            raise HTTPException(status_code=404, detail=_NOT_FOUND)
        return tracker.get_all_question_telemetry(session)


@router.get("/attempts/{attempt_id}/flags", response_model=IntegrityFlags)
def get_flags(attempt_id: str):
    with tracker_registry.locked(attempt_id) as session:
        if session is None:
            raise HTTPException(status_code=404, detail=_NOT_FOUND)
        return tracker.summarize_integrity_flags(session)


@router.post("/attempts/{attempt_id}/reset", response_model=TelemetryReport)
def reset_attempt(attempt_id: str):
    """Start a fresh attempt on the same key and return the (empty) report."""
    with tracker_registry.locked(attempt_id) as session:
        if session is None:
            raise HTTPException(status_code=404, detail=_NOT_FOUND)
        tracker.reset_tracking(session)
        return tracker.get_all_question_telemetry(session)


@router.delete("/attempts/{attempt_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_attempt(attempt_id: str):
    if not tracker_registry.discard(attempt_id):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
