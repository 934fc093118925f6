"""Pydantic models describing the integrity telemetry payloads.

Report models are frozen snapshots. They accept either the snake_case field
names or the camelCase aliases the grading service expects; dump with
``by_alias=True`` to get the wire shape.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class QuestionTelemetry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    pasted: bool = False
    paste_count: int = Field(default=0, alias="pasteCount")
    tab_switches: int = Field(default=0, alias="tabSwitches")
    time_on_question: int = Field(default=0, alias="timeOnQuestion")  # ms
    time_taken_seconds: int = 0
    typing_speed: int = Field(default=0, alias="typingSpeed")  # wpm


class SubmissionLevel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_time_ms: int = Field(default=0, alias="totalTimeMs")
    total_time_seconds: int = Field(default=0, alias="totalTimeSeconds")
    total_tab_switches: int = Field(default=0, alias="totalTabSwitches")
    questions_attempted: int = Field(default=0, alias="questionsAttempted")


class TelemetryReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    per_question: Mapping[str, QuestionTelemetry] = Field(default_factory=dict, alias="perQuestion")
    submission_level: SubmissionLevel = Field(default_factory=SubmissionLevel, alias="submissionLevel")

    @field_validator("per_question", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, QuestionTelemetry]) -> Mapping[str, QuestionTelemetry]:
        return MappingProxyType(dict(value))

    @field_serializer("per_question", mode="wrap")
    def _dump_per_question(self, value: Mapping[str, QuestionTelemetry], handler) -> Dict[str, Any]:
        return handler(dict(value))


class IntegrityFlags(BaseModel):
    """Session-wide running totals, readable at any time without finalizing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    pasted: bool = False
    paste_count: int = Field(default=0, alias="pasteCount")
    tab_switches: int = Field(default=0, alias="tabSwitches")
    last_keystroke_at: Optional[int] = Field(default=None, alias="lastKeystrokeAt")  # epoch ms


# --- Wire events from the browser collaborator ---

EventKind = Literal["focus", "blur", "paste", "keydown", "visibility"]


class TelemetryEvent(BaseModel):
    # Question ids are often numeric in the browser.
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    kind: EventKind
    question_id: Optional[str] = Field(default=None, alias="questionId", max_length=200)
    # Only the length of pasted text is shipped; content never leaves the browser.
    paste_length: int = Field(default=0, alias="pasteLength", ge=0)
    hidden: bool = True
    # Browser time of the event (epoch ms); receive time when omitted.
    at: Optional[int] = Field(default=None, ge=0)


class TelemetryEventBatch(BaseModel):
    events: List[TelemetryEvent] = Field(default_factory=list, max_length=5000)


class EventBatchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    accepted: int
    focused_question_id: Optional[str] = Field(default=None, alias="focusedQuestionId")
    dropped_events: int = Field(default=0, alias="droppedEvents")
