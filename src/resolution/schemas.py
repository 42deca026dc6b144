"""Resolution schemas.

Defines the per-recording input bundle, the partial output of each
resolution stage, and the final merged result.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN = "Unknown"


def is_known(name: str | None) -> bool:
    """True when a coach/student value holds a real name."""
    return bool(name) and name != UNKNOWN


class SourceTag(str, Enum):
    """Which resolution stage produced a value."""

    PATTERN = "pattern"
    HOST_EMAIL = "host_email"
    PARTICIPANTS = "participants"
    TRANSCRIPT = "transcript"
    CHAT = "chat"
    FOLDER = "folder"
    FALLBACK = "fallback"


class SessionType(str, Enum):
    """Recording category.

    The classifier emits the first four; ADMIN is accepted from callers
    and named like MISC.
    """

    COACHING = "Coaching"
    GAMEPLAN = "GamePlan"
    SAT = "SAT"
    MISC = "MISC"
    ADMIN = "Admin"


class Participant(BaseModel):
    """One attendee from the meeting provider's participant list."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Display name")
    email: str | None = Field(default=None, description="Email if reported")

    @field_validator("name", mode="before")
    @classmethod
    def none_name_to_empty(cls, v):
        return "" if v is None else v


class ExtractionContext(BaseModel):
    """Everything known about one recording before resolution.

    Built fresh per recording and never mutated by the engine.
    """

    model_config = ConfigDict(frozen=True)

    topic: str = Field(default="", description="Meeting topic as scheduled")
    host_email: str | None = Field(default=None, description="Host account email")
    participants: tuple[Participant, ...] = Field(
        default=(), description="Attendees in join order"
    )
    transcript_text: str | None = Field(
        default=None, description="Transcript text (plain or WEBVTT)"
    )
    chat_text: str | None = Field(default=None, description="In-meeting chat log")
    folder_path: tuple[str, ...] = Field(
        default=(), description="Folder names, root to leaf"
    )
    duration_seconds: float | None = Field(
        default=None, description="Recording length in seconds"
    )
    timestamp: str | None = Field(default=None, description="Start time (ISO)")

    # Only used when building the identifier
    meeting_id: str | None = Field(default=None, description="Provider meeting ID")
    uuid: str | None = Field(default=None, description="Provider recording UUID")
    data_source: str | None = Field(
        default=None, description="Where the recording came from (api, drive, ...)"
    )

    @field_validator("topic", mode="before")
    @classmethod
    def none_topic_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("participants", mode="before")
    @classmethod
    def coerce_participants(cls, v):
        """Accept None, plain name strings, or dicts."""
        if v is None:
            return ()
        return tuple(Participant(name=p) if isinstance(p, str) else p for p in v)

    @field_validator("folder_path", mode="before")
    @classmethod
    def coerce_folder_path(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(part for part in v.split("/") if part)
        return tuple(part for part in v if part)

    @field_validator("timestamp", mode="before")
    @classmethod
    def timestamp_to_iso(cls, v):
        if isinstance(v, (datetime, date)):
            return v.isoformat()
        return v

    @field_validator("meeting_id", mode="before")
    @classmethod
    def meeting_id_to_str(cls, v):
        if isinstance(v, int):
            return str(v)
        return v


class PartialResolution(BaseModel):
    """What one stage found, with a confidence per field (0-100)."""

    model_config = ConfigDict(frozen=True)

    source_tag: SourceTag
    coach: str = UNKNOWN
    student: str = UNKNOWN
    week: int | str | None = None
    session_type_hint: SessionType | None = None
    coach_confidence: int = Field(default=0, ge=0, le=100)
    student_confidence: int = Field(default=0, ge=0, le=100)
    week_confidence: int = Field(default=0, ge=0, le=100)

    @property
    def is_empty(self) -> bool:
        return (
            not is_known(self.coach)
            and not is_known(self.student)
            and self.week is None
            and self.session_type_hint is None
        )


class FieldConfidence(BaseModel):
    """Per-field confidence of a final result (0-100)."""

    model_config = ConfigDict(frozen=True)

    coach: int = Field(default=0, ge=0, le=100)
    student: int = Field(default=0, ge=0, le=100)
    week: int = Field(default=0, ge=0, le=100)
    session_type: int = Field(default=0, ge=0, le=100)


class ExtractionResult(BaseModel):
    """Merged outcome of the resolution cascade for one recording."""

    model_config = ConfigDict(frozen=True)

    coach: str = Field(default=UNKNOWN, description="Canonical coach name")
    student: str = Field(default=UNKNOWN, description="Canonical student name")
    week: int | str | None = Field(default=None, description="Week number or tag")
    session_type: SessionType = Field(default=SessionType.MISC)
    confidence: FieldConfidence = Field(default_factory=FieldConfidence)
    score: int = Field(default=0, ge=0, le=100, description="Overall confidence")
    method_trail: tuple[SourceTag, ...] = Field(
        default=(), description="Stages consulted, in order"
    )
    resolved_by: SourceTag = Field(
        default=SourceTag.FALLBACK,
        description="First stage that supplied the coach or student",
    )
    requires_review: bool = Field(
        default=True, description="True if score is below the review threshold"
    )

    @property
    def coach_resolved(self) -> bool:
        return is_known(self.coach)

    @property
    def student_resolved(self) -> bool:
        return is_known(self.student)

    @property
    def is_resolved(self) -> bool:
        """Both coach and student are known."""
        return self.coach_resolved and self.student_resolved
