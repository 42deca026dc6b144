"""Identifier schemas."""

from pydantic import BaseModel, ConfigDict, Field


class CanonicalIdentifier(BaseModel):
    """Deterministic folder/file name for one recording, plus its parts.

    Format: <prefix>_<coach>_<student>_<week>_<date>[_M:<id>U:<uuid>]
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(description="Joined identifier string")
    session_type_prefix: str = Field(description="Coaching, GamePlan, SAT or MISC")
    coach_token: str = Field(description="Coach name without spaces, or 'unknown'")
    student_token: str = Field(description="Student first name, or 'Unknown'")
    week_token: str = Field(description="Wk07, Wk2B or WkUnknown")
    date_token: str = Field(description="YYYY-MM-DD or 'Unknown'")
    uniqueness_suffix: str | None = Field(
        default=None, description="M:<meetingId>U:<uuid> when both are known"
    )

    def __str__(self) -> str:
        return self.value
