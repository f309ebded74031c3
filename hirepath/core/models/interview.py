"""Interview request, recording and recruiter feedback models (Pydantic only)."""

from pydantic import ConfigDict, Field, field_validator

from .assessment import TranscriptMessage
from .base import HirePathBaseModel, IdentifiedSchema, TimestampSchema
from .enums import InterviewRequestStatus


class TimeSlotDay(HirePathBaseModel):
    """Offered times on one date."""

    date: str = Field(..., description="ISO date, e.g. 2025-05-15")
    slots: list[str] = Field(default_factory=list, description="Ordered time strings")


class InterviewRequest(IdentifiedSchema, TimestampSchema):
    """Invitation to interview, created when a candidate qualifies."""

    candidate_id: str = Field(..., description="Candidate identifier")
    status: InterviewRequestStatus = Field(InterviewRequestStatus.PENDING)
    available_slots: list[TimeSlotDay] = Field(default_factory=list)
    selected_date: str | None = Field(None, description="Set once scheduled")
    selected_time: str | None = Field(None, description="Set once scheduled")
    notification_sent: bool = Field(False, description="Notification channel accepted the invite")

    def offers(self, date: str, time: str) -> bool:
        """True if (date, time) is one of the offered slots."""
        return any(day.date == date and time in day.slots for day in self.available_slots)

    @property
    def is_outstanding(self) -> bool:
        return self.status == InterviewRequestStatus.PENDING.value


class InterviewRecording(IdentifiedSchema, TimestampSchema):
    """Uploaded video interview together with its transcript."""

    candidate_id: str = Field(..., description="Candidate identifier")
    interview_request_id: str | None = Field(None, description="Request the interview belongs to")
    recording_ref: str = Field(..., description="Blob reference of the video")
    transcript: list[TranscriptMessage] = Field(default_factory=list)
    size_bytes: int = Field(0, ge=0)


class RecruiterFeedback(IdentifiedSchema, TimestampSchema):
    """A recruiter's review of a candidate. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    recruiter_id: str = Field(..., description="Reviewing recruiter")
    candidate_id: str = Field(..., description="Reviewed candidate")
    rating: int = Field(..., ge=1, le=5, description="Star rating")
    feedback: str = Field(..., min_length=1, description="Free-text feedback")

    @field_validator("feedback")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("feedback must not be blank")
        return value
