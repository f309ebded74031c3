"""Assessment models: verification questions, transcripts and results (Pydantic only)."""

from datetime import datetime

from pydantic import Field

from .base import HirePathBaseModel, IdentifiedSchema, TimestampSchema, utc_now
from .enums import MessageRole


class VerificationQuestion(HirePathBaseModel):
    """One skill-verification question asked in the skills chat."""

    id: int = Field(..., ge=1, description="1-based position in the question set")
    question: str = Field(..., description="Question text")
    skill_to_verify: str = Field(..., description="Skill under test")
    purpose: str = Field(..., description="Assessment purpose tag")


class TranscriptMessage(HirePathBaseModel):
    """A single message exchanged between interviewer and candidate."""

    role: MessageRole = Field(..., description="Who said it")
    text: str = Field(..., description="Message text")
    timestamp: datetime = Field(default_factory=utc_now, description="When it was said")


class AssessmentResult(HirePathBaseModel):
    """Output of the assessment engine.

    Downstream consumers (ranking, recruiter views) depend on this shape only.
    """

    verified_skills: dict[str, float] = Field(
        default_factory=dict, description="Skill -> confidence in [0, 1]"
    )
    skill_gaps: list[str] = Field(default_factory=list, description="Improvement areas")
    overall_score: float = Field(0.0, ge=0.0, le=10.0, description="Base score before ranking")
    summary: str = Field("", description="Narrative summary")


class ChatSession(IdentifiedSchema, TimestampSchema):
    """Persisted skills chat: the questions asked and every message exchanged."""

    candidate_id: str = Field(..., description="Candidate identifier")
    questions: list[VerificationQuestion] = Field(default_factory=list)
    messages: list[TranscriptMessage] = Field(default_factory=list)
    current_index: int = Field(0, ge=0, description="Index of the question awaiting an answer")
    completed: bool = Field(False, description="All questions answered")

    def candidate_answers(self) -> list[TranscriptMessage]:
        return [m for m in self.messages if m.role == MessageRole.CANDIDATE.value]
