"""HirePath data models for candidates, assessments and interviews."""

from .assessment import AssessmentResult, ChatSession, TranscriptMessage, VerificationQuestion
from .base import (
    AgentContext,
    AgentResult,
    AuthContext,
    HirePathBaseModel,
    IdentifiedSchema,
    TimestampSchema,
    generate_id,
    utc_now,
)
from .candidate_profile import (
    NAME_PLACEHOLDER,
    CandidateProfile,
    ContactInfo,
    EducationEntry,
    ParsedResume,
    WorkExperienceEntry,
)
from .enums import (
    AgentType,
    InterviewRequestStatus,
    InterviewStatus,
    MessageRole,
    RankBand,
    RecordingState,
    UserRole,
)
from .interview import InterviewRecording, InterviewRequest, RecruiterFeedback, TimeSlotDay

__all__ = [
    # Base
    "HirePathBaseModel",
    "IdentifiedSchema",
    "TimestampSchema",
    "AuthContext",
    "AgentContext",
    "AgentResult",
    "generate_id",
    "utc_now",
    # Enums
    "AgentType",
    "InterviewRequestStatus",
    "InterviewStatus",
    "MessageRole",
    "RankBand",
    "RecordingState",
    "UserRole",
    # Candidate
    "NAME_PLACEHOLDER",
    "CandidateProfile",
    "ContactInfo",
    "EducationEntry",
    "ParsedResume",
    "WorkExperienceEntry",
    # Assessment
    "AssessmentResult",
    "ChatSession",
    "TranscriptMessage",
    "VerificationQuestion",
    # Interview
    "InterviewRecording",
    "InterviewRequest",
    "RecruiterFeedback",
    "TimeSlotDay",
]
