"""Enumeration types for HirePath models."""

from enum import Enum


class UserRole(str, Enum):
    """Account roles supplied by the identity provider."""

    CANDIDATE = "candidate"
    RECRUITER = "recruiter"


class InterviewStatus(str, Enum):
    """Candidate interview lifecycle stage."""

    NONE = "none"
    INVITED = "invited"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class InterviewRequestStatus(str, Enum):
    """Status of an interview request record."""

    PENDING = "pending"
    SCHEDULED = "scheduled"


class RecordingState(str, Enum):
    """Video recording session states."""

    CAPTURING = "capturing"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


class MessageRole(str, Enum):
    """Speaker of a transcript message."""

    CANDIDATE = "candidate"
    INTERVIEWER = "interviewer"


class AgentType(str, Enum):
    """Agent type identifiers."""

    EXTRACTION = "extraction"
    PARSER = "parser"
    QUESTIONS = "questions"
    ASSESSMENT = "assessment"


class RankBand(str, Enum):
    """Recruiter-facing label for a rank."""

    EXCELLENT = "excellent"
    STRONG = "strong"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    UNRANKED = "unranked"
