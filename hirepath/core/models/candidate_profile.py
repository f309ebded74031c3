"""Candidate profile models and parsed resume representation (Pydantic only)."""

from datetime import datetime

from pydantic import Field, field_validator

from .base import HirePathBaseModel, IdentifiedSchema, TimestampSchema
from .enums import InterviewStatus

NAME_PLACEHOLDER = "Name not found"


def dedupe_skills(skills: list[str]) -> list[str]:
    """Drop blanks and case-insensitive duplicates, keeping first spelling."""
    seen: set[str] = set()
    result: list[str] = []
    for skill in skills:
        name = skill.strip()
        key = name.lower()
        if not name or key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


class ContactInfo(HirePathBaseModel):
    """Candidate contact information (PII)."""

    name: str = Field(NAME_PLACEHOLDER, description="Full name")
    email: str | None = Field(None, description="Email address")
    phone: str | None = Field(None, description="Phone number")


class WorkExperienceEntry(HirePathBaseModel):
    """Single work experience entry."""

    company: str | None = Field(None, description="Company name")
    position: str | None = Field(None, description="Job title")
    duration: str | None = Field(None, description="Free-text period, e.g. '2020 - Present'")
    responsibilities: list[str] = Field(default_factory=list, description="Responsibilities")


class EducationEntry(HirePathBaseModel):
    """Single education entry."""

    institution: str | None = Field(None, description="Institution name")
    degree: str | None = Field(None, description="Degree")
    graduation_year: str | None = Field(None, description="Graduation year")


class ParsedResume(HirePathBaseModel):
    """Structured resume produced by the parser.

    Every field has a default so a degenerate document still yields a
    well-formed record.
    """

    contact: ContactInfo = Field(default_factory=ContactInfo, description="Contact information")
    skills: list[str] = Field(default_factory=list, description="Listed skills")
    experience: list[WorkExperienceEntry] = Field(default_factory=list, description="Work history")
    education: list[EducationEntry] = Field(default_factory=list, description="Education")

    raw_text: str = Field("", description="Extracted text the parse was based on")
    parse_confidence: float = Field(0.0, ge=0.0, le=1.0, description="Parsing confidence")
    missing_sections: list[str] = Field(default_factory=list, description="Sections not detected")

    @field_validator("skills")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return dedupe_skills(value)


class CandidateProfile(IdentifiedSchema, TimestampSchema):
    """Persisted candidate record."""

    user_id: str = Field(..., description="Linked account id")
    full_name: str = Field("", description="Display name")
    email: str | None = Field(None, description="Contact email")

    # Resume
    resume_ref: str | None = Field(None, description="Blob reference of the uploaded resume")
    parsed_resume: ParsedResume | None = Field(None, description="Structured parse result")
    skills: list[str] = Field(default_factory=list, description="Skill names (deduplicated)")

    # Assessment
    verified_skills: dict[str, float] | None = Field(None, description="Skill -> confidence")
    skill_gaps: list[str] | None = Field(None, description="Improvement areas")
    assessment_summary: str | None = Field(None, description="Narrative summary")
    rank: float | None = Field(None, ge=0.0, le=100.0, description="Rank on the 0-100 scale")

    # Interview lifecycle
    interview_status: InterviewStatus = Field(InterviewStatus.NONE, description="Lifecycle stage")
    interview_completed_at: datetime | None = Field(None, description="Set on completion only")

    @field_validator("skills")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return dedupe_skills(value)

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.parsed_resume and self.parsed_resume.contact.name != NAME_PLACEHOLDER:
            return self.parsed_resume.contact.name
        return ""
