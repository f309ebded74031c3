"""Parser Agent - heuristic resume structuring from plain text.

Sections are located with anchor keywords (a header line such as
"Skills" or "Work Experience") and cut at the next known header. No model
call is needed, and degenerate text still yields a well-formed
``ParsedResume``.
"""

import re
from typing import Type

from pydantic import Field

from ..models.base import AgentContext, AgentResult, HirePathBaseModel
from ..models.candidate_profile import (
    NAME_PLACEHOLDER,
    ContactInfo,
    EducationEntry,
    ParsedResume,
    WorkExperienceEntry,
)
from ..models.enums import AgentType
from ...observability.logger import get_logger
from .base import BaseAgent

logger = get_logger(__name__)

SKILLS_ANCHORS = [
    "skills",
    "technical skills",
    "key skills",
    "core competencies",
    "technologies",
    "tech stack",
    "tools and technologies",
    "tools & technologies",
]

EXPERIENCE_ANCHORS = [
    "experience",
    "work experience",
    "professional experience",
    "work history",
    "employment history",
    "employment",
]

EDUCATION_ANCHORS = [
    "education",
    "academic background",
    "qualifications",
]

OTHER_ANCHORS = [
    "summary",
    "professional summary",
    "profile",
    "objective",
    "projects",
    "certifications",
    "achievements",
    "awards",
    "publications",
    "interests",
    "references",
    "contact",
]

ALL_ANCHORS = SKILLS_ANCHORS + EXPERIENCE_ANCHORS + EDUCATION_ANCHORS + OTHER_ANCHORS

SKILL_LEXICON = {
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "react": "React",
    "node.js": "Node.js",
    "node": "Node.js",
    "html": "HTML",
    "css": "CSS",
    "git": "Git",
    "restful apis": "RESTful APIs",
    "graphql": "GraphQL",
    "mongodb": "MongoDB",
    "sql": "SQL",
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "python": "Python",
    "java": "Java",
    "docker": "Docker",
    "kubernetes": "Kubernetes",
    "aws": "AWS",
    "azure": "Azure",
    "gcp": "GCP",
    "angular": "Angular",
    "vue": "Vue",
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "jest": "Jest",
    "agile": "Agile",
}

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
YEAR_RE = re.compile(r"(?:19|20)\d{2}")
DURATION_RE = re.compile(
    r"(?:19|20)\d{2}\s*[-–]\s*(?:(?:19|20)\d{2}|present|current|now)",
    re.IGNORECASE,
)
BULLET_RE = re.compile(r"^\s*[-•*●]\s*")
DEGREE_WORDS = ("bachelor", "master", "phd", "doctor", "diploma", "b.sc", "m.sc", "b.s.", "m.s.", "mba", "degree")
INSTITUTION_WORDS = ("university", "college", "institute", "school", "academy")


class ResumeParseInput(HirePathBaseModel):
    """Input for the Parser Agent."""

    candidate_id: str = Field(..., description="Candidate identifier")
    raw_text: str = Field("", description="Extracted resume text")


def _is_header(line: str, anchors: list[str]) -> bool:
    cleaned = line.strip().rstrip(":").strip().lower()
    return cleaned in anchors


def _split_sections(lines: list[str]) -> dict[str, list[str]]:
    """Map section name to its body lines; text before the first header is ``header``."""
    sections: dict[str, list[str]] = {"header": []}
    current = "header"
    for line in lines:
        if _is_header(line, SKILLS_ANCHORS):
            current = "skills"
        elif _is_header(line, EXPERIENCE_ANCHORS):
            current = "experience"
        elif _is_header(line, EDUCATION_ANCHORS):
            current = "education"
        elif _is_header(line, OTHER_ANCHORS):
            current = "other"
        else:
            sections.setdefault(current, []).append(line)
            continue
        sections.setdefault(current, [])
    return sections


def extract_name(lines: list[str]) -> str:
    """First non-empty line that looks like a name once contact details are stripped."""
    for line in lines:
        cleaned = EMAIL_RE.sub("", line)
        cleaned = PHONE_RE.sub("", cleaned)
        cleaned = re.sub(r"[^A-Za-z\s.'-]", "", cleaned).strip()
        if not cleaned or _is_header(cleaned, ALL_ANCHORS):
            continue
        if 2 <= len(cleaned) <= 60 and len(cleaned.split()) <= 5:
            return cleaned
        return NAME_PLACEHOLDER
    return NAME_PLACEHOLDER


def extract_skills(section: list[str], full_text: str) -> list[str]:
    """Comma/bullet separated items of the skills section, else lexicon hits in the whole text."""
    skills: list[str] = []
    for line in section:
        line = BULLET_RE.sub("", line)
        if ":" in line:
            line = line.split(":", 1)[1]
        for item in re.split(r"[,;|•/]", line):
            item = item.strip(" .")
            if item and len(item) <= 40:
                skills.append(SKILL_LEXICON.get(item.lower(), item))
    if skills:
        return skills

    lowered = full_text.lower()
    return [
        display
        for key, display in SKILL_LEXICON.items()
        if re.search(r"(?<![\w.])" + re.escape(key) + r"(?![\w])", lowered)
    ]


def extract_experience(section: list[str]) -> list[WorkExperienceEntry]:
    """Entries start at a line carrying a date range; bullets become responsibilities."""
    entries: list[WorkExperienceEntry] = []
    pending_title: str | None = None

    for line in section:
        if BULLET_RE.match(line):
            if entries:
                entries[-1].responsibilities = entries[-1].responsibilities + [BULLET_RE.sub("", line).strip()]
            continue

        duration = DURATION_RE.search(line)
        if duration:
            head = line[: duration.start()].strip(" ,|-–(")
            position, company = _split_role(head or pending_title or "")
            entries.append(
                WorkExperienceEntry(
                    company=company,
                    position=position,
                    duration=duration.group(0),
                )
            )
            pending_title = None
        else:
            pending_title = line.strip()

    return entries


def _split_role(head: str) -> tuple[str | None, str | None]:
    for sep in (" at ", " @ ", ",", " | ", " - "):
        if sep in head:
            position, company = head.split(sep, 1)
            return position.strip() or None, company.strip() or None
    return (head.strip() or None), None


def extract_education(section: list[str]) -> list[EducationEntry]:
    entries: list[EducationEntry] = []
    current: EducationEntry | None = None

    for line in section:
        lowered = line.lower()
        year = YEAR_RE.findall(line)
        if any(w in lowered for w in INSTITUTION_WORDS):
            current = EducationEntry(institution=YEAR_RE.sub("", line).strip(" ,-–()"))
            entries.append(current)
        elif any(w in lowered for w in DEGREE_WORDS):
            if current is None or current.degree:
                current = EducationEntry()
                entries.append(current)
            current.degree = YEAR_RE.sub("", line).strip(" ,-–()")
        if year and current is not None and not current.graduation_year:
            current.graduation_year = year[-1]

    return entries


class ResumeParserAgent(BaseAgent[ResumeParseInput, ParsedResume]):
    """Agent that structures resume text into contact, skills, experience and education."""

    @property
    def agent_type(self) -> AgentType:
        return AgentType.PARSER

    @property
    def output_schema(self) -> Type[ParsedResume]:
        return ParsedResume

    async def process(self, input_data: ResumeParseInput, context: AgentContext) -> AgentResult[ParsedResume]:
        parsed = self.parse(input_data.raw_text)
        logger.info(
            "resume_parsed",
            candidate_id=input_data.candidate_id,
            skills=len(parsed.skills),
            experience=len(parsed.experience),
            education=len(parsed.education),
            missing_sections=parsed.missing_sections,
        )
        return AgentResult(success=True, data=parsed, confidence=parsed.parse_confidence)

    def parse(self, raw_text: str) -> ParsedResume:
        """Parse text into a ``ParsedResume``; never raises on odd input."""
        lines = [line.strip() for line in (raw_text or "").splitlines() if line.strip()]
        if not lines:
            return ParsedResume(raw_text=raw_text or "", missing_sections=["contact", "skills", "experience", "education"])

        sections = _split_sections(lines)
        email = EMAIL_RE.search(raw_text)
        phone = PHONE_RE.search("\n".join(sections.get("header", [])))
        contact = ContactInfo(
            name=extract_name(sections.get("header") or lines[:1]),
            email=email.group(0) if email else None,
            phone=phone.group(0).strip() if phone else None,
        )

        parsed = ParsedResume(
            contact=contact,
            skills=extract_skills(sections.get("skills", []), raw_text),
            experience=extract_experience(sections.get("experience", [])),
            education=extract_education(sections.get("education", [])),
            raw_text=raw_text,
        )

        missing = []
        if contact.name == NAME_PLACEHOLDER:
            missing.append("contact")
        for name in ("skills", "experience", "education"):
            if not getattr(parsed, name):
                missing.append(name)
        parsed.missing_sections = missing
        parsed.parse_confidence = round(1.0 - len(missing) / 4, 2)
        return parsed
