"""Question Generator Agent - skill verification questions for the skills chat."""

from typing import Type

from pydantic import Field

from ..models.assessment import VerificationQuestion
from ..models.base import AgentContext, AgentResult, HirePathBaseModel
from ..models.candidate_profile import ParsedResume
from ..models.enums import AgentType
from .base import BaseAgent

QUESTION_COUNT = 5

DEFAULT_SKILLS = ["JavaScript", "React", "TypeScript", "Node.js", "HTML", "CSS"]

# (question, purpose) per skill; keys are lower-case
SKILL_TEMPLATES: dict[str, tuple[str, str]] = {
    "react": (
        "Can you describe a challenging project where you used React, and how you structured the component hierarchy?",
        "Technical depth assessment",
    ),
    "javascript": (
        "How do you typically handle state management in your frontend applications?",
        "Architecture knowledge",
    ),
    "css": (
        "Can you explain how you've implemented responsive designs in your previous work?",
        "Practical application",
    ),
}

GENERIC_TEMPLATES: list[tuple[str, str]] = [
    ("Can you describe a challenging project where you used {skill}, and what your role was?", "Technical depth assessment"),
    ("How have you applied {skill} to structure a real project, and what trade-offs did you make?", "Architecture knowledge"),
    ("Can you walk me through a concrete problem you solved with {skill}?", "Practical application"),
]

# Always asked last, whatever the resume says
CLOSING_QUESTIONS: list[tuple[str, str, str]] = [
    (
        "Tell me about a time when you had to optimize a web application for performance. What approaches did you take?",
        "Performance Optimization",
        "Problem-solving assessment",
    ),
    (
        "How do you approach learning new technologies in your field?",
        "Adaptability",
        "Learning capacity",
    ),
]

SKILL_QUESTION_COUNT = QUESTION_COUNT - len(CLOSING_QUESTIONS)

# Preferred order when picking which skills to probe
PRIORITY_SKILLS = ["react", "javascript", "css"]


class QuestionRequest(HirePathBaseModel):
    """Input for the Question Generator Agent."""

    candidate_id: str = Field(..., description="Candidate identifier")
    parsed_resume: ParsedResume | None = Field(None, description="Parsed resume, may be missing")


class QuestionSet(HirePathBaseModel):
    """Ordered, fixed-size question list."""

    questions: list[VerificationQuestion] = Field(default_factory=list)
    skills_source: str = Field("resume", description="'resume' or 'default'")


def select_skills(skills: list[str]) -> list[str]:
    """Pick the skills to probe: known templates first, then resume order.

    Pads from ``DEFAULT_SKILLS`` so the result always has
    ``SKILL_QUESTION_COUNT`` entries.
    """
    by_key = {s.lower(): s for s in skills}
    picked = [by_key[key] for key in PRIORITY_SKILLS if key in by_key]
    for skill in skills:
        if skill not in picked:
            picked.append(skill)
    for skill in DEFAULT_SKILLS:
        if len(picked) >= SKILL_QUESTION_COUNT:
            break
        if skill.lower() not in {p.lower() for p in picked}:
            picked.append(skill)
    return picked[:SKILL_QUESTION_COUNT]


def generate_questions(skills: list[str]) -> list[VerificationQuestion]:
    """Deterministic question list of length ``QUESTION_COUNT`` for the given skills."""
    skills = skills or DEFAULT_SKILLS
    questions: list[VerificationQuestion] = []

    for position, skill in enumerate(select_skills(skills)):
        template = SKILL_TEMPLATES.get(skill.lower())
        if template:
            text, purpose = template
        else:
            generic, purpose = GENERIC_TEMPLATES[position % len(GENERIC_TEMPLATES)]
            text = generic.format(skill=skill)
        questions.append(
            VerificationQuestion(id=len(questions) + 1, question=text, skill_to_verify=skill, purpose=purpose)
        )

    for text, skill, purpose in CLOSING_QUESTIONS:
        questions.append(
            VerificationQuestion(id=len(questions) + 1, question=text, skill_to_verify=skill, purpose=purpose)
        )

    return questions


class QuestionGeneratorAgent(BaseAgent[QuestionRequest, QuestionSet]):
    """Agent that turns a parsed resume into skill verification questions."""

    @property
    def agent_type(self) -> AgentType:
        return AgentType.QUESTIONS

    @property
    def output_schema(self) -> Type[QuestionSet]:
        return QuestionSet

    async def process(self, input_data: QuestionRequest, context: AgentContext) -> AgentResult[QuestionSet]:
        skills = input_data.parsed_resume.skills if input_data.parsed_resume else []
        output = QuestionSet(
            questions=generate_questions(skills),
            skills_source="resume" if skills else "default",
        )
        return AgentResult(success=True, data=output, metadata={"skills_source": output.skills_source})

    async def validate_output(self, output_data: QuestionSet, context: AgentContext) -> bool:
        return len(output_data.questions) == QUESTION_COUNT
