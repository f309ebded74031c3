"""Assessment Agents - score a candidate from resume skills and chat transcript.

``StubAssessmentAgent`` reproduces the simulated assessment the product
shipped with. ``LLMAssessmentAgent`` asks a model for the same output shape.
Both return ``AssessmentResult``, which is all ranking and recruiter views
depend on.
"""

import random
from abc import abstractmethod
from typing import Any, Type

from pydantic import Field

from ..models.assessment import AssessmentResult, TranscriptMessage
from ..models.base import AgentContext, AgentResult, HirePathBaseModel
from ..models.enums import AgentType, MessageRole
from ...observability.logger import get_logger
from .base import BaseAgent
from .questions import DEFAULT_SKILLS

logger = get_logger(__name__)

CONFIDENCE_RANGE = (0.80, 0.98)
OVERALL_SCORE_RANGE = (8.5, 10.0)

SKILL_GAP_CATALOG = [
    "Docker containerization experience",
    "Cloud deployment (AWS/Azure)",
    "Testing frameworks (Jest/Mocha)",
]

STUB_SUMMARY = (
    "The candidate demonstrates strong frontend development skills, particularly in React and "
    "JavaScript. They have good experience with modern web development practices and some backend "
    "exposure. Areas for improvement include containerization technologies, cloud services, and "
    "automated testing frameworks."
)


class AssessmentRequest(HirePathBaseModel):
    """Input for the assessment agents."""

    candidate_id: str = Field(..., description="Candidate identifier")
    skills: list[str] = Field(default_factory=list, description="Candidate skill list")
    transcript: list[TranscriptMessage] = Field(default_factory=list, description="Finished skills chat")

    def skills_to_verify(self) -> list[str]:
        return list(self.skills) or list(DEFAULT_SKILLS)


class AssessmentAgent(BaseAgent[AssessmentRequest, AssessmentResult]):
    """Contract shared by every assessment engine."""

    @property
    def agent_type(self) -> AgentType:
        return AgentType.ASSESSMENT

    @property
    def output_schema(self) -> Type[AssessmentResult]:
        return AssessmentResult

    @abstractmethod
    async def assess(self, input_data: AssessmentRequest, context: AgentContext) -> AssessmentResult:
        """Produce the assessment for one candidate."""

    async def process(self, input_data: AssessmentRequest, context: AgentContext) -> AgentResult[AssessmentResult]:
        result = await self.assess(input_data, context)
        logger.info(
            "assessment_produced",
            candidate_id=input_data.candidate_id,
            engine=self.__class__.__name__,
            skills=len(result.verified_skills),
            gaps=len(result.skill_gaps),
            overall_score=result.overall_score,
        )
        return AgentResult(success=True, data=result, confidence=1.0)

    async def validate_output(self, output_data: AssessmentResult, context: AgentContext) -> bool:
        expected = context.metadata.get("skills") or []
        return all(skill in output_data.verified_skills for skill in expected)


class StubAssessmentAgent(AssessmentAgent):
    """Randomized stand-in for a real scoring model.

    Every skill gets a confidence in ``CONFIDENCE_RANGE`` (two decimals),
    the gap list is the fixed catalog, and the overall score falls in
    ``OVERALL_SCORE_RANGE`` (one decimal).
    """

    def __init__(self, rng: random.Random | None = None):
        super().__init__()
        self.rng = rng or random.Random()

    async def assess(self, input_data: AssessmentRequest, context: AgentContext) -> AssessmentResult:
        low, high = CONFIDENCE_RANGE
        verified = {skill: round(self.rng.uniform(low, high), 2) for skill in input_data.skills_to_verify()}
        score_low, score_high = OVERALL_SCORE_RANGE
        return AssessmentResult(
            verified_skills=verified,
            skill_gaps=list(SKILL_GAP_CATALOG),
            overall_score=round(self.rng.uniform(score_low, score_high), 1),
            summary=STUB_SUMMARY,
        )


class LLMAssessmentAgent(AssessmentAgent):
    """Assessment from transcript analysis by an OpenAI model."""

    async def assess(self, input_data: AssessmentRequest, context: AgentContext) -> AssessmentResult:
        skills = input_data.skills_to_verify()
        output, metadata = await self._call_response_api(self._build_prompt(input_data, skills), context)
        logger.info("assessment_model_usage", candidate_id=input_data.candidate_id, **metadata)
        return self._normalize(output, skills)

    def _build_prompt(self, input_data: AssessmentRequest, skills: list[str]) -> str:
        transcript = "\n".join(
            f"{'Candidate' if m.role == MessageRole.CANDIDATE.value else 'Interviewer'}: {m.text}"
            for m in input_data.transcript
        )
        return f"""Assess this candidate's skills from their skills-verification chat.

SKILLS CLAIMED ON RESUME:
{", ".join(skills)}

CHAT TRANSCRIPT:
{transcript or "(no answers given)"}

Return:
- verified_skills: every claimed skill mapped to a confidence between 0 and 1
- skill_gaps: up to five short improvement areas
- overall_score: a number between 0 and 10
- summary: two or three sentences for a recruiter"""

    @staticmethod
    def _normalize(output: AssessmentResult, skills: list[str]) -> AssessmentResult:
        """Keep the model's answer inside the shape downstream code relies on."""
        verified: dict[str, float] = {}
        lowered = {k.lower(): v for k, v in output.verified_skills.items()}
        for skill in skills:
            value = output.verified_skills.get(skill, lowered.get(skill.lower(), 0.0))
            verified[skill] = round(min(max(float(value), 0.0), 1.0), 2)
        return AssessmentResult(
            verified_skills=verified,
            skill_gaps=[gap for gap in output.skill_gaps if gap][:5],
            overall_score=round(min(max(output.overall_score, 0.0), 10.0), 1),
            summary=output.summary,
        )


def get_assessment_agent(config: dict[str, Any], rng: random.Random | None = None) -> AssessmentAgent:
    """Build the engine named by ``assessment.engine`` (``stub`` or ``openai``)."""
    section = config.get("assessment", {})
    engine = section.get("engine", "stub")
    if engine == "openai":
        return LLMAssessmentAgent()
    if engine != "stub":
        raise ValueError(f"Unknown assessment engine: {engine}")
    if rng is None and section.get("seed") is not None:
        rng = random.Random(section["seed"])
    return StubAssessmentAgent(rng=rng)
