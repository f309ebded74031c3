"""Extraction, parsing and question generation."""

import asyncio

from hirepath.core.agents.extraction import ResumeDocument, ResumeExtractionAgent
from hirepath.core.agents.parser import ResumeParseInput, ResumeParserAgent
from hirepath.core.agents.questions import (
    DEFAULT_SKILLS,
    QUESTION_COUNT,
    QuestionGeneratorAgent,
    QuestionRequest,
    generate_questions,
)
from hirepath.core.models.base import AgentContext
from hirepath.core.models.candidate_profile import NAME_PLACEHOLDER, ParsedResume

RESUME_TEXT = """Jane Smith
jane.smith@example.com | 555-123-4567

Summary
Frontend engineer who likes fast pages.

Skills
JavaScript, React, css, TypeScript, react

Work Experience
Senior Frontend Developer at Tech Solutions Inc. 2020 - Present
- Developed responsive web applications using React and TypeScript
- Improved application performance by 40%
Web Developer, Digital Innovations LLC 2017 - 2020
- Built and maintained client websites

Education
University of Technology
Bachelor of Science in Computer Science 2017
"""


def test_parser_extracts_sections():
    parsed = ResumeParserAgent().parse(RESUME_TEXT)

    assert parsed.contact.name == "Jane Smith"
    assert parsed.contact.email == "jane.smith@example.com"
    assert parsed.contact.phone == "555-123-4567"
    assert parsed.skills == ["JavaScript", "React", "CSS", "TypeScript"]

    assert len(parsed.experience) == 2
    first = parsed.experience[0]
    assert first.position == "Senior Frontend Developer"
    assert first.company == "Tech Solutions Inc."
    assert first.duration == "2020 - Present"
    assert len(first.responsibilities) == 2
    assert parsed.experience[1].company == "Digital Innovations LLC"

    assert parsed.education[0].institution == "University of Technology"
    assert parsed.education[0].degree == "Bachelor of Science in Computer Science"
    assert parsed.education[0].graduation_year == "2017"
    assert parsed.missing_sections == []
    assert parsed.parse_confidence == 1.0


def test_parser_degrades_on_empty_text():
    parsed = ResumeParserAgent().parse("")
    assert parsed.contact.name == NAME_PLACEHOLDER
    assert parsed.skills == []
    assert parsed.experience == []
    assert parsed.education == []
    assert parsed.parse_confidence == 0.0


def test_parser_falls_back_to_lexicon_without_skills_section():
    parsed = ResumeParserAgent().parse("Sam Lee\nBuilt dashboards in Python and Docker on AWS.")
    assert set(parsed.skills) == {"Python", "Docker", "AWS"}
    assert "skills" not in parsed.missing_sections


def test_parser_agent_execute_wraps_result():
    agent = ResumeParserAgent()
    result = asyncio.run(
        agent.execute(ResumeParseInput(candidate_id="c1", raw_text="   \n  "), AgentContext(candidate_id="c1"))
    )
    assert result.success
    assert result.data.contact.name == NAME_PLACEHOLDER


def test_extraction_never_raises_on_garbage_pdf():
    agent = ResumeExtractionAgent()
    result = asyncio.run(
        agent.execute(ResumeDocument(candidate_id="c1", content=b"%PDF-1.4 not really"), AgentContext(candidate_id="c1"))
    )
    assert result.success
    assert result.data.text == ""
    assert result.confidence == 0.0


def test_extraction_decodes_plain_text():
    agent = ResumeExtractionAgent()
    doc = ResumeDocument(candidate_id="c1", content="Zoë Example\nSkills".encode("utf-8"), content_type="text/plain")
    result = asyncio.run(agent.execute(doc, AgentContext(candidate_id="c1")))
    assert result.data.text.startswith("Zoë Example")


def test_question_count_is_fixed():
    for skills in ([], ["Rust"], ["React", "CSS"], [f"skill{i}" for i in range(20)]):
        questions = generate_questions(skills)
        assert len(questions) == QUESTION_COUNT
        assert [q.id for q in questions] == list(range(1, QUESTION_COUNT + 1))
        assert [q.skill_to_verify for q in questions[-2:]] == ["Performance Optimization", "Adaptability"]


def test_empty_skills_use_default_set():
    questions = generate_questions([])
    assert [q.skill_to_verify for q in questions[:3]] == ["React", "JavaScript", "CSS"]
    assert all(q.skill_to_verify in DEFAULT_SKILLS for q in questions[:3])
    assert questions[0].purpose == "Technical depth assessment"


def test_questions_are_deterministic_and_use_resume_skills():
    skills = ["Python", "Django", "React"]
    assert generate_questions(skills) == generate_questions(skills)
    probed = [q.skill_to_verify for q in generate_questions(skills)[:3]]
    assert probed == ["React", "Python", "Django"]


def test_question_agent_without_resume():
    agent = QuestionGeneratorAgent()
    result = asyncio.run(agent.execute(QuestionRequest(candidate_id="c1"), AgentContext(candidate_id="c1")))
    assert result.success
    assert result.data.skills_source == "default"
    assert len(result.data.questions) == QUESTION_COUNT

    parsed = ParsedResume(skills=["Vue"])
    result = asyncio.run(
        agent.execute(QuestionRequest(candidate_id="c1", parsed_resume=parsed), AgentContext(candidate_id="c1"))
    )
    assert result.data.skills_source == "resume"
    assert result.data.questions[0].skill_to_verify == "Vue"
