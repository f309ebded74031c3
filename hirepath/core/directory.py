"""Candidate directory filtering for recruiter views.

Pure functions over already-loaded profiles: no I/O, no mutation, so the
same criteria always give the same list.
"""

from pydantic import Field

from .models.base import HirePathBaseModel
from .models.candidate_profile import CandidateProfile


class CandidateFilter(HirePathBaseModel):
    """Recruiter filter criteria. Every set criterion must match."""

    search_term: str = Field("", description="Substring of name or any skill")
    min_rank: float = Field(0.0, description="Minimum rank; unranked candidates fail any positive value")
    skills: list[str] = Field(default_factory=list, description="Skills the candidate must all have")


def _matches_search(candidate: CandidateProfile, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    if term in candidate.display_name.lower():
        return True
    return any(term in skill.lower() for skill in candidate.skills)


def _matches_rank(candidate: CandidateProfile, min_rank: float) -> bool:
    if min_rank <= 0:
        return True
    return candidate.rank is not None and candidate.rank >= min_rank


def _matches_skills(candidate: CandidateProfile, required: list[str]) -> bool:
    owned = {skill.lower() for skill in candidate.skills}
    return all(skill.lower() in owned for skill in required)


def filter_candidates(candidates: list[CandidateProfile], criteria: CandidateFilter) -> list[CandidateProfile]:
    """Apply the criteria and sort by rank descending, unranked last.

    The sort is stable, so ties keep their input order.
    """
    selected = [
        c
        for c in candidates
        if _matches_search(c, criteria.search_term)
        and _matches_rank(c, criteria.min_rank)
        and _matches_skills(c, criteria.skills)
    ]
    return sorted(selected, key=lambda c: (c.rank is None, -(c.rank or 0.0)))


def collect_skills(candidates: list[CandidateProfile]) -> list[str]:
    """Distinct skills across candidates, case-insensitively, sorted for display."""
    seen: dict[str, str] = {}
    for candidate in candidates:
        for skill in candidate.skills:
            seen.setdefault(skill.lower(), skill)
    return sorted(seen.values(), key=str.lower)
