"""Recruiter candidate filtering."""

from hirepath.core.directory import CandidateFilter, collect_skills, filter_candidates
from hirepath.core.models.candidate_profile import CandidateProfile


def _profiles() -> list[CandidateProfile]:
    return [
        CandidateProfile(user_id="u1", full_name="Ada Lovelace", skills=["Python", "SQL"], rank=85.0),
        CandidateProfile(user_id="u2", full_name="Grace Hopper", skills=["COBOL", "python"], rank=None),
        CandidateProfile(user_id="u3", full_name="Alan Turing", skills=["React", "CSS"], rank=92.5),
        CandidateProfile(user_id="u4", full_name="Edsger Dijkstra", skills=["Python"], rank=85.0),
    ]


def _names(profiles):
    return [p.full_name for p in profiles]


def test_no_criteria_sorts_by_rank_with_unranked_last():
    result = filter_candidates(_profiles(), CandidateFilter())
    assert _names(result) == ["Alan Turing", "Ada Lovelace", "Edsger Dijkstra", "Grace Hopper"]


def test_search_matches_name_or_skill_case_insensitively():
    assert _names(filter_candidates(_profiles(), CandidateFilter(search_term="HOPPER"))) == ["Grace Hopper"]
    assert _names(filter_candidates(_profiles(), CandidateFilter(search_term="reac"))) == ["Alan Turing"]


def test_min_rank_excludes_unranked():
    result = filter_candidates(_profiles(), CandidateFilter(min_rank=85.0))
    assert _names(result) == ["Alan Turing", "Ada Lovelace", "Edsger Dijkstra"]
    assert len(filter_candidates(_profiles(), CandidateFilter(min_rank=0))) == 4


def test_skills_require_all_listed():
    result = filter_candidates(_profiles(), CandidateFilter(skills=["python", "sql"]))
    assert _names(result) == ["Ada Lovelace"]
    result = filter_candidates(_profiles(), CandidateFilter(skills=["PYTHON"]))
    assert _names(result) == ["Ada Lovelace", "Edsger Dijkstra", "Grace Hopper"]


def test_criteria_compose_and_filtering_is_idempotent():
    criteria = CandidateFilter(search_term="a", min_rank=80, skills=["Python"])
    once = filter_candidates(_profiles(), criteria)
    twice = filter_candidates(once, criteria)
    assert _names(once) == _names(twice) == ["Ada Lovelace", "Edsger Dijkstra"]


def test_filter_does_not_mutate_input():
    profiles = _profiles()
    before = [p.model_dump() for p in profiles]
    filter_candidates(profiles, CandidateFilter(search_term="x", min_rank=90))
    assert [p.model_dump() for p in profiles] == before


def test_collect_skills_is_case_insensitive():
    assert collect_skills(_profiles()) == ["COBOL", "CSS", "Python", "React", "SQL"]
