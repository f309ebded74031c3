"""Candidate ranking from an assessment result."""

from .models.assessment import AssessmentResult
from .models.enums import RankBand

OVERALL_WEIGHT = 0.6
VERIFICATION_WEIGHT = 0.3
GAP_WEIGHT = 0.1
GAP_PENALTY_PER_ITEM = 0.1

RANK_FLOOR = 80.0
RANK_CEILING = 100.0

# Lower bounds on the 0-100 scale
BAND_CUTOFFS = [
    (80.0, RankBand.EXCELLENT),
    (60.0, RankBand.STRONG),
    (40.0, RankBand.AVERAGE),
]


def calculate_candidate_ranking(assessment: AssessmentResult) -> float:
    """Weighted rank on the 0-100 scale, clamped to [80, 100] and rounded to one decimal.

    The 80 floor is kept as-is, so every assessed candidate clears the
    default invitation threshold.
    """
    confidences = list(assessment.verified_skills.values())
    skill_verification = sum(confidences) / len(confidences) if confidences else 0.0
    gap_penalty = len(assessment.skill_gaps) * GAP_PENALTY_PER_ITEM

    raw = (
        assessment.overall_score * OVERALL_WEIGHT
        + skill_verification * VERIFICATION_WEIGHT
        - gap_penalty * GAP_WEIGHT
    )
    return round(min(max(raw * 10, RANK_FLOOR), RANK_CEILING), 1)


def rank_band(rank: float | None) -> RankBand:
    if rank is None:
        return RankBand.UNRANKED
    for cutoff, band in BAND_CUTOFFS:
        if rank >= cutoff:
            return band
    return RankBand.BELOW_AVERAGE
