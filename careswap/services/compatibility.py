"""
CareSwap compatibility engine

Given:
- the nurse who wants to give up a shift (the requester)
- the shift they want to give up
- the nurse pool and the shift pool

We produce:
- up to five swap suggestions, best first
- each suggestion has a 0-100 compatibility score and plain-language reasons
  so a charge nurse can see why someone was suggested

Everything in here is deterministic and side effect free. No I/O, no caching,
no mutation of the pools. Calling it twice with the same inputs gives the same
list in the same order.

An empty result is a normal answer ("nobody fits"), not an error.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from careswap.core.logger import get_logger
from careswap.schemas.roster import ExperienceLevel, Nurse, Shift, SwapSuggestion

logger = get_logger(__name__)


# -------------------------
# Scoring weights
# -------------------------
# Additive points. The sum is capped at MAX_SCORE.
#
# Department and shift-type points are always earned by anyone who passed the
# eligibility filter. They stay as explicit terms so compatibility_score can be
# used on its own (e.g. to score a manually picked nurse) and still mean something.

DEPARTMENT_POINTS = 30
SHIFT_TYPE_POINTS = 25

# Experience: full points at the same level, minus EXPERIENCE_STEP per level of gap.
EXPERIENCE_POINTS = 20
EXPERIENCE_STEP = 5

# Per specialization both nurses share. Not capped on its own, only by MAX_SCORE.
SPECIALIZATION_POINTS = 5

MAX_SCORE = 100
MAX_SUGGESTIONS = 5

EXPERIENCE_ORDER: dict[ExperienceLevel, int] = {
    ExperienceLevel.junior: 0,
    ExperienceLevel.mid: 1,
    ExperienceLevel.senior: 2,
    ExperienceLevel.expert: 3,
}


def shared_specializations(requester: Nurse, candidate: Nurse) -> list[str]:
    """
    Specializations present on both nurses, exact string match.

    Returned in the requester's order with repeats dropped, so the count is
    the size of the set intersection and the reason text reads naturally.
    """
    candidate_specs = set(candidate.specializations)
    shared: list[str] = []
    for spec in requester.specializations:
        if spec in candidate_specs and spec not in shared:
            shared.append(spec)
    return shared


def _experience_points(requester: Nurse, candidate: Nurse) -> int:
    gap = abs(EXPERIENCE_ORDER[requester.experience_level] - EXPERIENCE_ORDER[candidate.experience_level])
    return max(0, EXPERIENCE_POINTS - gap * EXPERIENCE_STEP)


def compatibility_score(requester: Nurse, candidate: Nurse, shift: Shift) -> int:
    """
    Integer 0-100: how good a fit the candidate is to take the requester's shift.

    Terms:
    - same department: +30
    - candidate prefers the shift's type: +25
    - experience: 20 at the same level, 15/10/5/0 as the gap grows
    - +5 per shared specialization
    """
    score = 0

    if requester.department == candidate.department:
        score += DEPARTMENT_POINTS

    if shift.type in candidate.preferred_shifts:
        score += SHIFT_TYPE_POINTS

    score += _experience_points(requester, candidate)
    score += len(shared_specializations(requester, candidate)) * SPECIALIZATION_POINTS

    return min(MAX_SCORE, score)


def compatibility_reasons(requester: Nurse, candidate: Nurse, shift: Shift) -> list[str]:
    """
    Human readable reasons, always in the order department, shift type, specializations.
    Conditions that do not hold add nothing.
    """
    reasons: list[str] = []

    if requester.department == candidate.department:
        reasons.append("Same department")

    if shift.type in candidate.preferred_shifts:
        reasons.append("Prefers this shift type")

    shared = shared_specializations(requester, candidate)
    if shared:
        reasons.append(f"Shared specializations: {', '.join(shared)}")

    return reasons


def is_eligible(requester: Nurse, candidate: Nurse, shift: Shift) -> bool:
    """Pre-scoring filter. Ineligible nurses never show up, not even with a score of 0."""
    return (
        candidate.id != requester.id
        and candidate.department == requester.department
        and shift.type in candidate.preferred_shifts
    )


def find_candidate_shift(
    requester: Nurse,
    candidate: Nurse,
    source_shift: Shift,
    shifts: Iterable[Shift],
) -> Optional[Shift]:
    """
    First shift in pool order that the requester could take in return.

    It must be assigned to the candidate, fall on a different calendar day than
    the source shift, and be of a type the requester prefers.

    The department of the returned shift is not compared with the source shift.
    Pool order is the only tie-break.
    """
    for shift in shifts:
        if candidate.id not in shift.assigned_nurses:
            continue
        if shift.date == source_shift.date:
            continue
        if shift.type not in requester.preferred_shifts:
            continue

        if shift.department != source_shift.department:
            logger.debug(
                "Candidate shift %s (%s) differs from source shift department %s",
                shift.id,
                shift.department,
                source_shift.department,
            )
        return shift

    return None


def suggest_swaps(
    requester: Nurse,
    shift: Shift,
    nurses: Sequence[Nurse],
    shifts: Sequence[Shift],
    limit: int = MAX_SUGGESTIONS,
) -> list[SwapSuggestion]:
    """
    Ranks eligible nurses for taking over the requester's shift.

    Steps:
    1) filter to eligible candidates (not the requester, same department,
       prefers this shift type)
    2) score and explain each one, attach the first shift they could give back
    3) sort by score, highest first. The sort is stable so equal scores keep
       the order the nurses appear in the pool
    4) keep the top `limit`
    """
    eligible = [n for n in nurses if is_eligible(requester, n, shift)]

    suggestions = [
        SwapSuggestion(
            nurse=candidate,
            shift=find_candidate_shift(requester, candidate, shift, shifts),
            compatibility=compatibility_score(requester, candidate, shift),
            reasons=compatibility_reasons(requester, candidate, shift),
        )
        for candidate in eligible
    ]

    suggestions.sort(key=lambda s: -s.compatibility)

    logger.debug(
        "Swap suggestions for nurse %s on shift %s: %d of %d nurses eligible",
        requester.id,
        shift.id,
        len(eligible),
        len(nurses),
    )
    return suggestions[:limit]
