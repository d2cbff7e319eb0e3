"""
Assignment consistency rules.

Small pure predicates about a shift and the nurses assigned to it.
The swap workflow and anything that edits assignments go through these.

What is NOT checked here: weekly hour limits, rest periods, consecutive shifts.
Those belong to the backend scheduler. Preferences and department only ever
influence ranking in the compatibility engine, they are not hard gates here.
"""

from __future__ import annotations

from enum import Enum

from careswap.core.errors import DuplicateAssignmentError
from careswap.schemas.roster import Nurse, Shift, SwapStatus


class StaffingStatus(str, Enum):
    understaffed = "understaffed"
    fully_staffed = "fully_staffed"
    overstaffed = "overstaffed"


TERMINAL_STATUSES = frozenset({SwapStatus.approved, SwapStatus.rejected})


def is_understaffed(shift: Shift) -> bool:
    return len(shift.assigned_nurses) < shift.required_staff


def staffing_status(shift: Shift) -> StaffingStatus:
    """Informational only. Enforcing staffing levels is a backend concern."""
    if is_understaffed(shift):
        return StaffingStatus.understaffed
    if len(shift.assigned_nurses) > shift.required_staff:
        return StaffingStatus.overstaffed
    return StaffingStatus.fully_staffed


def can_assign(nurse: Nurse, shift: Shift) -> bool:
    return nurse.id not in shift.assigned_nurses


def with_assignment(shift: Shift, nurse: Nurse) -> Shift:
    """
    Returns a copy of the shift with the nurse added.

    The original shift is left untouched so pools stay usable as snapshots.
    """
    if not can_assign(nurse, shift):
        raise DuplicateAssignmentError(
            f"Nurse '{nurse.id}' is already assigned to shift '{shift.id}'."
        )
    return shift.model_copy(update={"assigned_nurses": [*shift.assigned_nurses, nurse.id]})


def is_terminal(status: SwapStatus) -> bool:
    return status in TERMINAL_STATUSES
