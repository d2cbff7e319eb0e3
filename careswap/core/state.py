"""
roster state container

this holds the working set the swap engine reads from:
- nurses
- shifts (with their assigned nurse ids)

there is no module level singleton here. the app creates one RosterContext at
startup and keeps it on app.state; routes get it through the get_context
dependency, and the workflow receives it as a constructor argument.
that keeps tests isolated (new app, new context) and makes it obvious
which data a suggestion run was computed from.

the context is a snapshot for the duration of one suggestion run.
replacing nurses/shifts is done by swapping the lists, not mutating records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request

from careswap.clients.repository import InMemorySwapRequestRepository, SwapRequestRepository
from careswap.core.errors import DataAbsenceError
from careswap.core.logger import get_logger
from careswap.schemas.roster import Nurse, Shift

logger = get_logger(__name__)


@dataclass
class RosterContext:
    """
    The nurse pool and shift pool one workflow operates on.

    Order matters: both lists keep the order they were loaded in, and the
    engine's tie-breaking and candidate-shift search follow that order.
    """
    nurses: list[Nurse] = field(default_factory=list)
    shifts: list[Shift] = field(default_factory=list)

    def find_nurse(self, nurse_id: str) -> Optional[Nurse]:
        return next((n for n in self.nurses if n.id == nurse_id), None)

    def find_shift(self, shift_id: str) -> Optional[Shift]:
        return next((s for s in self.shifts if s.id == shift_id), None)

    def shifts_for(self, nurse_id: str) -> list[Shift]:
        return [s for s in self.shifts if nurse_id in s.assigned_nurses]

    def resolve(self, requester_id: str, shift_id: str) -> tuple[Nurse, Shift]:
        """
        The requester and the shift they give up, both taken from the pools.

        If either is missing there is nothing sensible to suggest, so this
        refuses instead of letting the engine return an empty list.
        """
        requester = self.find_nurse(requester_id)
        shift = self.find_shift(shift_id)
        if requester is None or shift is None:
            logger.warning("Swap data missing: nurse=%s shift=%s not found", requester_id, shift_id)
            raise DataAbsenceError()
        return requester, shift


@dataclass
class AppState:
    """Everything the running service keeps between requests."""
    context: RosterContext
    repository: SwapRequestRepository


def build_state(repository: Optional[SwapRequestRepository] = None) -> AppState:
    return AppState(
        context=RosterContext(),
        repository=repository or InMemorySwapRequestRepository(),
    )


def get_app_state(request: Request) -> AppState:
    return request.app.state.careswap


def get_context(request: Request) -> RosterContext:
    """
    FastAPI dependency returning the roster for this app instance.

    Routes never import a global; they ask for the context.
    """
    return get_app_state(request).context


def get_repository(request: Request) -> SwapRequestRepository:
    return get_app_state(request).repository


def reset_context(request: Request) -> RosterContext:
    """
    Drops nurses and shifts for this app instance.
    Swap requests live in the repository and are left alone.
    """
    state = get_app_state(request)
    state.context = RosterContext()
    return state.context
