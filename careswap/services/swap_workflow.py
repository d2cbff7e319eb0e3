"""
Swap request workflow.

Drives one swap request from the requester's side:

    Draft  --submit()-->  Pending  --(reviewer, backend only)-->  Approved | Rejected

- Draft lives only in this object while the requester picks a target and writes a reason.
- submit() is the only way to Pending. It validates first, then makes exactly
  one call to the repository. If that call fails, the draft stays a draft with
  every field intact so the requester can simply try again.
- Approving and rejecting is the backend's call. This object can only read the
  outcome back with refresh().

The roster (nurses, shifts) and the repository are handed in. Nothing here
reaches for global state.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from careswap.clients.repository import SwapRequestRepository
from careswap.core.config import settings
from careswap.core.errors import (
    InvalidTransitionError,
    SubmissionError,
    SwapValidationError,
)
from careswap.core.logger import get_logger
from careswap.core.state import RosterContext
from careswap.schemas.roster import (
    Nurse,
    Shift,
    SwapRequest,
    SwapRequestCreate,
    SwapStatus,
    SwapSuggestion,
)
from careswap.services.compatibility import suggest_swaps

logger = get_logger(__name__)


class WorkflowState(str, Enum):
    draft = "Draft"
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


@dataclass
class SwapDraft:
    """
    What the requester has filled in so far.

    The idempotency key is generated once per draft and sent with every
    submit attempt, so a retry after a timeout cannot create a second request.
    """
    requester: Nurse
    shift: Shift
    target_nurse_id: str = ""
    target_shift_id: Optional[str] = None
    reason: str = ""
    auto_matched: bool = False
    idempotency_key: str = field(default_factory=lambda: str(uuid.uuid4()))


class SwapWorkflow:
    def __init__(
        self,
        context: RosterContext,
        repository: SwapRequestRepository,
        min_reason_length: int = settings.min_reason_length,
        max_suggestions: int = settings.max_suggestions,
    ) -> None:
        self.context = context
        self.repository = repository
        self.min_reason_length = min_reason_length
        self.max_suggestions = max_suggestions

        self.draft: Optional[SwapDraft] = None
        self.request: Optional[SwapRequest] = None
        self._suggestions: list[SwapSuggestion] = []

    # -------------------------
    # Draft
    # -------------------------

    def start(self, requester_id: str, shift_id: str) -> SwapDraft:
        """
        Opens a draft for the requester giving up the shift.

        Both must exist in the roster, otherwise DataAbsenceError.
        """
        requester, shift = self.context.resolve(requester_id, shift_id)

        self.draft = SwapDraft(requester=requester, shift=shift)
        self.request = None
        self._suggestions = suggest_swaps(
            requester,
            shift,
            self.context.nurses,
            self.context.shifts,
            limit=self.max_suggestions,
        )
        return self.draft

    @property
    def suggestions(self) -> list[SwapSuggestion]:
        self._require_draft()
        return list(self._suggestions)

    @property
    def state(self) -> WorkflowState:
        if self.request is None:
            return WorkflowState.draft
        return WorkflowState(self.request.status.value)

    def select_suggestion(self, suggestion: SwapSuggestion) -> SwapDraft:
        """Picks a generated suggestion. The request will be flagged as auto-matched."""
        draft = self._require_draft()
        draft.target_nurse_id = suggestion.nurse.id
        draft.target_shift_id = suggestion.shift.id if suggestion.shift else None
        draft.auto_matched = True
        return draft

    def select_target(self, nurse_id: str, target_shift_id: Optional[str] = None) -> SwapDraft:
        """Manual pick from the full nurse list. Clears the auto-matched flag."""
        draft = self._require_draft()
        draft.target_nurse_id = nurse_id
        draft.target_shift_id = target_shift_id or None
        draft.auto_matched = False
        return draft

    def set_reason(self, reason: str) -> SwapDraft:
        draft = self._require_draft()
        draft.reason = reason
        return draft

    def target_shift_options(self) -> list[Shift]:
        """Shifts the chosen target works on other days, for an optional one-for-one swap."""
        draft = self._require_draft()
        if not draft.target_nurse_id:
            return []
        return [
            s
            for s in self.context.shifts_for(draft.target_nurse_id)
            if s.date != draft.shift.date
        ]

    def validate(self) -> None:
        """Raises SwapValidationError with one message per failing field."""
        draft = self._require_draft()
        errors: dict[str, str] = {}

        if not draft.target_nurse_id:
            errors["targetNurseId"] = "Please select a nurse to swap with"
        elif draft.target_nurse_id == draft.requester.id:
            errors["targetNurseId"] = "You cannot swap a shift with yourself"

        if len(draft.reason) < self.min_reason_length:
            errors["reason"] = (
                f"Please provide a detailed reason (minimum {self.min_reason_length} characters)"
            )

        if errors:
            raise SwapValidationError(errors)

    def build_payload(self) -> SwapRequestCreate:
        self.validate()
        draft = self._require_draft()
        return SwapRequestCreate(
            requester_id=draft.requester.id,
            target_id=draft.target_nurse_id,
            shift_id=draft.shift.id,
            target_shift_id=draft.target_shift_id,
            reason=draft.reason,
            status=SwapStatus.pending,
            auto_matched=draft.auto_matched,
            idempotency_key=draft.idempotency_key,
        )

    # -------------------------
    # Submission
    # -------------------------

    async def submit(self) -> SwapRequest:
        """
        Draft -> Pending.

        Validation errors are raised before any network call.
        Repository failures come back as a SubmissionError and the workflow is
        still in Draft afterwards. A conflict (409) is not retryable: sending
        the same payload again gets the same answer.
        """
        if self.state is not WorkflowState.draft:
            raise InvalidTransitionError(f"Swap request is already {self.state.value}.")

        payload = self.build_payload()

        try:
            created = await self.repository.create(payload)
        except SubmissionError:
            logger.warning("Swap request submission failed for nurse %s", payload.requester_id)
            raise
        except InvalidTransitionError as exc:
            logger.warning("Swap request conflicts with backend state for nurse %s: %s", payload.requester_id, exc)
            raise SubmissionError(str(exc), status_code=409, retryable=False) from exc
        except Exception as exc:
            # any collaborator failure is reported as retryable
            logger.warning("Swap request submission rejected for nurse %s: %s", payload.requester_id, exc)
            raise SubmissionError(str(exc) or type(exc).__name__) from exc

        self.request = created
        logger.info(
            "Swap request %s submitted: %s -> %s for shift %s (auto matched: %s)",
            created.id,
            created.requester_id,
            created.target_id,
            created.shift_id,
            created.auto_matched,
        )
        return created

    async def refresh(self) -> SwapRequest:
        """Reads the current status back from the backend (e.g. after a reviewer acted)."""
        if self.request is None:
            raise InvalidTransitionError("Swap request has not been submitted yet.")
        self.request = await self.repository.get(self.request.id)
        return self.request

    def _require_draft(self) -> SwapDraft:
        if self.draft is None:
            raise RuntimeError("SwapWorkflow.start() must be called first")
        return self.draft


def filter_swap_requests(
    requests: Iterable[SwapRequest],
    nurses: Iterable[Nurse],
    status: Optional[SwapStatus] = None,
    department: Optional[str] = None,
    requester: Optional[str] = None,
) -> list[SwapRequest]:
    """
    Narrows a list of swap requests the way the review screen does.

    - status: exact match
    - department: the requester's department
    - requester: case-insensitive substring of the requester's display name
    """
    nurses_by_id = {n.id: n for n in nurses}
    needle = requester.lower() if requester else None

    matched: list[SwapRequest] = []
    for request in requests:
        nurse = nurses_by_id.get(request.requester_id)

        if status is not None and request.status != status:
            continue
        if department and (nurse is None or nurse.department != department):
            continue
        if needle:
            name = nurse.display_name.lower() if nurse else ""
            if needle not in name:
                continue

        matched.append(request)
    return matched
