"""
state routes

these endpoints let us:
- load the nurse pool and shift pool once
- ask for swap suggestions by id instead of resending everything
- submit swap requests and (standing in for the backend) review them

the roster lives on app.state and comes in through the get_context dependency.
swap requests live in the repository (in-memory, or the REST backend when
backend_url is configured).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from careswap.clients.repository import SwapRequestRepository
from careswap.core.state import RosterContext, get_context, get_repository, reset_context
from careswap.schemas.roster import (
    ApiModel,
    Nurse,
    ReviewDecision,
    Shift,
    StaffingReport,
    SuggestionResponse,
    SwapRequest,
    SwapStatus,
    SwapSubmission,
)
from careswap.services.rules import is_understaffed, staffing_status
from careswap.services.swap_workflow import SwapWorkflow, filter_swap_requests

router = APIRouter(prefix="/state")


class StateResponse(ApiModel):
    """
    What we return when someone asks for current state.
    Keeping it explicit makes /docs easier to understand.
    """
    nurses: list[Nurse]
    shifts: list[Shift]
    updated_at: str


@router.get("", response_model=StateResponse)
def get_state(ctx: RosterContext = Depends(get_context)) -> StateResponse:
    """
    Returns the current in-memory roster.
    If a suggestion looks wrong, check /state first.
    """
    return StateResponse(
        nurses=ctx.nurses,
        shifts=ctx.shifts,
        updated_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.post("/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset_state(request: Request) -> None:
    """Clears nurses and shifts. Swap requests are kept by the repository."""
    reset_context(request)


@router.post("/nurses", response_model=list[Nurse])
def set_nurses(nurses: list[Nurse], ctx: RosterContext = Depends(get_context)) -> list[Nurse]:
    """
    Replaces the nurse pool.

    Shift assignments pointing at nurses that are no longer in the pool are
    dropped so the roster stays consistent.
    """
    ids = [n.id for n in nurses]
    if len(ids) != len(set(ids)):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Nurse IDs must be unique.",
        )

    known = set(ids)
    ctx.nurses = nurses
    ctx.shifts = [
        s.model_copy(update={"assigned_nurses": [n for n in s.assigned_nurses if n in known]})
        for s in ctx.shifts
    ]
    return nurses


@router.post("/shifts", response_model=list[Shift])
def set_shifts(shifts: list[Shift], ctx: RosterContext = Depends(get_context)) -> list[Shift]:
    """Replaces the shift pool. Every assigned nurse must already be loaded."""
    ids = [s.id for s in shifts]
    if len(ids) != len(set(ids)):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Shift IDs must be unique.",
        )

    known = {n.id for n in ctx.nurses}
    for shift in shifts:
        unknown = [n for n in shift.assigned_nurses if n not in known]
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Shift '{shift.id}' references unknown nurses: {', '.join(unknown)}. Add them first via POST /state/nurses.",
            )

    ctx.shifts = shifts
    return shifts


@router.get("/shifts/understaffed", response_model=list[StaffingReport])
def understaffed_shifts(ctx: RosterContext = Depends(get_context)) -> list[StaffingReport]:
    return [
        StaffingReport(
            shift=s,
            assigned=len(s.assigned_nurses),
            required=s.required_staff,
            status=staffing_status(s).value,
        )
        for s in ctx.shifts
        if is_understaffed(s)
    ]


@router.get("/suggestions", response_model=SuggestionResponse)
def state_suggestions(
    nurse_id: str,
    shift_id: str,
    ctx: RosterContext = Depends(get_context),
    repository: SwapRequestRepository = Depends(get_repository),
) -> SuggestionResponse:
    """
    Suggestions for the nurse giving up the shift, computed from the loaded roster.
    404 when either id is unknown.
    """
    workflow = SwapWorkflow(ctx, repository)
    workflow.start(nurse_id, shift_id)
    return SuggestionResponse(
        requester_id=nurse_id,
        shift_id=shift_id,
        suggestions=workflow.suggestions,
    )


@router.post("/swap-requests", response_model=SwapRequest, status_code=status.HTTP_201_CREATED)
async def submit_swap_request(
    submission: SwapSubmission,
    ctx: RosterContext = Depends(get_context),
    repository: SwapRequestRepository = Depends(get_repository),
) -> SwapRequest:
    """
    Runs the draft -> pending step in one go.

    Errors:
    - 404 unknown nurse or shift
    - 422 reason too short, no target, or swapping with yourself
    - 502 backend failed (retryable, resend the same idempotencyKey),
      or backend reported a conflict (retryable false)
    """
    workflow = SwapWorkflow(ctx, repository)
    draft = workflow.start(submission.requester_id, submission.shift_id)
    if submission.idempotency_key:
        draft.idempotency_key = submission.idempotency_key

    suggestion = None
    if submission.auto_matched:
        suggestion = next(
            (s for s in workflow.suggestions if s.nurse.id == submission.target_nurse_id),
            None,
        )

    if suggestion is not None:
        workflow.select_suggestion(suggestion)
        if submission.target_shift_id:
            draft.target_shift_id = submission.target_shift_id
    else:
        workflow.select_target(submission.target_nurse_id, submission.target_shift_id)

    workflow.set_reason(submission.reason)
    return await workflow.submit()


@router.get("/swap-requests", response_model=list[SwapRequest])
async def list_swap_requests(
    status_filter: Optional[SwapStatus] = Query(default=None, alias="status"),
    department: Optional[str] = None,
    requester: Optional[str] = None,
    ctx: RosterContext = Depends(get_context),
    repository: SwapRequestRepository = Depends(get_repository),
) -> list[SwapRequest]:
    requests = await repository.list_requests(status_filter)
    return filter_swap_requests(
        requests,
        ctx.nurses,
        status=status_filter,
        department=department,
        requester=requester,
    )


@router.put("/swap-requests/{request_id}/approve", response_model=SwapRequest)
async def approve_swap_request(
    request_id: str,
    decision: Optional[ReviewDecision] = Body(default=None),
    repository: SwapRequestRepository = Depends(get_repository),
) -> SwapRequest:
    """
    Reviewer action. Belongs to the backend; exposed here so the in-memory
    mode can be driven end to end. 409 if the request was already reviewed.
    """
    decision = decision or ReviewDecision()
    return await repository.approve(request_id, decision.reviewer_id, decision.notes)


@router.put("/swap-requests/{request_id}/reject", response_model=SwapRequest)
async def reject_swap_request(
    request_id: str,
    decision: Optional[ReviewDecision] = Body(default=None),
    repository: SwapRequestRepository = Depends(get_repository),
) -> SwapRequest:
    decision = decision or ReviewDecision()
    return await repository.reject(request_id, decision.reviewer_id, decision.notes)
