from fastapi import APIRouter

from careswap.core.config import settings
from careswap.core.state import RosterContext
from careswap.schemas.roster import SuggestionRequest, SuggestionResponse
from careswap.services.compatibility import suggest_swaps

router = APIRouter()


@router.post("/swap/suggestions", response_model=SuggestionResponse, response_model_by_alias=True)
def swap_suggestions(req: SuggestionRequest) -> SuggestionResponse:
    """
    Stateless: send the requester, their shift and both pools, get back ranked suggestions.
    Nothing is stored.

    The requester must be in `nurses` and the shift in `shifts`, otherwise 404
    "invalid shift or nurse data".
    """
    roster = RosterContext(nurses=req.nurses, shifts=req.shifts)
    requester, shift = roster.resolve(req.requester.id, req.shift.id)

    suggestions = suggest_swaps(
        requester,
        shift,
        roster.nurses,
        roster.shifts,
        limit=settings.max_suggestions,
    )
    return SuggestionResponse(
        requester_id=requester.id,
        shift_id=shift.id,
        suggestions=suggestions,
    )
