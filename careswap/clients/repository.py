"""
swap request persistence

the swap workflow never stores anything itself. it hands a SwapRequestCreate
to a repository and gets back the created SwapRequest (id + timestamps filled in).

two implementations:
- InMemorySwapRequestRepository: used when no backend_url is configured
  (local dev, demos, tests). it behaves like the backend would, including
  the review transitions.
- HttpSwapRequestRepository (careswap.clients.backend): talks to the real REST backend.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol

from careswap.core.errors import InvalidTransitionError, NotFoundError
from careswap.schemas.roster import SwapRequest, SwapRequestCreate, SwapStatus
from careswap.services.rules import is_terminal


class SwapRequestRepository(Protocol):
    async def create(self, payload: SwapRequestCreate) -> SwapRequest: ...

    async def get(self, request_id: str) -> SwapRequest: ...

    async def list_requests(self, status: Optional[SwapStatus] = None) -> list[SwapRequest]: ...

    async def approve(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest: ...

    async def reject(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest: ...


class InMemorySwapRequestRepository:
    """
    Process-local stand-in for the backend.

    - ids are uuid4 strings, timestamps are UTC
    - a repeated idempotency key returns the request created the first time
    - Approved and Rejected are terminal, reviewing twice is an error
    """

    def __init__(self) -> None:
        self._requests: dict[str, SwapRequest] = {}
        self._by_key: dict[str, str] = {}

    async def create(self, payload: SwapRequestCreate) -> SwapRequest:
        if payload.idempotency_key and payload.idempotency_key in self._by_key:
            return self._requests[self._by_key[payload.idempotency_key]]

        now = datetime.now(timezone.utc)
        request = SwapRequest(
            id=str(uuid.uuid4()),
            requester_id=payload.requester_id,
            target_id=payload.target_id,
            shift_id=payload.shift_id,
            target_shift_id=payload.target_shift_id,
            reason=payload.reason,
            status=SwapStatus.pending,
            created_at=now,
            updated_at=now,
            auto_matched=payload.auto_matched,
        )
        self._requests[request.id] = request
        if payload.idempotency_key:
            self._by_key[payload.idempotency_key] = request.id
        return request

    async def get(self, request_id: str) -> SwapRequest:
        request = self._requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Swap request '{request_id}' not found.")
        return request

    async def list_requests(self, status: Optional[SwapStatus] = None) -> list[SwapRequest]:
        return [r for r in self._requests.values() if status is None or r.status == status]

    async def approve(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest:
        return await self._review(request_id, SwapStatus.approved, reviewer_id, notes)

    async def reject(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest:
        return await self._review(request_id, SwapStatus.rejected, reviewer_id, notes)

    async def _review(
        self,
        request_id: str,
        status: SwapStatus,
        reviewer_id: Optional[str],
        notes: Optional[str],
    ) -> SwapRequest:
        request = await self.get(request_id)
        if is_terminal(request.status):
            raise InvalidTransitionError(
                f"Swap request '{request_id}' is already {request.status.value}."
            )

        reviewed = request.model_copy(
            update={
                "status": status,
                "reviewed_by": reviewer_id,
                "review_notes": notes,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._requests[request_id] = reviewed
        return reviewed
