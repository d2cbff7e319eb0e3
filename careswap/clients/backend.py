"""
REST backend client for swap requests.

The backend owns persistence and the review decision. Every response comes
wrapped in an envelope:

    {"data": <payload>, "message": "...", "success": true}

This client unwraps it and turns transport problems and error responses into
CareSwap errors. It does not retry: one call, one answer. Retrying belongs to
whoever drives the workflow, and the idempotency key makes that safe.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from careswap.core.errors import InvalidTransitionError, NotFoundError, SubmissionError
from careswap.core.logger import get_logger
from careswap.schemas.roster import SwapRequest, SwapRequestCreate, SwapStatus

logger = get_logger(__name__)

SWAP_REQUESTS_PATH = "/schedules/swap-requests"


class HttpSwapRequestRepository:
    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpSwapRequestRepository":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create(self, payload: SwapRequestCreate) -> SwapRequest:
        headers = {}
        if payload.idempotency_key:
            headers["Idempotency-Key"] = payload.idempotency_key

        body = payload.model_dump(
            mode="json",
            by_alias=True,
            exclude={"idempotency_key"},
            exclude_none=True,
        )
        data = await self._send("POST", SWAP_REQUESTS_PATH, json=body, headers=headers)
        return SwapRequest.model_validate(data)

    async def get(self, request_id: str) -> SwapRequest:
        data = await self._send("GET", f"{SWAP_REQUESTS_PATH}/{request_id}")
        return SwapRequest.model_validate(data)

    async def list_requests(self, status: Optional[SwapStatus] = None) -> list[SwapRequest]:
        params = {"status": status.value} if status else None
        data = await self._send("GET", SWAP_REQUESTS_PATH, params=params)
        return [SwapRequest.model_validate(item) for item in data or []]

    async def approve(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest:
        return await self._review(request_id, "approve", reviewer_id, notes)

    async def reject(
        self, request_id: str, reviewer_id: Optional[str] = None, notes: Optional[str] = None
    ) -> SwapRequest:
        return await self._review(request_id, "reject", reviewer_id, notes)

    async def _review(
        self, request_id: str, action: str, reviewer_id: Optional[str], notes: Optional[str]
    ) -> SwapRequest:
        body = {k: v for k, v in {"reviewedBy": reviewer_id, "reviewNotes": notes}.items() if v is not None}
        data = await self._send("PUT", f"{SWAP_REQUESTS_PATH}/{request_id}/{action}", json=body)
        return SwapRequest.model_validate(data)

    async def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Backend unreachable for %s %s: %s", method, path, exc)
            raise SubmissionError(f"Backend unreachable: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(_error_message(response))
        if response.status_code == 409:
            raise InvalidTransitionError(_error_message(response))
        if response.is_error:
            logger.warning("Backend returned %s for %s %s", response.status_code, method, path)
            raise SubmissionError(_error_message(response), status_code=response.status_code)

        body = response.json()
        if isinstance(body, dict) and "data" in body:
            if body.get("success") is False:
                raise SubmissionError(body.get("message") or "Backend reported a failure")
            return body["data"]
        return body


def _error_message(response: httpx.Response) -> str:
    # error bodies look like {"message": "...", "code": "..."} when the backend sends one
    try:
        body = response.json()
    except ValueError:
        return f"Backend returned HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Backend returned HTTP {response.status_code}"
