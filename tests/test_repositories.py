import json

import httpx
import pytest

from careswap.clients.backend import HttpSwapRequestRepository
from careswap.clients.repository import InMemorySwapRequestRepository
from careswap.core.errors import InvalidTransitionError, NotFoundError, SubmissionError
from careswap.schemas.roster import SwapRequestCreate, SwapStatus

pytestmark = pytest.mark.anyio

BACKEND = "http://backend.test/api"


def payload(**overrides) -> SwapRequestCreate:
    fields = {
        "requester_id": "alice",
        "target_id": "bob",
        "shift_id": "night-mon",
        "target_shift_id": "day-wed",
        "reason": "Family emergency",
        "auto_matched": True,
        "idempotency_key": "key-1",
    }
    fields.update(overrides)
    return SwapRequestCreate(**fields)


def created_record(body: dict, status: str = "Pending") -> dict:
    return {
        "id": "req-1",
        "requesterId": body["requesterId"],
        "targetId": body["targetId"],
        "shiftId": body["shiftId"],
        "targetShiftId": body.get("targetShiftId"),
        "reason": body["reason"],
        "status": status,
        "createdAt": "2025-03-01T10:00:00Z",
        "updatedAt": "2025-03-01T10:00:00Z",
        "autoMatched": body.get("autoMatched", False),
    }


async def test_self_swap_payload_is_rejected():
    with pytest.raises(ValueError):
        payload(target_id="alice")


async def test_in_memory_create_assigns_id_and_timestamps():
    repo = InMemorySwapRequestRepository()
    created = await repo.create(payload())

    assert created.id
    assert created.status is SwapStatus.pending
    assert created.created_at == created.updated_at
    assert created.auto_matched is True


async def test_in_memory_repeated_idempotency_key_returns_same_request():
    repo = InMemorySwapRequestRepository()
    first = await repo.create(payload())
    second = await repo.create(payload())

    assert first.id == second.id
    assert len(await repo.list_requests()) == 1


async def test_in_memory_review_is_terminal():
    repo = InMemorySwapRequestRepository()
    created = await repo.create(payload())

    approved = await repo.approve(created.id, reviewer_id="manager-1", notes="covered")
    assert approved.status is SwapStatus.approved
    assert approved.review_notes == "covered"

    with pytest.raises(InvalidTransitionError):
        await repo.reject(created.id)


async def test_in_memory_unknown_id():
    with pytest.raises(NotFoundError):
        await InMemorySwapRequestRepository().get("missing")


async def test_http_create_posts_camel_case_and_unwraps_envelope():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen["path"] = request.url.path
        seen["body"] = body
        seen["headers"] = request.headers
        return httpx.Response(201, json={"data": created_record(body), "message": "created", "success": True})

    async with HttpSwapRequestRepository(BACKEND, token="secret", transport=httpx.MockTransport(handler)) as repo:
        created = await repo.create(payload())

    assert seen["path"] == "/api/schedules/swap-requests"
    assert seen["body"]["requesterId"] == "alice"
    assert seen["body"]["status"] == "Pending"
    assert seen["body"]["autoMatched"] is True
    assert "idempotencyKey" not in seen["body"]
    assert seen["headers"]["Idempotency-Key"] == "key-1"
    assert seen["headers"]["Authorization"] == "Bearer secret"
    assert created.id == "req-1"
    assert created.target_shift_id == "day-wed"


async def test_http_server_error_is_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "maintenance"})

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        with pytest.raises(SubmissionError, match="maintenance") as excinfo:
            await repo.create(payload())

    assert excinfo.value.status_code == 503
    assert excinfo.value.retryable


async def test_http_conflict_on_create_is_invalid_transition():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "swap request already exists"})

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        with pytest.raises(InvalidTransitionError, match="already exists"):
            await repo.create(payload())


async def test_http_transport_error_is_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        with pytest.raises(SubmissionError):
            await repo.create(payload())


async def test_http_unsuccessful_envelope_is_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": None, "message": "shift locked", "success": False})

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        with pytest.raises(SubmissionError, match="shift locked"):
            await repo.create(payload())


async def test_http_review_and_conflict():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/req-1/approve"):
            body = json.loads(request.content)
            record = created_record(
                {"requesterId": "alice", "targetId": "bob", "shiftId": "night-mon", "reason": "Family emergency"},
                status="Approved",
            )
            record["reviewedBy"] = body["reviewedBy"]
            return httpx.Response(200, json={"data": record, "message": "ok", "success": True})
        return httpx.Response(409, json={"message": "already reviewed"})

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        approved = await repo.approve("req-1", reviewer_id="manager-1")
        assert approved.status is SwapStatus.approved
        assert approved.reviewed_by == "manager-1"

        with pytest.raises(InvalidTransitionError, match="already reviewed"):
            await repo.reject("req-2")


async def test_http_list_passes_status_filter():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["status"] == "Pending"
        record = created_record(
            {"requesterId": "alice", "targetId": "bob", "shiftId": "night-mon", "reason": "Family emergency"}
        )
        return httpx.Response(200, json={"data": [record], "message": "ok", "success": True})

    async with HttpSwapRequestRepository(BACKEND, transport=httpx.MockTransport(handler)) as repo:
        requests = await repo.list_requests(SwapStatus.pending)

    assert [r.id for r in requests] == ["req-1"]
