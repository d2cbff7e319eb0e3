from datetime import date

import pytest
from fastapi.testclient import TestClient

from careswap.clients.repository import InMemorySwapRequestRepository
from careswap.core.state import RosterContext
from careswap.main import create_app
from careswap.schemas.roster import ExperienceLevel, Nurse, Shift, ShiftType

MONDAY = date(2025, 3, 10)


def make_nurse(nurse_id: str, **overrides) -> Nurse:
    fields = {
        "id": nurse_id,
        "first_name": nurse_id.upper(),
        "last_name": "Test",
        "department": "ICU",
        "specializations": [],
        "experience_level": ExperienceLevel.senior,
        "preferred_shifts": [ShiftType.day, ShiftType.night],
    }
    fields.update(overrides)
    return Nurse(**fields)


def make_shift(shift_id: str, **overrides) -> Shift:
    fields = {
        "id": shift_id,
        "date": MONDAY,
        "start_time": "19:00",
        "end_time": "07:00",
        "type": ShiftType.night,
        "department": "ICU",
        "required_staff": 2,
        "assigned_nurses": [],
    }
    fields.update(overrides)
    return Shift(**fields)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def requester() -> Nurse:
    return make_nurse(
        "alice",
        first_name="Alice",
        last_name="Nguyen",
        specializations=["Critical Care", "Ventilator Management"],
        experience_level=ExperienceLevel.senior,
        preferred_shifts=[ShiftType.day, ShiftType.night],
    )


@pytest.fixture
def source_shift() -> Shift:
    return make_shift("night-mon", assigned_nurses=["alice"])


@pytest.fixture
def roster(requester: Nurse, source_shift: Shift) -> RosterContext:
    """
    alice gives up a Monday night.

    - bob: ICU, senior, two shared specs, prefers nights -> 85
    - carol: ICU, junior, no shared specs, prefers nights -> 65
    - dave: ICU but only likes evenings -> not eligible
    - erin: ER -> not eligible
    """
    nurses = [
        requester,
        make_nurse(
            "bob",
            first_name="Bob",
            last_name="Ortiz",
            specializations=["Ventilator Management", "Critical Care"],
            preferred_shifts=[ShiftType.night],
        ),
        make_nurse(
            "carol",
            first_name="Carol",
            last_name="Singh",
            experience_level=ExperienceLevel.junior,
            preferred_shifts=[ShiftType.night, ShiftType.evening],
        ),
        make_nurse("dave", preferred_shifts=[ShiftType.evening]),
        make_nurse("erin", department="ER", specializations=["Critical Care"], preferred_shifts=[ShiftType.night]),
    ]
    shifts = [
        source_shift,
        make_shift("day-wed", date=date(2025, 3, 12), type=ShiftType.day, start_time="07:00", end_time="19:00",
                   assigned_nurses=["bob", "carol"]),
        make_shift("eve-thu", date=date(2025, 3, 13), type=ShiftType.evening, start_time="15:00", end_time="23:00",
                   assigned_nurses=["carol"]),
    ]
    return RosterContext(nurses=nurses, shifts=shifts)


@pytest.fixture
def repository() -> InMemorySwapRequestRepository:
    return InMemorySwapRequestRepository()


@pytest.fixture
def client(repository: InMemorySwapRequestRepository) -> TestClient:
    app = create_app(repository=repository)
    with TestClient(app) as test_client:
        yield test_client
