"""
demo routes

making the project easy to try from swagger (/docs).

a suggestion payload has shift dates in it. hardcoding fixed dates goes stale,
so this endpoint builds a fresh SuggestionRequest every time:
- the requester's night shift is tomorrow
- candidates work other shifts later in the week
- one nurse is in another department so you can see the filter drop them

all names are made up.
"""

from datetime import date, timedelta

from fastapi import APIRouter

from careswap.schemas.roster import (
    ExperienceLevel,
    Nurse,
    Shift,
    ShiftType,
    SuggestionRequest,
)

router = APIRouter()


@router.get("/demo/payload", response_model=SuggestionRequest, response_model_by_alias=True)
def demo_payload() -> SuggestionRequest:
    """
    returns a sample SuggestionRequest that works immediately in /docs.

    how to use (in swagger):
    1) call GET /demo/payload and copy the response json
    2) paste it into POST /swap/suggestions and hit execute

    expected: Jordan Lee first (85), Sam Park second (65), Riley Chen absent (ER).
    """
    today = date.today()

    requester = Nurse(
        id="n1",
        first_name="Alex",
        last_name="Morgan",
        department="ICU",
        specializations=["Critical Care", "Ventilator Management"],
        experience_level=ExperienceLevel.senior,
        preferred_shifts=[ShiftType.day, ShiftType.night],
    )

    nurses = [
        requester,
        Nurse(
            id="n2",
            first_name="Sam",
            last_name="Park",
            department="ICU",
            specializations=[],
            experience_level=ExperienceLevel.junior,
            preferred_shifts=[ShiftType.night],
        ),
        Nurse(
            id="n3",
            first_name="Jordan",
            last_name="Lee",
            department="ICU",
            specializations=["Critical Care", "Ventilator Management"],
            experience_level=ExperienceLevel.senior,
            preferred_shifts=[ShiftType.night, ShiftType.evening],
        ),
        Nurse(
            id="n4",
            first_name="Riley",
            last_name="Chen",
            department="ER",
            specializations=["Critical Care"],
            experience_level=ExperienceLevel.senior,
            preferred_shifts=[ShiftType.night],
        ),
    ]

    source_shift = Shift(
        id="s1",
        date=today + timedelta(days=1),
        start_time="19:00",
        end_time="07:00",
        type=ShiftType.night,
        department="ICU",
        required_staff=2,
        assigned_nurses=["n1"],
    )

    shifts = [
        source_shift,
        Shift(
            id="s2",
            date=today + timedelta(days=3),
            start_time="07:00",
            end_time="19:00",
            type=ShiftType.day,
            department="ICU",
            required_staff=3,
            assigned_nurses=["n3", "n2"],
        ),
        Shift(
            id="s3",
            date=today + timedelta(days=4),
            start_time="15:00",
            end_time="23:00",
            type=ShiftType.evening,
            department="ICU",
            required_staff=2,
            assigned_nurses=["n2"],
        ),
    ]

    return SuggestionRequest(requester=requester, shift=source_shift, nurses=nurses, shifts=shifts)
