from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for every payload that crosses the REST boundary.

    The backend speaks camelCase (requesterId, preferredShifts, ...).
    Python code uses snake_case. Both spellings are accepted on the way in,
    camelCase goes out when dumping with by_alias=True.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExperienceLevel(str, Enum):
    junior = "Junior"
    mid = "Mid"
    senior = "Senior"
    expert = "Expert"


class ShiftType(str, Enum):
    day = "Day"
    evening = "Evening"
    night = "Night"


class SwapStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class Nurse(ApiModel):
    id: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    department: str
    specializations: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel
    max_hours_per_week: int = Field(default=40, ge=0)
    preferred_shifts: list[ShiftType] = Field(default_factory=list)
    unavailable_dates: list[dt.date] = Field(default_factory=list)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.id


class Shift(ApiModel):
    id: str = Field(min_length=1)
    date: dt.date
    start_time: str
    end_time: str
    type: ShiftType
    department: str
    required_staff: int = Field(ge=0)
    assigned_nurses: list[str] = Field(default_factory=list)
    requirements: Optional[list[str]] = None

    @field_validator("assigned_nurses")
    @classmethod
    def no_duplicate_assignments(cls, value: list[str]) -> list[str]:
        if len(value) != len(set(value)):
            raise ValueError("assignedNurses must not contain duplicates")
        return value


class SwapRequestCreate(ApiModel):
    """
    Payload sent to the persistence collaborator when a draft is submitted.
    Ids and timestamps are assigned on the other side.
    """
    requester_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    shift_id: str = Field(min_length=1)
    target_shift_id: Optional[str] = None
    reason: str
    status: SwapStatus = SwapStatus.pending
    auto_matched: bool = False
    idempotency_key: Optional[str] = None

    @model_validator(mode="after")
    def requester_is_not_target(self) -> "SwapRequestCreate":
        if self.requester_id == self.target_id:
            raise ValueError("requesterId and targetId must be different nurses")
        return self


class SwapRequest(ApiModel):
    id: str
    requester_id: str
    target_id: str
    shift_id: str
    target_shift_id: Optional[str] = None
    reason: str
    status: SwapStatus = SwapStatus.pending
    created_at: dt.datetime
    updated_at: dt.datetime
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    auto_matched: bool = False

    @model_validator(mode="after")
    def requester_is_not_target(self) -> "SwapRequest":
        if self.requester_id == self.target_id:
            raise ValueError("requesterId and targetId must be different nurses")
        return self


class SwapSuggestion(ApiModel):
    """
    A ranked, explained swap candidate.

    Only lives for a single suggestion run, it is never persisted.
    """
    nurse: Nurse
    shift: Optional[Shift] = None
    compatibility: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)


class SuggestionRequest(ApiModel):
    """Stateless suggestion input: everything the engine needs in one payload."""
    requester: Nurse
    shift: Shift
    nurses: list[Nurse]
    shifts: list[Shift] = Field(default_factory=list)


class SuggestionResponse(ApiModel):
    requester_id: str
    shift_id: str
    suggestions: list[SwapSuggestion]


class ReviewDecision(ApiModel):
    reviewer_id: Optional[str] = None
    notes: Optional[str] = None


class SwapSubmission(ApiModel):
    """
    Submit body for the stateful API.

    autoMatched says the requester clicked a suggestion. It is only honored
    when the target really is one of the current suggestions.
    """
    requester_id: str
    shift_id: str
    target_nurse_id: str = ""
    target_shift_id: Optional[str] = None
    reason: str = ""
    auto_matched: bool = False
    idempotency_key: Optional[str] = None


class StaffingReport(ApiModel):
    shift: Shift
    assigned: int
    required: int
    status: str
