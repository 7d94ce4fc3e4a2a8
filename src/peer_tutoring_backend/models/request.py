'''
Tutoring Request API Models
'''
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..database.db_enums import RequestStatus, RequestType
from .subject import SubjectRead
from .user import UserSummary

# --- API Read Models (Output) ---

class RequestRead(BaseModel):
    """
    The API model for a tutoring request.
    Corresponds to db_models.Requests.
    """
    id: UUID
    user_id: UUID
    type: RequestType
    subject: SubjectRead
    timeslots: set[str]
    chosen_timeslot: Optional[str] = None
    week_start_date: Optional[date] = None
    session_start: Optional[datetime] = None
    session_end: Optional[datetime] = None
    recurring: bool
    status: RequestStatus
    archived: bool
    matched_partner: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CompletionSweepRead(BaseModel):
    marked_done: int


class ArchiveSweepRead(BaseModel):
    archived: int


# --- API Write Models (Input) ---

class RequestCreate(BaseModel):
    """
    The API model for creating a tutoring request.
    Unknown timeslot codes are dropped by the service, not rejected here.
    """
    type: RequestType
    subject_code: str
    timeslots: set[str] = Field(default_factory=set)
    recurring: bool = False
    week_start_date: Optional[date] = Field(None, description="Monday of the target week. Defaults to next Monday.")

    @field_validator('subject_code')
    @classmethod
    def normalise_subject_code(cls, value: str) -> str:
        return value.strip().upper()


class MatchCreate(BaseModel):
    """An externally decided pairing of one TUTOR request with one TUTEE request."""
    tutor_request_id: UUID
    tutee_request_id: UUID
    chosen_timeslot: Optional[str] = None


class ArchiveBefore(BaseModel):
    week_start_date: date
