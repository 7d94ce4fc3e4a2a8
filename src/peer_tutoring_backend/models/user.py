'''
User API Models
'''
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import UserRole, ExamBoard
from .subject import SubjectRead

class UserRead(BaseModel):
    """
    Base Pydantic model for reading user data.
    Corresponds to the db_models.Users ORM model.
    """
    id: UUID
    email: str
    full_name: str
    role: UserRole
    year_group: Optional[int] = None
    exam_board: ExamBoard
    is_profile_complete: bool

    model_config = ConfigDict(from_attributes=True)

class UserProfileRead(UserRead):
    """User with their subject interests and available timeslots."""
    subjects: list[SubjectRead] = Field(default_factory=list)
    availability_codes: set[str] = Field(default_factory=set)
    max_tutoring_per_week: int = 0

class UserSummary(BaseModel):
    """Minimal user view embedded in other resources (e.g. a matched partner)."""
    id: UUID
    full_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)

class UserProfileUpdate(BaseModel):
    """
    Academic profile fields a user edits themselves.
    The stored exam board is derived from the year group by the service.
    """
    year_group: int = Field(..., description="Between 9 and 13.")
    exam_board: Optional[ExamBoard] = Field(None, description="A Levels or IB; required for years 12-13.")
    max_tutoring_per_week: Optional[int] = Field(None, ge=0)
