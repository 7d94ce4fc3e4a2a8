'''
Derived user-profile rules.

These are pure functions computed on read, so updating a user's year group
never silently rewrites other fields.
'''
from typing import Optional

from ..database.db_enums import ExamBoard, UserRole

MIN_YEAR_GROUP = 9
MAX_YEAR_GROUP = 13


def exam_board_for_year_group(year_group: Optional[int], current: Optional[str] = None) -> str:
    """
    Returns the exam board a user should hold for a year group.
    - Years 9-11 always sit GCSEs.
    - Years 12-13 keep an A Levels / IB choice, otherwise must still choose (NONE).
    - Anything else has no exam board.
    """
    if year_group is None:
        return current or ExamBoard.NONE.value
    if 9 <= year_group <= 11:
        return ExamBoard.GCSE.value
    if 12 <= year_group <= 13:
        if current in (ExamBoard.A_LEVELS.value, ExamBoard.IB.value):
            return current
        return ExamBoard.NONE.value
    return ExamBoard.NONE.value


def is_profile_complete(
    role: str,
    year_group: Optional[int],
    subject_count: int,
    availability_count: int
) -> bool:
    """
    Admins don't need an academic profile. Students need a valid year group,
    at least one subject and at least one available timeslot.
    """
    if role == UserRole.ADMIN.value:
        return True
    return (
        year_group is not None
        and MIN_YEAR_GROUP <= year_group <= MAX_YEAR_GROUP
        and subject_count > 0
        and availability_count > 0
    )
