'''

'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..core import profiles
from ..database.db_enums import ExamBoard, UserRole
from ..common.exceptions import InvalidArgumentError, NotFoundError, UnauthorizedError
from ..common.logger import log
from .request_store import RequestStore


class UserService:
    """
    Service for user lookups and profile edits. Deleting a user also removes
    everything in the request graph that points at them.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request_store: Annotated[RequestStore, Depends(RequestStore)]
    ):
        self.db = db
        self.request_store = request_store

    async def get_user_by_email(self, email: str) -> db_models.Users | None:
        log.info(f"Fetching user profile for email: {email}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.email == email)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by email {email}: {e}", exc_info=True)
            raise

    async def get_user_by_id(self, user_id: UUID) -> db_models.Users | None:
        log.info(f"Fetching user profile for ID: {user_id}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.id == user_id)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by ID {user_id}: {e}", exc_info=True)
            raise

    async def get_all(self, current_user: db_models.Users) -> list[db_models.Users]:
        """Lists every user. Restricted to admins."""
        if current_user.role != UserRole.ADMIN.value:
            raise UnauthorizedError("This action is restricted to administrators.")
        stmt = select(db_models.Users).order_by(db_models.Users.full_name)
        return list((await self.db.execute(stmt)).scalars().all())

    async def update_profile(
        self,
        current_user: db_models.Users,
        year_group: int,
        exam_board: ExamBoard | None = None,
        max_tutoring_per_week: int | None = None
    ) -> db_models.Users:
        """
        Updates the caller's own academic profile.
        The exam board follows the year group: GCSE for years 9-11, and an
        A Levels / IB choice (given now or already held) for years 12-13.
        """
        if not profiles.MIN_YEAR_GROUP <= year_group <= profiles.MAX_YEAR_GROUP:
            raise InvalidArgumentError(
                f"Year group must be between {profiles.MIN_YEAR_GROUP} and {profiles.MAX_YEAR_GROUP}")

        requested_board = exam_board.value if exam_board is not None else current_user.exam_board
        resolved_board = profiles.exam_board_for_year_group(year_group, requested_board)
        if year_group >= 12 and resolved_board == ExamBoard.NONE.value:
            raise InvalidArgumentError("Please select an exam board (A Levels or IB) for years 12-13")

        current_user.year_group = year_group
        current_user.exam_board = resolved_board
        if max_tutoring_per_week is not None:
            current_user.max_tutoring_per_week = max_tutoring_per_week
        await self.db.flush()
        log.info(f"Updated profile of user {current_user.id}: year {year_group}, board {resolved_board}.")
        return current_user

    async def delete_user(self, user_id: UUID, current_user: db_models.Users) -> bool:
        """
        Deletes a user and cleans up the request graph in one transaction:
        1. Requests matched to this user lose the partner (MATCHED ones become CANCELLED).
        2. All of the user's own requests are deleted.
        3. The user is deleted.
        - Authorized for the user themselves or an admin.
        """
        log.info(f"User {current_user.id} attempting to delete user {user_id}.")
        try:
            user_to_delete = await self.get_user_by_id(user_id)
            if not user_to_delete:
                raise NotFoundError("User not found.")

            is_owner = user_to_delete.id == current_user.id
            is_admin = current_user.role == UserRole.ADMIN.value
            if not is_owner and not is_admin:
                log.warning(f"SECURITY: User {current_user.id} tried to delete user {user_id}.")
                raise UnauthorizedError("You do not have permission to delete this profile.")

            await self.request_store.clear_matched_partner_references(user_to_delete)
            await self.request_store.delete_by_user(user_to_delete)

            await self.db.delete(user_to_delete)
            await self.db.flush()

            # Verify the deletion
            if await self.get_user_by_id(user_id) is not None:
                log.error(f"Failed to delete user {user_id}, record still exists after flush.")
                return False
            log.info(f"Successfully deleted user {user_id}.")
            return True

        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error in delete_user for user {user_id}: {e}", exc_info=True)
            raise
