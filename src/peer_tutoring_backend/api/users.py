'''
API endpoints for users.
'''
from typing import Annotated, List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..database import models as db_models
from ..models import user as user_models
from ..services.user_service import UserService
from .deps import get_current_user


class UsersAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/users",
            tags=["Users"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_users,
                methods=["GET"],
                response_model=List[user_models.UserRead])
        self.router.add_api_route(
                "/me",
                self.get_me,
                methods=["GET"],
                response_model=user_models.UserProfileRead)
        self.router.add_api_route(
                "/me",
                self.update_me,
                methods=["PATCH"],
                response_model=user_models.UserProfileRead)
        self.router.add_api_route(
                "/{user_id}",
                self.delete_user,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_users(
        self,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        """**This endpoint is restricted to Admins only.**"""
        return await user_service.get_all(current_user)

    async def get_me(
        self,
        current_user: Annotated[db_models.Users, Depends(get_current_user)]
    ):
        return current_user

    async def update_me(
        self,
        profile: user_models.UserProfileUpdate,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        """Sets year group, exam board and weekly tutoring cap for the caller."""
        return await user_service.update_profile(
            current_user,
            profile.year_group,
            exam_board=profile.exam_board,
            max_tutoring_per_week=profile.max_tutoring_per_week
        )

    async def delete_user(
        self,
        user_id: UUID,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        """
        Deletes a user, their requests, and every partner reference to them.
        Allowed for the user themselves or an admin.
        """
        if not await user_service.delete_user(user_id, current_user):
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="User deletion failed.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)


users_api = UsersAPI()
router = users_api.router
