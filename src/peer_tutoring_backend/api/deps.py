'''
Shared API dependencies.

`get_current_user` is the seam to the authentication layer: it resolves the
caller from the `X-User-Email` header set by the upstream auth proxy.
'''
from typing import Annotated, Optional
from fastapi import Depends, Header, HTTPException, status

from ..database import models as db_models
from ..database.db_enums import UserRole
from ..common.logger import log
from ..services.user_service import UserService


async def get_current_user(
    user_service: Annotated[UserService, Depends(UserService)],
    x_user_email: Annotated[Optional[str], Header()] = None
) -> db_models.Users:
    if not x_user_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated."
        )
    user = await user_service.get_user_by_email(x_user_email)
    if user is None:
        log.warning(f"SECURITY: Unknown caller identity {x_user_email}.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials."
        )
    return user


async def get_current_admin(
    current_user: Annotated[db_models.Users, Depends(get_current_user)]
) -> db_models.Users:
    if current_user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This action is restricted to administrators."
        )
    return current_user
