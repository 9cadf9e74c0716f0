from fastapi import APIRouter, Depends

from lnacademy.api.dependencies import get_current_user, get_user_service
from lnacademy.core.exceptions import NotFoundError
from lnacademy.models.user import User
from lnacademy.schemas.user import UserResponse
from lnacademy.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Get the authenticated caller's profile"""
    user = users.get_user(user_id=current_user.id)
    if user is None:
        raise NotFoundError("User not found")
    return user
