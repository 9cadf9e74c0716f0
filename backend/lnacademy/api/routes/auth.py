from fastapi import APIRouter, Depends

from lnacademy.api.dependencies import get_user_service
from lnacademy.schemas.user import SigninRequest, SigninResponse, SignupRequest, UserResponse
from lnacademy.services.user_service import UserService
from lnacademy.utils.validators import sanitize_input

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse)
def signup(
    request: SignupRequest,
    users: UserService = Depends(get_user_service),
):
    """Register a new user"""
    # Email shape and password length are already enforced by SignupRequest
    return users.signup(sanitize_input(request.email), sanitize_input(request.password))


@router.post("/signin", response_model=SigninResponse)
def signin(
    request: SigninRequest,
    users: UserService = Depends(get_user_service),
):
    """Sign in and get a bearer token"""
    return users.signin(sanitize_input(request.email), sanitize_input(request.password))
