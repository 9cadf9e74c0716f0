import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError

from lnacademy.core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from lnacademy.core.security import (
    TokenService,
    dummy_verify,
    get_password_hash,
    verify_password,
)
from lnacademy.models.user import User
from lnacademy.repositories.user_repository import UserRepository
from lnacademy.schemas.user import SigninResponse, UserResponse

logger = logging.getLogger(__name__)


class UserService:
    """Signup, sign-in and user lookup on top of the credential store."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    def signup(self, email: str, password: str) -> UserResponse:
        if self.users.get_by_email(email) is not None:
            logger.warning(f"Signup attempt with existing email: {email}")
            raise DuplicateEmailError()

        user = User(
            id=uuid.uuid4(),
            email=email,
            # Never store plaintext passwords
            password=get_password_hash(password),
        )
        try:
            user = self.users.create(user)
        except IntegrityError:
            # Two concurrent signups can both pass the check above;
            # the unique index catches the second one
            logger.warning(f"Signup race on email: {email}")
            raise DuplicateEmailError()

        logger.info(f"New user created with email: {email}")
        return UserResponse.model_validate(user)

    def validate_credentials(self, email: str, password: str) -> UserResponse:
        """
        Check an email/password pair.

        Unknown emails and wrong passwords raise the same error, and an
        unknown email still pays for one hash verification, so callers cannot
        tell which emails are registered.
        """
        user = self.users.get_by_email(email)
        if user is None:
            dummy_verify()
            logger.warning(f"Login attempt with non-existent email: {email}")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password):
            logger.warning(f"Failed login attempt for user: {email}")
            raise InvalidCredentialsError()

        logger.info(f"Successful login for user: {email}")
        return UserResponse.model_validate(user)

    def signin(self, email: str, password: str) -> SigninResponse:
        user = self.validate_credentials(email, password)
        token = self.tokens.create_access_token(user.id, user.email)
        return SigninResponse(user=user, token=token)

    def get_user(
        self,
        user_id: Optional[uuid.UUID] = None,
        email: Optional[str] = None,
    ) -> Optional[UserResponse]:
        """Look a user up by id, or by email when no id is given. None if absent."""
        if user_id is not None:
            user = self.users.get_by_id(user_id)
        elif email and email.strip():
            user = self.users.get_by_email(email)
        else:
            logger.warning("get_user called with neither ID nor email")
            raise ValidationError("Either an id or an email is required", "INVALID_REQUEST")

        if user is None:
            logger.warning(f"User not found. ID: {user_id}, Email: {email}")
            return None

        return UserResponse.model_validate(user)
