"""
Domain error types.

Services raise these; the API layer turns each one into a response using its
status_code and error_code (see lnacademy.api.errors).
"""

from typing import Optional

from fastapi import status


class AcademyError(Exception):
    """Base class for every error the domain reports to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": self.message, "errorCode": self.error_code}


class ValidationError(AcademyError):
    """Malformed or semantically invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class DuplicateEmailError(AcademyError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "DUPLICATE_EMAIL"

    def __init__(self, message: str = "Email already in use."):
        super().__init__(message)


class InvalidCredentialsError(AcademyError):
    """Raised for unknown emails and wrong passwords alike."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Wrong email or password."):
        super().__init__(message)


class NotFoundError(AcademyError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    pass


class UnauthorizedError(AcademyError):
    """The caller is authenticated but does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class ResourceInUseError(AcademyError):
    """A restrict-on-delete relationship still has dependents."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "RESOURCE_IN_USE"
