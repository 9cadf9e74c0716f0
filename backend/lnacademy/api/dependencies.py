import uuid
from decimal import Decimal
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lnacademy.core.database import get_db
from lnacademy.core.security import TokenService
from lnacademy.models.product import Currency
from lnacademy.models.user import User
from lnacademy.repositories.product_repository import ProductRepository
from lnacademy.repositories.user_repository import UserRepository
from lnacademy.schemas.product import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ProductFilter
from lnacademy.services.product_service import ProductService
from lnacademy.services.user_service import UserService

# Extracts "Authorization: Bearer <token>"; auto_error=False so we control the 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """The token issuer built once by the application factory."""
    return request.app.state.token_service


def get_user_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    return UserService(UserRepository(db), tokens)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(ProductRepository(db))


def _user_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
    tokens: TokenService,
) -> Optional[User]:
    if credentials is None:
        return None

    payload = tokens.decode_access_token(credentials.credentials)
    if payload is None:
        return None

    # JWT standard uses 'sub' (subject) claim for user identifier
    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except (ValueError, TypeError):
        return None

    # A user soft-deleted after the token was issued no longer authenticates
    return UserRepository(db).get_by_id(user_id)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Route handlers pass current_user.id into the domain services explicitly;
    services never read identity from the request themselves.
    """
    user = _user_from_token(credentials, db, tokens)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    return _user_from_token(credentials, db, tokens)


def get_listing_filter(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search_term: Optional[str] = Query(None),
    currency: Optional[Currency] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
) -> ProductFilter:
    """
    Query parameters shared by the public listings.

    Public listings never show unpublished products, whatever the caller asks.
    """
    return ProductFilter(
        page=page,
        page_size=page_size,
        search_term=search_term,
        currency=currency,
        min_price=min_price,
        max_price=max_price,
        include_unpublished=False,
    )
