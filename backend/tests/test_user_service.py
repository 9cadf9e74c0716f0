import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lnacademy.core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ResourceInUseError,
    ValidationError,
)
from lnacademy.core.security import get_password_hash
from lnacademy.models.product import Book, Currency
from lnacademy.models.user import User
from lnacademy.repositories.user_repository import UserRepository


def test_signup_hashes_password(user_service, db):
    created = user_service.signup("a@x.com", "password1")

    stored = UserRepository(db).get_by_id(created.id)
    assert stored.password != "password1"
    assert stored.password.startswith("$2")


def test_email_uniqueness_is_case_sensitive(user_service):
    user_service.signup("a@x.com", "password1")

    with pytest.raises(DuplicateEmailError):
        user_service.signup("a@x.com", "password1")
    # A different casing is a different stored email
    assert user_service.signup("A@x.com", "password1").email == "A@x.com"


def test_validate_credentials(user_service):
    user_service.signup("a@x.com", "password1")

    assert user_service.validate_credentials("a@x.com", "password1").email == "a@x.com"
    with pytest.raises(InvalidCredentialsError):
        user_service.validate_credentials("a@x.com", "wrong-password")
    with pytest.raises(InvalidCredentialsError):
        user_service.validate_credentials("nobody@x.com", "password1")


def test_signin_token_carries_id_and_email(user_service, token_service):
    created = user_service.signup("a@x.com", "password1")

    result = user_service.signin("a@x.com", "password1")

    claims = token_service.decode_access_token(result.token)
    assert claims["sub"] == str(created.id)
    assert claims["email"] == "a@x.com"
    assert result.user.id == created.id


def test_get_user_by_id_or_email(user_service):
    created = user_service.signup("a@x.com", "password1")

    assert user_service.get_user(user_id=created.id).email == "a@x.com"
    assert user_service.get_user(email="a@x.com").id == created.id
    assert user_service.get_user(email="nobody@x.com") is None


def test_get_user_needs_id_or_email(user_service):
    with pytest.raises(ValidationError) as excinfo:
        user_service.get_user()

    assert excinfo.value.error_code == "INVALID_REQUEST"


def test_soft_deleted_user_is_invisible(make_user, db, user_service):
    user = make_user("gone@x.com")
    UserRepository(db).soft_delete(user.id)

    assert UserRepository(db).get_by_id(user.id) is None
    assert UserRepository(db).get_by_email("gone@x.com") is None
    assert user_service.get_user(user_id=user.id) is None
    with pytest.raises(InvalidCredentialsError):
        user_service.validate_credentials("gone@x.com", "password1")


def test_user_with_products_cannot_be_deleted(make_user, db):
    user = make_user()
    db.add(Book(
        title="Owned",
        description="",
        price=Decimal("1"),
        currency=Currency.SATS,
        creator_id=user.id,
        author="Someone",
    ))
    db.commit()

    with pytest.raises(ResourceInUseError):
        UserRepository(db).soft_delete(user.id)
    assert UserRepository(db).get_by_id(user.id) is not None


def test_soft_delete_unknown_user(db):
    with pytest.raises(NotFoundError):
        UserRepository(db).soft_delete(uuid.uuid4())


def test_update_saves_changed_fields(make_user, db):
    user = make_user("before@x.com")
    repo = UserRepository(db)

    user.email = "after@x.com"
    repo.update(user)

    assert repo.get_by_email("after@x.com").id == user.id
    assert repo.get_by_email("before@x.com") is None


def test_update_of_soft_deleted_user(make_user, db):
    user = make_user()
    repo = UserRepository(db)
    repo.soft_delete(user.id)

    with pytest.raises(NotFoundError):
        repo.update(user)


def test_list_active_skips_deleted_users_in_creation_order(db):
    repo = UserRepository(db)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset, email in ((2, "third@x.com"), (0, "first@x.com"), (1, "second@x.com")):
        repo.create(User(
            email=email,
            password=get_password_hash("password1"),
            created_at=start + timedelta(days=offset),
        ))
    repo.soft_delete(repo.get_by_email("second@x.com").id)

    assert [u.email for u in repo.list_active()] == ["first@x.com", "third@x.com"]
