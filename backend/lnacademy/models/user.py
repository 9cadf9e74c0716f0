import uuid

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
from lnacademy.core.database import Base


class User(Base):
    """
    User model representing marketplace accounts.

    Stores authentication credentials only. Passwords are stored as hashes
    (never plaintext). A set deleted_at hides the account from every lookup.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Email is unique and indexed for fast lookups during sign-in
    email = Column(String, unique=True, index=True, nullable=False)
    # bcrypt hash, column name kept as "password"
    password = Column("password", String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)
