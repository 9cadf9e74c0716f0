import enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func
from lnacademy.core.database import Base


class ProductType(str, enum.Enum):
    COURSE = "Course"
    BOOK = "Book"


class Currency(str, enum.Enum):
    SATS = "SATS"
    USD = "USD"


class Product(Base):
    """
    Base of the catalog hierarchy.

    Courses and books share the products table (single-table inheritance).
    The type column is the discriminator: SQLAlchemy sets it from the
    subclass's polymorphic_identity when the object is constructed and uses it
    to load rows back as Course or Book. Subtype columns are nullable here.
    """
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(18, 2), nullable=False)
    currency = Column(Enum(Currency, name="currency"), nullable=False, default=Currency.SATS)
    # Deleting a user must never take their products with it
    creator_id = Column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    is_published = Column(Boolean, nullable=False, default=False)
    cover_image_url = Column(Text, nullable=True)
    type = Column(Enum(ProductType, name="product_type"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __mapper_args__ = {
        "polymorphic_on": type,
        "polymorphic_abstract": True,
    }


class Course(Product):
    # Free-text tier: Beginner, Intermediate, Advanced
    level = Column(String, nullable=True)

    __mapper_args__ = {"polymorphic_identity": ProductType.COURSE}


class Book(Product):
    author = Column(Text, nullable=True)
    language = Column(Text, nullable=True)
    format = Column(Text, nullable=True)
    download_url = Column(Text, nullable=True)
    preview_url = Column(Text, nullable=True)

    __mapper_args__ = {"polymorphic_identity": ProductType.BOOK}
