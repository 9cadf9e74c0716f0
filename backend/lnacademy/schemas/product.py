import math
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, computed_field, field_serializer, field_validator

from lnacademy.models.course_content import LessonType
from lnacademy.models.product import Currency, ProductType

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

T = TypeVar("T")


# Filtering & pagination
# -----------------------------

class ProductFilter(BaseModel):
    """
    One set of filters shared by every product listing.

    Absent filters impose no constraint. page and page_size are clamped into
    range so callers outside the HTTP layer cannot request page 0 or an
    unbounded page.
    """
    search_term: Optional[str] = None
    include_unpublished: bool = False
    product_type: Optional[ProductType] = None
    currency: Optional[Currency] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    creator_id: Optional[uuid.UUID] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @field_validator("page")
    @classmethod
    def clamp_page(cls, value: int) -> int:
        return max(1, value)

    @field_validator("page_size")
    @classmethod
    def clamp_page_size(cls, value: int) -> int:
        return min(max(1, value), MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResult(BaseModel, Generic[T]):
    items: List[T]
    total_items: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.page_size else 0

    @computed_field
    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages


# Requests
# -----------------------------

class CreateProductRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str
    price: Decimal = Field(ge=0)
    # Validated against Currency by the service so the error carries INVALID_CURRENCY
    currency: str = Currency.SATS.value
    is_published: bool = False
    cover_image_url: Optional[str] = None


class CreateCourseRequest(CreateProductRequest):
    level: str = "Beginner"


class CreateBookRequest(CreateProductRequest):
    author: str = Field(min_length=1)
    language: Optional[str] = None
    format: Optional[str] = None
    preview_url: Optional[str] = None
    download_url: Optional[str] = None


class UpdateProductRequest(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    model_fields_set tells an explicit null apart from an omitted field.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    is_published: Optional[bool] = None
    cover_image_url: Optional[str] = None


class UpdateCourseRequest(UpdateProductRequest):
    level: Optional[str] = None


class UpdateBookRequest(UpdateProductRequest):
    author: Optional[str] = Field(default=None, min_length=1)
    language: Optional[str] = None
    format: Optional[str] = None
    preview_url: Optional[str] = None
    download_url: Optional[str] = None


class CreateModuleRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order: int = 0


class CreateLessonRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    ref_url: str = ""
    order: int = 0
    type: LessonType = LessonType.VIDEO


# Responses
# -----------------------------

class LessonResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    ref_url: str
    order: int
    type: str


class ModuleResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    order: int
    lessons: List[LessonResponse] = []


class ProductResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    price: Decimal
    currency: str
    creator_id: uuid.UUID
    is_published: bool
    cover_image_url: Optional[str]
    type: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @field_serializer('price')
    def serialize_price(self, value: Decimal, _info):
        return float(value)

    @field_serializer('created_at', 'updated_at')
    def serialize_timestamps(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class CourseResponse(ProductResponse):
    level: Optional[str]
    module_count: int = 0
    lesson_count: int = 0
    # Only filled when details were requested
    modules: Optional[List[ModuleResponse]] = None


class BookResponse(ProductResponse):
    author: Optional[str]
    language: Optional[str]
    format: Optional[str]
    preview_url: Optional[str]
    # Only shown to the book's creator
    download_url: Optional[str] = None
