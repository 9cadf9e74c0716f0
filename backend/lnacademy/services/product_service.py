import logging
import uuid
from typing import List, Optional, Tuple

from lnacademy.core.exceptions import (
    NotFoundError,
    ProductNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from lnacademy.models.course_content import Lesson, Module
from lnacademy.models.product import Book, Course, Currency, Product, ProductType
from lnacademy.repositories.product_repository import ProductRepository
from lnacademy.schemas.product import (
    BookResponse,
    CourseResponse,
    CreateBookRequest,
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
    LessonResponse,
    ModuleResponse,
    PaginatedResult,
    ProductFilter,
    ProductResponse,
    UpdateBookRequest,
    UpdateCourseRequest,
    UpdateProductRequest,
)

logger = logging.getLogger(__name__)

# Update fields that map to NOT NULL columns; an explicit null is rejected
REQUIRED_PRODUCT_FIELDS = {"title", "description", "price", "currency", "is_published"}
REQUIRED_BOOK_FIELDS = REQUIRED_PRODUCT_FIELDS | {"author"}


def parse_currency(value: str) -> Currency:
    """Map a currency code to Currency; unknown codes raise INVALID_CURRENCY."""
    try:
        return Currency(value)
    except ValueError:
        logger.warning(f"Invalid currency: {value}")
        raise ValidationError(f"Invalid currency: {value}", "INVALID_CURRENCY")


class ProductService:
    """
    Catalog rules for courses and books.

    Every mutation follows the same order: the product must exist (else
    ProductNotFoundError), then the acting user must be its creator (else
    UnauthorizedError), then the input is validated, and only then is
    anything written.
    """

    def __init__(self, products: ProductRepository):
        self.products = products

    # Products
    # -----------------------------

    def get_product_by_id(self, product_id: uuid.UUID) -> ProductResponse:
        product = self.products.get_by_id(product_id)
        if product is None:
            logger.warning(f"Product with ID {product_id} not found")
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        return to_product_response(product)

    def list_products(self, filters: ProductFilter) -> PaginatedResult[ProductResponse]:
        items, total = self.products.list_products(filters)
        return PaginatedResult[ProductResponse](
            items=[to_product_response(p) for p in items],
            total_items=total,
            page=filters.page,
            page_size=filters.page_size,
        )

    def get_my_products(
        self, user_id: uuid.UUID, filters: ProductFilter
    ) -> PaginatedResult[ProductResponse]:
        # Scoped to the caller whatever creator filter was passed in
        return self.list_products(filters.model_copy(update={"creator_id": user_id}))

    # Courses
    # -----------------------------

    def get_course_by_id(self, course_id: uuid.UUID, include_details: bool = False) -> CourseResponse:
        course = self._get_course(course_id)
        counts = self.products.count_course_contents([course.id])[course.id]
        modules = self._load_modules(course.id) if include_details else None
        return to_course_response(course, counts, modules)

    def list_courses(self, filters: ProductFilter) -> PaginatedResult[CourseResponse]:
        filters = filters.model_copy(update={"product_type": ProductType.COURSE})
        items, total = self.products.list_courses(filters)
        counts = self.products.count_course_contents(c.id for c in items)
        return PaginatedResult[CourseResponse](
            items=[to_course_response(c, counts[c.id]) for c in items],
            total_items=total,
            page=filters.page,
            page_size=filters.page_size,
        )

    def create_course(self, request: CreateCourseRequest, creator_id: uuid.UUID) -> CourseResponse:
        currency = parse_currency(request.currency)
        course = Course(
            title=request.title,
            description=request.description,
            price=request.price,
            currency=currency,
            creator_id=creator_id,
            is_published=request.is_published,
            cover_image_url=request.cover_image_url,
            level=request.level,
        )
        course = self.products.create(course)
        logger.info(f"Course {course.id} created by user {creator_id}")
        return to_course_response(course, (0, 0))

    def update_course(
        self, course_id: uuid.UUID, request: UpdateCourseRequest, user_id: uuid.UUID
    ) -> CourseResponse:
        course = self._get_course(course_id)
        self._ensure_owner(course, user_id, "update")
        self._apply_update(course, request, REQUIRED_PRODUCT_FIELDS)
        course = self.products.save(course)
        counts = self.products.count_course_contents([course.id])[course.id]
        return to_course_response(course, counts)

    def delete_course(self, course_id: uuid.UUID, user_id: uuid.UUID) -> None:
        course = self._get_course(course_id)
        self._ensure_owner(course, user_id, "delete")
        self.products.soft_delete(course)
        logger.info(f"Course {course_id} deleted by user {user_id}")

    def add_module(
        self, course_id: uuid.UUID, request: CreateModuleRequest, user_id: uuid.UUID
    ) -> ModuleResponse:
        course = self._get_course(course_id)
        self._ensure_owner(course, user_id, "modify")
        module = self.products.add_module(
            Module(
                course_id=course.id,
                title=request.title,
                description=request.description,
                order=request.order,
            )
        )
        return to_module_response(module, [])

    def add_lesson(
        self,
        course_id: uuid.UUID,
        module_id: uuid.UUID,
        request: CreateLessonRequest,
        user_id: uuid.UUID,
    ) -> LessonResponse:
        course = self._get_course(course_id)
        self._ensure_owner(course, user_id, "modify")
        module = self._get_module(course.id, module_id)
        lesson = self.products.add_lesson(
            Lesson(
                module_id=module.id,
                title=request.title,
                description=request.description,
                ref_url=request.ref_url,
                order=request.order,
                type=request.type,
            )
        )
        return to_lesson_response(lesson)

    def delete_module(self, course_id: uuid.UUID, module_id: uuid.UUID, user_id: uuid.UUID) -> None:
        course = self._get_course(course_id)
        self._ensure_owner(course, user_id, "modify")
        module = self._get_module(course.id, module_id)
        self.products.soft_delete_module(module)

    # Books
    # -----------------------------

    def get_book_by_id(self, book_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None) -> BookResponse:
        book = self._get_book(book_id)
        return to_book_response(book, include_download_url=book.creator_id == viewer_id)

    def list_books(self, filters: ProductFilter) -> PaginatedResult[BookResponse]:
        filters = filters.model_copy(update={"product_type": ProductType.BOOK})
        items, total = self.products.list_books(filters)
        return PaginatedResult[BookResponse](
            items=[to_book_response(b) for b in items],
            total_items=total,
            page=filters.page,
            page_size=filters.page_size,
        )

    def create_book(self, request: CreateBookRequest, creator_id: uuid.UUID) -> BookResponse:
        currency = parse_currency(request.currency)
        book = Book(
            title=request.title,
            description=request.description,
            price=request.price,
            currency=currency,
            creator_id=creator_id,
            is_published=request.is_published,
            cover_image_url=request.cover_image_url,
            author=request.author,
            language=request.language,
            format=request.format,
            preview_url=request.preview_url,
            download_url=request.download_url,
        )
        book = self.products.create(book)
        logger.info(f"Book {book.id} created by user {creator_id}")
        return to_book_response(book, include_download_url=True)

    def update_book(
        self, book_id: uuid.UUID, request: UpdateBookRequest, user_id: uuid.UUID
    ) -> BookResponse:
        book = self._get_book(book_id)
        self._ensure_owner(book, user_id, "update")
        self._apply_update(book, request, REQUIRED_BOOK_FIELDS)
        book = self.products.save(book)
        return to_book_response(book, include_download_url=True)

    def delete_book(self, book_id: uuid.UUID, user_id: uuid.UUID) -> None:
        book = self._get_book(book_id)
        self._ensure_owner(book, user_id, "delete")
        self.products.soft_delete(book)
        logger.info(f"Book {book_id} deleted by user {user_id}")

    def publish_book(self, book_id: uuid.UUID, user_id: uuid.UUID) -> BookResponse:
        book = self._get_book(book_id)
        self._ensure_owner(book, user_id, "publish")
        book.is_published = True
        book = self.products.save(book)
        logger.info(f"Book {book_id} published by user {user_id}")
        return to_book_response(book, include_download_url=True)

    # Helpers
    # -----------------------------

    def _get_course(self, course_id: uuid.UUID) -> Course:
        course = self.products.get_course_by_id(course_id)
        if course is None:
            logger.warning(f"Course with ID {course_id} not found")
            raise ProductNotFoundError(f"Course with ID {course_id} not found")
        return course

    def _get_book(self, book_id: uuid.UUID) -> Book:
        book = self.products.get_book_by_id(book_id)
        if book is None:
            logger.warning(f"Book with ID {book_id} not found")
            raise ProductNotFoundError(f"Book with ID {book_id} not found")
        return book

    def _get_module(self, course_id: uuid.UUID, module_id: uuid.UUID) -> Module:
        module = self.products.get_module(course_id, module_id)
        if module is None:
            logger.warning(f"Module {module_id} not found in course {course_id}")
            raise NotFoundError(f"Module with ID {module_id} not found")
        return module

    def _load_modules(self, course_id: uuid.UUID) -> List[ModuleResponse]:
        modules = self.products.list_modules(course_id)
        lessons = self.products.list_lessons(m.id for m in modules)
        return [to_module_response(m, lessons[m.id]) for m in modules]

    @staticmethod
    def _ensure_owner(product: Product, user_id: uuid.UUID, action: str) -> None:
        if product.creator_id != user_id:
            kind = product.type.value.lower()
            logger.warning(f"User {user_id} tried to {action} {kind} {product.id} without permission")
            raise UnauthorizedError(f"You don't have permission to {action} this {kind}")

    @staticmethod
    def _apply_update(product: Product, request: UpdateProductRequest, required: set) -> None:
        """
        Copy the explicitly supplied fields of request onto product.

        All values are validated before the first write, so a rejected update
        leaves the product untouched.
        """
        changes = request.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if value is None and field in required:
                raise ValidationError(f"{field} cannot be null", "FIELD_REQUIRED")

        if "currency" in changes:
            changes["currency"] = parse_currency(changes["currency"])

        for field, value in changes.items():
            setattr(product, field, value)


# DTO projection
# -----------------------------

def _product_fields(product: Product) -> dict:
    # Enumerations leave as their string values, never as raw codes
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "price": product.price,
        "currency": product.currency.value,
        "creator_id": product.creator_id,
        "is_published": product.is_published,
        "cover_image_url": product.cover_image_url,
        "type": product.type.value,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def to_product_response(product: Product) -> ProductResponse:
    return ProductResponse(**_product_fields(product))


def to_course_response(
    course: Course,
    counts: Tuple[int, int],
    modules: Optional[List[ModuleResponse]] = None,
) -> CourseResponse:
    module_count, lesson_count = counts
    return CourseResponse(
        **_product_fields(course),
        level=course.level,
        module_count=module_count,
        lesson_count=lesson_count,
        modules=modules,
    )


def to_book_response(book: Book, include_download_url: bool = False) -> BookResponse:
    return BookResponse(
        **_product_fields(book),
        author=book.author,
        language=book.language,
        format=book.format,
        preview_url=book.preview_url,
        download_url=book.download_url if include_download_url else None,
    )


def to_module_response(module: Module, lessons: List[Lesson]) -> ModuleResponse:
    return ModuleResponse(
        id=module.id,
        title=module.title,
        description=module.description,
        order=module.order,
        lessons=[to_lesson_response(lesson) for lesson in lessons],
    )


def to_lesson_response(lesson: Lesson) -> LessonResponse:
    return LessonResponse(
        id=lesson.id,
        title=lesson.title,
        description=lesson.description,
        ref_url=lesson.ref_url,
        order=lesson.order,
        type=lesson.type.value,
    )
