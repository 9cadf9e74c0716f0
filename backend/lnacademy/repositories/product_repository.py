import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple, Type

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from lnacademy.models.course_content import Lesson, Module
from lnacademy.models.product import Book, Course, Product
from lnacademy.schemas.product import ProductFilter

logger = logging.getLogger(__name__)


class ProductRepository:
    """
    Catalog store over the shared products table and the course content
    tables.

    Soft-deleted rows (deleted_at set) never come back from any method here.
    Querying Course or Book restricts rows by the type discriminator;
    querying Product returns a mix of both, each loaded as its own class.
    """

    def __init__(self, db: Session):
        self.db = db

    # Products
    # -----------------------------

    def _active(self, entity: Type[Product]) -> Query:
        return self.db.query(entity).filter(entity.deleted_at.is_(None))

    def get_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        return self._active(Product).filter(Product.id == product_id).first()

    def get_course_by_id(self, course_id: uuid.UUID) -> Optional[Course]:
        return self._active(Course).filter(Course.id == course_id).first()

    def get_book_by_id(self, book_id: uuid.UUID) -> Optional[Book]:
        return self._active(Book).filter(Book.id == book_id).first()

    def list_products(self, filters: ProductFilter) -> Tuple[List[Product], int]:
        return self._paginate(Product, filters)

    def list_courses(self, filters: ProductFilter) -> Tuple[List[Course], int]:
        return self._paginate(Course, filters)

    def list_books(self, filters: ProductFilter) -> Tuple[List[Book], int]:
        return self._paginate(Book, filters)

    def _paginate(self, entity: Type[Product], filters: ProductFilter) -> Tuple[list, int]:
        """Return (items of the requested page, total matching items)."""
        query = self.apply_filters(self._active(entity), entity, filters)
        total_items = query.count()
        items = (
            query.order_by(entity.title.asc(), entity.id.asc())
            .offset(filters.offset)
            .limit(filters.page_size)
            .all()
        )
        return items, total_items

    @staticmethod
    def apply_filters(query: Query, entity: Type[Product], filters: ProductFilter) -> Query:
        if not filters.include_unpublished:
            query = query.filter(entity.is_published.is_(True))

        if filters.search_term and filters.search_term.strip():
            # SQLite's lower() folds ASCII only, so non-ASCII text matches
            # case-sensitively there; PostgreSQL folds by locale
            term = filters.search_term.lower()
            # autoescape so % and _ in the term match literally
            query = query.filter(
                func.lower(entity.title).contains(term, autoescape=True)
                | func.lower(entity.description).contains(term, autoescape=True)
            )

        if filters.product_type is not None:
            query = query.filter(entity.type == filters.product_type)

        if filters.currency is not None:
            query = query.filter(entity.currency == filters.currency)

        if filters.min_price is not None:
            query = query.filter(entity.price >= filters.min_price)

        if filters.max_price is not None:
            query = query.filter(entity.price <= filters.max_price)

        if filters.creator_id is not None:
            query = query.filter(entity.creator_id == filters.creator_id)

        return query

    def create(self, product: Product) -> Product:
        self.db.add(product)
        self.commit()
        self.db.refresh(product)
        return product

    def save(self, product: Product) -> Product:
        """Persist pending changes on an already loaded product."""
        product.updated_at = _utcnow()
        self.commit()
        self.db.refresh(product)
        return product

    def soft_delete(self, product: Product) -> None:
        """
        Soft delete a product and unpublish it.

        Courses cascade: their modules and those modules' lessons are soft
        deleted in the same commit.
        """
        now = _utcnow()
        product.deleted_at = now
        product.is_published = False
        if isinstance(product, Course):
            for module in self.list_modules(product.id):
                self._mark_module_deleted(module, now)
        self.commit()

    # Course content
    # -----------------------------

    def get_module(self, course_id: uuid.UUID, module_id: uuid.UUID) -> Optional[Module]:
        return (
            self.db.query(Module)
            .filter(
                Module.id == module_id,
                Module.course_id == course_id,
                Module.deleted_at.is_(None),
            )
            .first()
        )

    def list_modules(self, course_id: uuid.UUID) -> List[Module]:
        return (
            self.db.query(Module)
            .filter(Module.course_id == course_id, Module.deleted_at.is_(None))
            .order_by(Module.order.asc(), Module.id.asc())
            .all()
        )

    def list_lessons(self, module_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[Lesson]]:
        """Active lessons grouped by module id, each group in display order."""
        module_ids = list(module_ids)
        grouped: Dict[uuid.UUID, List[Lesson]] = {module_id: [] for module_id in module_ids}
        if not module_ids:
            return grouped

        lessons = (
            self.db.query(Lesson)
            .filter(Lesson.module_id.in_(module_ids), Lesson.deleted_at.is_(None))
            .order_by(Lesson.order.asc(), Lesson.id.asc())
            .all()
        )
        for lesson in lessons:
            grouped[lesson.module_id].append(lesson)
        return grouped

    def count_course_contents(
        self, course_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, Tuple[int, int]]:
        """
        Map each course id to (module_count, lesson_count).

        Counted with aggregate queries so the numbers do not depend on which
        children happen to be loaded. Lessons of deleted modules are not
        counted.
        """
        course_ids = list(course_ids)
        counts = {course_id: (0, 0) for course_id in course_ids}
        if not course_ids:
            return counts

        module_rows = (
            self.db.query(Module.course_id, func.count(Module.id))
            .filter(Module.course_id.in_(course_ids), Module.deleted_at.is_(None))
            .group_by(Module.course_id)
            .all()
        )
        lesson_rows = (
            self.db.query(Module.course_id, func.count(Lesson.id))
            .join(Lesson, Lesson.module_id == Module.id)
            .filter(
                Module.course_id.in_(course_ids),
                Module.deleted_at.is_(None),
                Lesson.deleted_at.is_(None),
            )
            .group_by(Module.course_id)
            .all()
        )

        module_counts = dict(module_rows)
        lesson_counts = dict(lesson_rows)
        for course_id in course_ids:
            counts[course_id] = (
                module_counts.get(course_id, 0),
                lesson_counts.get(course_id, 0),
            )
        return counts

    def add_module(self, module: Module) -> Module:
        self.db.add(module)
        self.commit()
        self.db.refresh(module)
        return module

    def add_lesson(self, lesson: Lesson) -> Lesson:
        self.db.add(lesson)
        self.commit()
        self.db.refresh(lesson)
        return lesson

    def soft_delete_module(self, module: Module) -> None:
        self._mark_module_deleted(module, _utcnow())
        self.commit()

    def _mark_module_deleted(self, module: Module, when: datetime) -> None:
        module.deleted_at = when
        for lesson in self.list_lessons([module.id])[module.id]:
            lesson.deleted_at = when

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error saving catalog changes to database")
            raise


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
