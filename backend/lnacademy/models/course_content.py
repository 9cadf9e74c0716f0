import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.sql import func
from lnacademy.core.database import Base


class LessonType(str, enum.Enum):
    VIDEO = "Video"
    ARTICLE = "Article"
    QUIZ = "Quiz"


class Module(Base):
    """
    A section of a course.

    order only sorts modules inside one course; it is not required to be
    contiguous or unique.
    """
    __tablename__ = "modules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    order = Column("order", Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_modules_course_id_order", "course_id", "order"),)


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    module_id = Column(
        Uuid, ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    ref_url = Column(Text, nullable=False, default="")
    order = Column("order", Integer, nullable=False, default=0)
    type = Column(Enum(LessonType, name="lesson_type"), nullable=False, default=LessonType.VIDEO)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_lessons_module_id_order", "module_id", "order"),)
