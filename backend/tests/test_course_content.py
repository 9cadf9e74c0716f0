from decimal import Decimal

import pytest

from lnacademy.core.exceptions import NotFoundError
from lnacademy.models.course_content import Lesson, Module
from lnacademy.schemas.product import (
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
)


@pytest.fixture
def course_with_content(product_service, make_user):
    owner = make_user()
    course = product_service.create_course(
        CreateCourseRequest(title="Channels", description="", price=Decimal("10")),
        owner.id,
    )
    modules = []
    for title in ("Basics", "Routing"):
        module = product_service.add_module(course.id, CreateModuleRequest(title=title), owner.id)
        for lesson in ("One", "Two"):
            product_service.add_lesson(course.id, module.id, CreateLessonRequest(title=lesson), owner.id)
        modules.append(module)
    return owner, course, modules


def test_deleting_a_course_soft_deletes_modules_and_lessons(db, product_service, course_with_content):
    owner, course, _ = course_with_content

    product_service.delete_course(course.id, owner.id)

    modules = db.query(Module).filter(Module.course_id == course.id).all()
    lessons = db.query(Lesson).filter(Lesson.module_id.in_([m.id for m in modules])).all()
    assert len(modules) == 2
    assert len(lessons) == 4
    assert all(m.deleted_at is not None for m in modules)
    assert all(lesson.deleted_at is not None for lesson in lessons)


def test_deleting_a_module_soft_deletes_only_its_lessons(db, product_service, course_with_content):
    owner, course, (removed, kept) = course_with_content

    product_service.delete_module(course.id, removed.id, owner.id)

    removed_lessons = db.query(Lesson).filter(Lesson.module_id == removed.id).all()
    kept_lessons = db.query(Lesson).filter(Lesson.module_id == kept.id).all()
    assert db.get(Module, removed.id).deleted_at is not None
    assert db.get(Module, kept.id).deleted_at is None
    assert len(removed_lessons) == 2
    assert all(lesson.deleted_at is not None for lesson in removed_lessons)
    assert all(lesson.deleted_at is None for lesson in kept_lessons)


def test_deleted_module_takes_no_new_lessons(product_service, course_with_content):
    owner, course, (removed, _) = course_with_content
    product_service.delete_module(course.id, removed.id, owner.id)

    with pytest.raises(NotFoundError):
        product_service.add_lesson(course.id, removed.id, CreateLessonRequest(title="Late"), owner.id)
