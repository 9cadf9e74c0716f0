import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from lnacademy.api.dependencies import get_current_user, get_listing_filter, get_product_service
from lnacademy.models.user import User
from lnacademy.schemas.product import (
    CourseResponse,
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
    LessonResponse,
    ModuleResponse,
    PaginatedResult,
    ProductFilter,
    UpdateCourseRequest,
)
from lnacademy.services.product_service import ProductService

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=PaginatedResult[CourseResponse])
def list_courses(
    filters: ProductFilter = Depends(get_listing_filter),
    products: ProductService = Depends(get_product_service),
):
    """List published courses"""
    return products.list_courses(filters)


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: uuid.UUID,
    include_details: bool = Query(False),
    products: ProductService = Depends(get_product_service),
):
    """Get a course; include_details adds its modules and lessons"""
    return products.get_course_by_id(course_id, include_details)


@router.post("", response_model=CourseResponse)
def create_course(
    request: CreateCourseRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    """Create a course owned by the caller"""
    course = products.create_course(request, current_user.id)
    response.headers["Location"] = f"/api/courses/{course.id}"
    return course


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: uuid.UUID,
    request: UpdateCourseRequest,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    """Update the fields present in the body; creator only"""
    return products.update_course(course_id, request, current_user.id)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    """Soft delete a course with its modules and lessons; creator only"""
    products.delete_course(course_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{course_id}/modules",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_module(
    course_id: uuid.UUID,
    request: CreateModuleRequest,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    return products.add_module(course_id, request, current_user.id)


@router.delete("/{course_id}/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(
    course_id: uuid.UUID,
    module_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    products.delete_module(course_id, module_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{course_id}/modules/{module_id}/lessons",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_lesson(
    course_id: uuid.UUID,
    module_id: uuid.UUID,
    request: CreateLessonRequest,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    return products.add_lesson(course_id, module_id, request, current_user.id)
