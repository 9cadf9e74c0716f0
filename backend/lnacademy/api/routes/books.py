import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from lnacademy.api.dependencies import (
    get_current_user,
    get_listing_filter,
    get_optional_user,
    get_product_service,
)
from lnacademy.models.user import User
from lnacademy.schemas.product import (
    BookResponse,
    CreateBookRequest,
    PaginatedResult,
    ProductFilter,
    UpdateBookRequest,
)
from lnacademy.services.product_service import ProductService

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=PaginatedResult[BookResponse])
def list_books(
    filters: ProductFilter = Depends(get_listing_filter),
    products: ProductService = Depends(get_product_service),
):
    """List published books"""
    return products.list_books(filters)


@router.get("/{book_id}", response_model=BookResponse)
def get_book(
    book_id: uuid.UUID,
    viewer: Optional[User] = Depends(get_optional_user),
    products: ProductService = Depends(get_product_service),
):
    """Get a book; the download URL is only shown to its creator"""
    return products.get_book_by_id(book_id, viewer.id if viewer else None)


@router.post("", response_model=BookResponse)
def create_book(
    request: CreateBookRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    book = products.create_book(request, current_user.id)
    response.headers["Location"] = f"/api/books/{book.id}"
    return book


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    book_id: uuid.UUID,
    request: UpdateBookRequest,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    return products.update_book(book_id, request, current_user.id)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    products.delete_book(book_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{book_id}/publish", response_model=BookResponse)
def publish_book(
    book_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    """Publish a draft book; creator only"""
    return products.publish_book(book_id, current_user.id)
