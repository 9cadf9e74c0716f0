import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from lnacademy.api.dependencies import get_current_user, get_listing_filter, get_product_service
from lnacademy.models.user import User
from lnacademy.schemas.product import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PaginatedResult,
    ProductFilter,
    ProductResponse,
)
from lnacademy.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=PaginatedResult[ProductResponse])
def list_products(
    filters: ProductFilter = Depends(get_listing_filter),
    products: ProductService = Depends(get_product_service),
):
    """List published courses and books"""
    return products.list_products(filters)


# Declared before /{product_id} so "my" is not parsed as an id
@router.get("/my", response_model=PaginatedResult[ProductResponse])
def list_my_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search_term: Optional[str] = Query(None),
    include_unpublished: bool = Query(True),
    current_user: User = Depends(get_current_user),
    products: ProductService = Depends(get_product_service),
):
    """List the caller's own products, drafts included by default"""
    filters = ProductFilter(
        page=page,
        page_size=page_size,
        search_term=search_term,
        include_unpublished=include_unpublished,
    )
    return products.get_my_products(current_user.id, filters)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: uuid.UUID,
    products: ProductService = Depends(get_product_service),
):
    """Get a single product of either type"""
    return products.get_product_by_id(product_id)
