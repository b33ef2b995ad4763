"""Category API endpoints.

Provides endpoints for listing, creating and deleting categories.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from storefront.api.dependencies import get_admin, get_service
from storefront.api.schemas import (
    CategoriesListResponse,
    CategoryCreateRequest,
    CategoryResponse,
    DeletionResponse,
    ErrorResponse,
)
from storefront.application.synchronizer import CatalogSynchronizer
from storefront.domain.value_objects import AdminContext

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=CategoriesListResponse,
    summary="List categories",
    description="List every category, ordered by name.",
)
async def list_categories(
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
) -> CategoriesListResponse:
    """List categories in name order."""
    categories = await service.list_categories()
    return CategoriesListResponse(
        items=[CategoryResponse.from_entity(c) for c in categories],
        total=len(categories),
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Create category",
    description="Create a category; its slug is derived from the name.",
)
async def create_category(
    request: CategoryCreateRequest,
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
    admin: Annotated[AdminContext | None, Depends(get_admin)],
) -> CategoryResponse:
    """Create a category.

    Args:
        request: Category creation request.
        service: Catalog synchronizer.
        admin: Admin capability.

    Returns:
        Created category.
    """
    category = await service.create_category(request.name, admin)
    return CategoryResponse.from_entity(category)


@router.delete(
    "/{category_id}",
    response_model=DeletionResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete category",
    description="Delete a category together with every product in it. Irreversible.",
)
async def delete_category(
    category_id: str,
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
    admin: Annotated[AdminContext | None, Depends(get_admin)],
) -> DeletionResponse:
    """Delete a category and its products.

    Args:
        category_id: Category identifier.
        service: Catalog synchronizer.
        admin: Admin capability.

    Returns:
        Deletion result with the image locators that were cleaned up.
    """
    result = await service.delete_category(category_id, admin)
    return DeletionResponse.from_result(result)
