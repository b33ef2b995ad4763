"""Product API endpoints.

Provides endpoints for listing, reading, submitting and deleting
products, plus the change stream viewers use to know when to re-fetch.
"""

import json
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from storefront.api.dependencies import get_admin, get_service, product_draft_form
from storefront.api.schemas import (
    DeletionResponse,
    ErrorResponse,
    ProductResponse,
    ProductsListResponse,
    ProductWriteResponse,
)
from storefront.application.notifier import ChangeNotifier, get_product_notifier
from storefront.application.synchronizer import CatalogSynchronizer
from storefront.domain.entities import ProductDraft
from storefront.domain.value_objects import AdminContext

router = APIRouter(prefix="/products", tags=["Products"])


async def _change_events(notifier: ChangeNotifier) -> AsyncIterator[str]:
    """Format change events as server-sent events."""
    yield ": connected\n\n"
    async for event in notifier.stream():
        yield f"event: {event.event_type}\ndata: {json.dumps(event.to_dict())}\n\n"


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductsListResponse,
    summary="List products",
    description="List every product with its category, newest first.",
)
async def list_products(
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
) -> ProductsListResponse:
    """List products, newest first."""
    products = await service.list_products()
    return ProductsListResponse(
        items=[ProductResponse.from_entity(p) for p in products],
        total=len(products),
    )


@router.get(
    "/changes",
    response_class=StreamingResponse,
    summary="Product change stream",
    description=(
        "Server-sent events; one payload-less event per burst of product "
        "changes. Clients re-fetch the listing on each event."
    ),
)
async def product_changes() -> StreamingResponse:
    """Stream product change events to a viewer."""
    return StreamingResponse(
        _change_events(get_product_notifier()),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
) -> ProductResponse:
    """Get a product by ID."""
    product = await service.get_product(product_id)
    return ProductResponse.from_entity(product)


@router.post(
    "",
    response_model=ProductWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Create product",
    description="Create a product from a multipart form with at least one image.",
)
async def create_product(
    draft: Annotated[ProductDraft, Depends(product_draft_form)],
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
    admin: Annotated[AdminContext | None, Depends(get_admin)],
) -> ProductWriteResponse:
    """Create a product.

    New images are uploaded in the order given before the product row is
    written.

    Args:
        draft: Form state.
        service: Catalog synchronizer.
        admin: Admin capability.

    Returns:
        Stored product and uploaded locators.
    """
    draft.product_id = None
    result = await service.submit_product(draft, admin)
    return ProductWriteResponse.from_result(result)


@router.put(
    "/{product_id}",
    response_model=ProductWriteResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Update product",
    description=(
        "Replace every field of a product. Stored images are "
        "retained_images followed by newly uploaded images."
    ),
)
async def update_product(
    product_id: str,
    draft: Annotated[ProductDraft, Depends(product_draft_form)],
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
    admin: Annotated[AdminContext | None, Depends(get_admin)],
) -> ProductWriteResponse:
    """Update a product.

    Args:
        product_id: Product identifier.
        draft: Form state.
        service: Catalog synchronizer.
        admin: Admin capability.

    Returns:
        Stored product with uploaded and cleaned-up locators.
    """
    draft.product_id = product_id
    result = await service.submit_product(draft, admin)
    return ProductWriteResponse.from_result(result)


@router.delete(
    "/{product_id}",
    response_model=DeletionResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
    admin: Annotated[AdminContext | None, Depends(get_admin)],
) -> DeletionResponse:
    """Delete a product and its stored images."""
    result = await service.delete_product(product_id, admin)
    return DeletionResponse.from_result(result)
