"""Public catalog endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_service
from storefront.api.schemas import CatalogResponse, CatalogSectionSchema
from storefront.application.synchronizer import CatalogSynchronizer

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get(
    "",
    response_model=CatalogResponse,
    summary="Grouped catalog",
    description=(
        "Products grouped under their categories. Categories are in name "
        "order, products newest first; empty categories are included."
    ),
)
async def get_catalog(
    service: Annotated[CatalogSynchronizer, Depends(get_service)],
) -> CatalogResponse:
    """Get the public catalog."""
    groups = await service.grouped_catalog()
    return CatalogResponse(sections=[CatalogSectionSchema.from_group(g) for g in groups])
