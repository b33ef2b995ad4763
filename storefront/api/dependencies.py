"""Shared route dependencies."""

from typing import Annotated

from fastapi import Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.application.synchronizer import CatalogSynchronizer, get_synchronizer
from storefront.catalog.assets import AssetStoreGateway, get_asset_gateway
from storefront.domain.entities import ImageUpload, ProductDraft
from storefront.domain.value_objects import AdminContext
from storefront.infrastructure.database import get_session


def get_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogSynchronizer:
    """Get catalog synchronizer with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_synchronizer(session, request_id=request_id)


def get_admin(request: Request) -> AdminContext | None:
    """Admin capability established by the auth middleware, if any."""
    return getattr(request.state, "admin", None)


async def product_draft_form(
    gateway: Annotated[AssetStoreGateway, Depends(get_asset_gateway)],
    name: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    price: Annotated[str, Form()] = "",
    category_id: Annotated[str, Form()] = "",
    material: Annotated[str, Form()] = "",
    sizes: Annotated[list[str] | None, Form()] = None,
    colors: Annotated[list[str] | None, Form()] = None,
    retained_images: Annotated[list[str] | None, Form()] = None,
    images: Annotated[list[UploadFile] | None, File()] = None,
) -> ProductDraft:
    """Build a product draft from a multipart form.

    Fields are passed through as entered; validation happens in the
    synchronizer. Empty file parts, as browsers send when no file was
    picked, are skipped. Parts whose declared size is over the upload
    limit are rejected before they are read, and no part is read past
    the limit.
    """
    draft = ProductDraft(
        name=name,
        description=description,
        price=price,
        category_id=category_id,
        material=material,
        retained_images=[url for url in retained_images or [] if url],
    )
    for label in sizes or []:
        draft.add_size(label)
    for label in colors or []:
        draft.add_color(label)

    for upload in images or []:
        if not upload.filename:
            continue
        if upload.size is not None:
            gateway.check_size(upload.filename, upload.size)
        content = await upload.read(gateway.max_bytes + 1)
        draft.attach_image(
            ImageUpload(
                filename=upload.filename,
                content=content,
                content_type=upload.content_type,
            )
        )
    return draft
