"""Domain layer - records, value objects, events and exceptions.

This module exports the catalog's core building blocks:

- **Records**: Immutable snapshots of stored rows (Category, Product)
- **Value Objects**: Slug, Price, AdminContext, ImageUpload, ProductData
- **Drafts**: Mutable admin form state (ProductDraft)
- **Events**: Payload-less change signals (ChangeEvent)
- **Exceptions**: Typed failures surfaced to callers

Example usage:
    from storefront.domain import ProductDraft, ImageUpload

    draft = ProductDraft(name="Classic", category_id=category.id)
    draft.add_color("Gold")
    draft.attach_image(ImageUpload("front.jpg", data))
"""

from storefront.domain.base import Entity, ValueObject
from storefront.domain.entities import (
    Category,
    CategoryGroup,
    ImageUpload,
    Product,
    ProductData,
    ProductDraft,
)
from storefront.domain.events import CATEGORIES_TOPIC, PRODUCTS_TOPIC, ChangeEvent
from storefront.domain.exceptions import (
    AuthorizationError,
    CatalogError,
    ConflictError,
    DomainError,
    NotFoundError,
    StorageError,
    UploadError,
    ValidationError,
)
from storefront.domain.value_objects import AdminContext, Price, Slug, dedupe_labels

__all__ = [
    # Base classes
    "Entity",
    "ValueObject",
    # Records
    "Category",
    "CategoryGroup",
    "Product",
    # Value Objects
    "AdminContext",
    "ImageUpload",
    "Price",
    "ProductData",
    "Slug",
    "dedupe_labels",
    # Drafts
    "ProductDraft",
    # Events
    "CATEGORIES_TOPIC",
    "PRODUCTS_TOPIC",
    "ChangeEvent",
    # Exceptions
    "AuthorizationError",
    "CatalogError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "StorageError",
    "UploadError",
    "ValidationError",
]
