"""API schemas for the storefront catalog.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.application.synchronizer import DeletionResult, SubmissionResult
from storefront.domain.entities import Category, CategoryGroup, Product


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(
        ...,
        max_length=200,
        description="Display name; the slug is derived from it",
        examples=["Wrist Watches"],
    )


class CategoryResponse(BaseModel):
    """Category representation."""

    id: str
    name: str
    slug: str
    created_at: datetime

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryResponse":
        """Convert Category record to response schema."""
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            created_at=category.created_at,
        )


class CategoriesListResponse(BaseModel):
    """List of categories in name order."""

    items: list[CategoryResponse]
    total: int


# ============================================================================
# Product Schemas
# ============================================================================


class CategoryRefSchema(BaseModel):
    """Owning category as joined onto a product."""

    name: str
    slug: str


class ProductResponse(BaseModel):
    """Product representation."""

    id: str
    name: str
    description: str
    price: Decimal = Field(..., description="Non-negative price magnitude")
    category_id: str
    category: CategoryRefSchema
    material: str
    sizes: list[str]
    colors: list[str]
    image_paths: list[str] = Field(..., description="Public image locators, in display order")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        """Convert Product record to response schema."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            category_id=product.category_id,
            category=CategoryRefSchema(name=product.category_name, slug=product.category_slug),
            material=product.material,
            sizes=list(product.sizes),
            colors=list(product.colors),
            image_paths=list(product.image_paths),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductsListResponse(BaseModel):
    """List of products, newest first."""

    items: list[ProductResponse]
    total: int


class ProductWriteResponse(BaseModel):
    """Result of creating or updating a product."""

    product: ProductResponse
    uploaded_images: list[str] = Field(default_factory=list)
    removed_images: list[str] = Field(default_factory=list)
    orphaned_images: list[str] = Field(
        default_factory=list,
        description="Detached images that could not be removed from storage",
    )

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "ProductWriteResponse":
        """Convert SubmissionResult to response schema."""
        return cls(
            product=ProductResponse.from_entity(result.product),
            uploaded_images=result.uploaded_images,
            removed_images=result.removed_images,
            orphaned_images=result.orphaned_images,
        )


class DeletionResponse(BaseModel):
    """Result of deleting a product or a category."""

    id: str
    removed_images: list[str] = Field(default_factory=list)
    orphaned_images: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: DeletionResult) -> "DeletionResponse":
        """Convert DeletionResult to response schema."""
        return cls(
            id=result.entity_id,
            removed_images=result.removed_images,
            orphaned_images=result.orphaned_images,
        )


# ============================================================================
# Catalog Schemas
# ============================================================================


class CatalogSectionSchema(BaseModel):
    """One category with its products."""

    category: CategoryResponse
    products: list[ProductResponse]

    @classmethod
    def from_group(cls, group: CategoryGroup) -> "CatalogSectionSchema":
        """Convert CategoryGroup to response schema."""
        return cls(
            category=CategoryResponse.from_entity(group.category),
            products=[ProductResponse.from_entity(p) for p in group.products],
        )


class CatalogResponse(BaseModel):
    """Public catalog grouped by category."""

    sections: list[CatalogSectionSchema]
