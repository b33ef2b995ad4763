"""Catalog records and write payloads.

Records (Category, Product) are immutable snapshots returned by the
repositories. ProductData is a validated write payload; ProductDraft is
the mutable state of the admin product form before it is submitted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import PurePosixPath
from typing import Any, Self

from storefront.domain.base import Entity, ValueObject
from storefront.domain.exceptions import ValidationError
from storefront.domain.value_objects import Price, dedupe_labels


# ============================================================================
# Records
# ============================================================================


@dataclass(frozen=True)
class Category(Entity):
    """A node of the catalog taxonomy.

    Attributes:
        id: Unique category identifier.
        name: Display name.
        slug: URL-safe name, unique across categories.
        created_at: Creation timestamp.
    """

    name: str
    slug: str
    created_at: datetime


@dataclass(frozen=True)
class Product(Entity):
    """A product joined with its owning category.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Product description.
        price: Non-negative price magnitude.
        category_id: Owning category.
        category_name: Display name of the owning category.
        category_slug: Slug of the owning category.
        material: Material description.
        sizes: Ordered, de-duplicated size labels.
        colors: Ordered, de-duplicated color labels.
        image_paths: Ordered image locators; never empty.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    name: str
    description: str
    price: Decimal
    category_id: str
    category_name: str
    category_slug: str
    material: str
    sizes: tuple[str, ...]
    colors: tuple[str, ...]
    image_paths: tuple[str, ...]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "category_id": self.category_id,
            "category": {"name": self.category_name, "slug": self.category_slug},
            "material": self.material,
            "sizes": list(self.sizes),
            "colors": list(self.colors),
            "image_paths": list(self.image_paths),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class CategoryGroup(ValueObject):
    """Products of one category, as the public catalog view shows them."""

    category: Category
    products: tuple[Product, ...]


# ============================================================================
# Write Payloads
# ============================================================================


def _required_text(field_name: str, value: str | None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field_name, "must not be empty")
    return cleaned


@dataclass(frozen=True)
class ProductData(ValueObject):
    """Validated full field set of a product write.

    Updates replace every mutable field with these values; there is no
    partial merge.
    """

    name: str
    description: str
    price: Decimal
    category_id: str
    material: str
    sizes: tuple[str, ...]
    colors: tuple[str, ...]
    image_paths: tuple[str, ...]

    @classmethod
    def validate(
        cls,
        *,
        name: str | None,
        description: str | None,
        price: Any,
        category_id: str | None,
        material: str | None,
        sizes: list[str] | tuple[str, ...] | None = None,
        colors: list[str] | tuple[str, ...] | None = None,
        image_paths: list[str] | tuple[str, ...] | None = None,
    ) -> Self:
        """Check preconditions and build a write payload.

        Fields are checked in form order and the first failure is raised.
        Whether the category exists is checked by the repository.

        Returns:
            ProductData with trimmed text and normalized label lists.

        Raises:
            ValidationError: Naming the first failing field.
        """
        clean_name = _required_text("name", name)
        clean_description = _required_text("description", description)
        parsed_price = Price.parse(price)
        clean_category = _required_text("category_id", category_id)
        clean_material = _required_text("material", material)
        paths = tuple(p for p in (image_paths or ()) if p and p.strip())
        if not paths:
            raise ValidationError("image_paths", "at least one image is required")

        return cls(
            name=clean_name,
            description=clean_description,
            price=parsed_price.amount,
            category_id=clean_category,
            material=clean_material,
            sizes=dedupe_labels(sizes),
            colors=dedupe_labels(colors),
            image_paths=paths,
        )


@dataclass(frozen=True)
class ImageUpload(ValueObject):
    """Raw image bytes waiting to be uploaded.

    Attributes:
        filename: Original file name as supplied by the client.
        content: Raw bytes, stored as-is.
        content_type: MIME type reported by the client, if any.
    """

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot, or an empty string."""
        return PurePosixPath(self.filename).suffix.lstrip(".").lower()

    @property
    def size(self) -> int:
        """Size in bytes."""
        return len(self.content)


@dataclass
class ProductDraft:
    """Product form state before submission.

    Holds field values exactly as entered. Existing image locators that
    the admin keeps are in ``retained_images``; files picked for upload
    are in ``new_images``. On submit the synchronizer uploads the new
    files and stores ``retained_images + uploaded`` in that order.
    """

    name: str = ""
    description: str = ""
    price: Any = ""
    category_id: str = ""
    material: str = ""
    sizes: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    retained_images: list[str] = field(default_factory=list)
    new_images: list[ImageUpload] = field(default_factory=list)
    product_id: str | None = None

    @classmethod
    def from_product(cls, product: Product) -> Self:
        """Start editing an existing product.

        Args:
            product: Record being edited.

        Returns:
            Draft pre-filled with the record's values.
        """
        return cls(
            name=product.name,
            description=product.description,
            price=str(product.price),
            category_id=product.category_id,
            material=product.material,
            sizes=list(product.sizes),
            colors=list(product.colors),
            retained_images=list(product.image_paths),
            product_id=product.id,
        )

    @property
    def is_editing(self) -> bool:
        """Whether the draft updates an existing product."""
        return self.product_id is not None

    @property
    def has_images(self) -> bool:
        """Whether at least one image is retained or pending upload."""
        return bool(self.retained_images or self.new_images)

    def add_size(self, label: str) -> None:
        """Add a size label; blank or already-present labels are ignored."""
        _add_label(self.sizes, label)

    def remove_size(self, label: str) -> None:
        """Remove a size label by exact match."""
        self.sizes = [s for s in self.sizes if s != label]

    def add_color(self, label: str) -> None:
        """Add a color label; blank or already-present labels are ignored."""
        _add_label(self.colors, label)

    def remove_color(self, label: str) -> None:
        """Remove a color label by exact match."""
        self.colors = [c for c in self.colors if c != label]

    def attach_image(self, upload: ImageUpload) -> None:
        """Queue a file for upload on submit."""
        self.new_images.append(upload)

    def detach_image(self, locator: str) -> None:
        """Stop retaining an existing image."""
        self.retained_images = [url for url in self.retained_images if url != locator]

    def discard_upload(self, index: int) -> None:
        """Drop a queued file by position."""
        del self.new_images[index]


def _add_label(labels: list[str], label: str) -> None:
    cleaned = label.strip()
    if cleaned and cleaned not in labels:
        labels.append(cleaned)
