"""SQLAlchemy models for the product catalog.

Defines Category and Product tables for persistent storage.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.domain.entities import Category, Product
from storefront.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryModel(Base):
    """Category row.

    Deleting a category deletes every product that references it, both
    through the foreign key's ON DELETE CASCADE and the ORM relationship.

    Attributes:
        id: Unique category identifier (UUID string).
        name: Display name.
        slug: URL-safe name, unique across categories.
        created_at: Creation timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Relationships
    products: Mapped[list["ProductModel"]] = relationship(
        "ProductModel",
        back_populates="category",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, slug={self.slug})>"

    def to_entity(self) -> Category:
        """Convert to an immutable record."""
        return Category(
            id=self.id,
            name=self.name,
            slug=self.slug,
            created_at=self.created_at,
        )


class ProductModel(Base):
    """Product row.

    Attributes:
        id: Unique product identifier (UUID string).
        name: Product name.
        description: Product description.
        price: Non-negative price magnitude.
        category_id: Owning category.
        material: Material description.
        sizes: Size labels as a JSON array.
        colors: Color labels as a JSON array.
        image_paths: Image locators as a JSON array.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    material: Mapped[str] = mapped_column(String(200), nullable=False)
    sizes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    colors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_paths: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    category: Mapped["CategoryModel"] = relationship(
        "CategoryModel",
        back_populates="products",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]})>"

    def to_entity(self) -> Product:
        """Convert to an immutable record.

        The category relationship must already be loaded.
        """
        return Product(
            id=self.id,
            name=self.name,
            description=self.description,
            price=Decimal(self.price),
            category_id=self.category_id,
            category_name=self.category.name,
            category_slug=self.category.slug,
            material=self.material,
            sizes=tuple(self.sizes or ()),
            colors=tuple(self.colors or ()),
            image_paths=tuple(self.image_paths or ()),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
