"""Category and product repositories.

Provide CRUD operations over the relational store. Each repository works
on the caller's AsyncSession and returns immutable domain records; commit
is left to the caller so a write and its follow-up notification happen in
the right order.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.models import CategoryModel, ProductModel, utcnow
from storefront.domain.entities import Category, Product, ProductData
from storefront.domain.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from storefront.domain.value_objects import Slug

logger = structlog.get_logger()


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate unexpected SQLAlchemy failures into StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageError(operation, str(e)) from e


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            category = await repo.create("Wrist Watches")
            await session.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def list(self) -> list[Category]:
        """List all categories sorted by name ascending.

        Returns:
            Categories in name order.
        """
        query = select(CategoryModel).order_by(CategoryModel.name.asc(), CategoryModel.slug.asc())
        with _store_errors("list_categories"):
            result = await self.session.execute(query)
        return [model.to_entity() for model in result.scalars().all()]

    async def get_by_id(self, category_id: str) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        with _store_errors("get_category"):
            model = await self.session.get(CategoryModel, category_id)
        return model.to_entity() if model else None

    async def get(self, category_id: str) -> Category:
        """Get category by ID.

        Raises:
            NotFoundError: If the category does not exist.
        """
        category = await self.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def get_by_slug(self, slug: str) -> Category | None:
        """Get category by slug.

        Args:
            slug: Category slug.

        Returns:
            Category if found, None otherwise.
        """
        query = select(CategoryModel).where(CategoryModel.slug == slug)
        with _store_errors("get_category"):
            result = await self.session.execute(query)
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def create(self, name: str) -> Category:
        """Create a category from a display name.

        Args:
            name: Display name; surrounding whitespace is trimmed.

        Returns:
            The new category with its assigned identifier and timestamp.

        Raises:
            ValidationError: If the name is empty after trimming.
            ConflictError: If the derived slug is already taken.
        """
        slug = Slug.from_name(name)

        with _store_errors("create_category"):
            existing = await self.session.execute(
                select(CategoryModel.id).where(CategoryModel.slug == slug.value)
            )
            if existing.first() is not None:
                raise ConflictError("Category", "slug", slug.value)

            model = CategoryModel(name=name.strip(), slug=slug.value)
            self.session.add(model)
            try:
                await self.session.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent creator of the same slug
                await self.session.rollback()
                raise ConflictError("Category", "slug", slug.value) from e

        logger.info("Category created", category_id=model.id, slug=model.slug)
        return model.to_entity()

    async def delete(self, category_id: str) -> None:
        """Delete a category and, by cascade, every product in it.

        Irreversible. Callers must confirm with the user first.

        Args:
            category_id: Category ID.

        Raises:
            NotFoundError: If the category does not exist.
        """
        query = (
            select(CategoryModel)
            .where(CategoryModel.id == category_id)
            .options(selectinload(CategoryModel.products))
        )
        with _store_errors("delete_category"):
            result = await self.session.execute(query)
            model = result.scalar_one_or_none()
            if model is None:
                raise NotFoundError("Category", category_id)

            product_count = len(model.products)
            await self.session.delete(model)
            await self.session.flush()

        logger.info(
            "Category deleted",
            category_id=category_id,
            cascaded_products=product_count,
        )


class ProductRepository:
    """Repository for Product database operations.

    Every product returned is joined with its owning category's name and
    slug, which is the read model the public catalog groups by.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def list(self) -> list[Product]:
        """List all products, newest first.

        Returns:
            Products sorted by creation time descending.
        """
        query = (
            select(ProductModel)
            .options(selectinload(ProductModel.category))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.asc())
        )
        with _store_errors("list_products"):
            result = await self.session.execute(query)
        return [model.to_entity() for model in result.scalars().all()]

    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.

        Returns:
            Product if found, None otherwise.
        """
        with _store_errors("get_product"):
            model = await self._load(product_id)
        return model.to_entity() if model else None

    async def get(self, product_id: str) -> Product:
        """Get product by ID.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def create(self, data: ProductData) -> Product:
        """Persist a new product.

        Args:
            data: Validated field set.

        Returns:
            The stored product.

        Raises:
            ValidationError: If the owning category does not exist.
        """
        with _store_errors("create_product"):
            category = await self._require_category(data.category_id)
            model = ProductModel(category=category)
            _apply(model, data)
            self.session.add(model)
            await self.session.flush()

        logger.info(
            "Product created",
            product_id=model.id,
            category_id=model.category_id,
            image_count=len(model.image_paths),
        )
        return model.to_entity()

    async def update(self, product_id: str, data: ProductData) -> Product:
        """Replace every mutable field of a product.

        Args:
            product_id: Product ID.
            data: Validated full field set; no partial merge is performed.

        Returns:
            The updated product.

        Raises:
            ValidationError: If the owning category does not exist.
            NotFoundError: If the product does not exist.
        """
        with _store_errors("update_product"):
            category = await self._require_category(data.category_id)
            model = await self._load(product_id)
            if model is None:
                raise NotFoundError("Product", product_id)

            model.category = category
            _apply(model, data)
            model.updated_at = utcnow()
            await self.session.flush()

        logger.info("Product updated", product_id=product_id, image_count=len(model.image_paths))
        return model.to_entity()

    async def delete(self, product_id: str) -> Product:
        """Delete a product record.

        Stored images are left untouched; removing them is the caller's job.

        Args:
            product_id: Product ID.

        Returns:
            Snapshot of the deleted product.

        Raises:
            NotFoundError: If the product does not exist.
        """
        with _store_errors("delete_product"):
            model = await self._load(product_id)
            if model is None:
                raise NotFoundError("Product", product_id)

            snapshot = model.to_entity()
            await self.session.delete(model)
            await self.session.flush()

        logger.info("Product deleted", product_id=product_id)
        return snapshot

    async def image_paths_for_category(self, category_id: str) -> list[str]:
        """Get every image locator held by products of a category.

        Args:
            category_id: Category ID.

        Returns:
            Locators in product order.
        """
        query = select(ProductModel.image_paths).where(ProductModel.category_id == category_id)
        with _store_errors("list_category_images"):
            result = await self.session.execute(query)
        return [path for paths in result.scalars().all() for path in (paths or ())]

    async def _load(self, product_id: str) -> ProductModel | None:
        query = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .options(selectinload(ProductModel.category))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _require_category(self, category_id: str) -> CategoryModel:
        category = await self.session.get(CategoryModel, category_id)
        if category is None:
            raise ValidationError("category_id", f"unknown category '{category_id}'")
        return category


def _apply(model: ProductModel, data: ProductData) -> None:
    model.name = data.name
    model.description = data.description
    model.price = data.price
    model.material = data.material
    model.sizes = list(data.sizes)
    model.colors = list(data.colors)
    model.image_paths = list(data.image_paths)