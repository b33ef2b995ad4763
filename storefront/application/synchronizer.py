"""Catalog synchronizer.

Composition root used by both the admin and the public surfaces. Writes
go repository -> commit -> local invalidation -> change notification;
reads are served from the cached CatalogView.

A product submission uploads new images first, one at a time and in
order, then issues a single metadata write carrying the retained images
followed by the uploaded ones. The metadata write is the only commit
point: a failure before it never leaves a product pointing at missing
images.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.application.catalog_view import CatalogView, get_catalog_view
from storefront.application.notifier import (
    ChangeNotifier,
    get_category_notifier,
    get_product_notifier,
)
from storefront.catalog.assets import AssetStoreGateway, get_asset_gateway
from storefront.catalog.repository import CategoryRepository, ProductRepository
from storefront.domain.entities import (
    Category,
    CategoryGroup,
    Product,
    ProductData,
    ProductDraft,
)
from storefront.domain.exceptions import (
    AuthorizationError,
    DomainError,
    StorageError,
    ValidationError,
)
from storefront.domain.value_objects import AdminContext
from storefront.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Result Types
# ============================================================================


@dataclass
class SubmissionResult:
    """Result of creating or updating a product.

    Attributes:
        product: The stored product.
        created: True for a create, False for an update.
        uploaded_images: Locators uploaded for this submission.
        removed_images: Detached locators whose bytes were removed.
        orphaned_images: Detached locators that could not be removed.
    """

    product: Product
    created: bool
    uploaded_images: list[str] = field(default_factory=list)
    removed_images: list[str] = field(default_factory=list)
    orphaned_images: list[str] = field(default_factory=list)


@dataclass
class DeletionResult:
    """Result of deleting a product or a category.

    Attributes:
        entity_id: ID of the deleted record.
        removed_images: Locators whose bytes were removed.
        orphaned_images: Locators left in the object store.
    """

    entity_id: str
    removed_images: list[str] = field(default_factory=list)
    orphaned_images: list[str] = field(default_factory=list)


# ============================================================================
# Catalog Synchronizer
# ============================================================================


class CatalogSynchronizer:
    """Keeps repositories, stored images and cached views consistent.

    Example usage:
        sync = CatalogSynchronizer(session)
        draft = ProductDraft(name="Classic", ...)
        draft.attach_image(ImageUpload("front.jpg", data))
        result = await sync.submit_product(draft, actor)
    """

    def __init__(
        self,
        session: AsyncSession,
        gateway: AssetStoreGateway | None = None,
        view: CatalogView | None = None,
        product_notifier: ChangeNotifier | None = None,
        category_notifier: ChangeNotifier | None = None,
        purge_orphaned_images: bool | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize synchronizer.

        Args:
            session: Session used for writes; committed by the synchronizer.
            gateway: Asset store gateway.
            view: Cached read model to invalidate and read from.
            product_notifier: Notifier for the product collection.
            category_notifier: Notifier for the category collection.
            purge_orphaned_images: Remove images no product references anymore.
            request_id: Request ID for correlation.
        """
        self.session = session
        self.categories = CategoryRepository(session)
        self.products = ProductRepository(session)
        self.gateway = gateway or get_asset_gateway()
        self.view = view or get_catalog_view()
        self.product_notifier = product_notifier or get_product_notifier()
        self.category_notifier = category_notifier or get_category_notifier()
        self.purge_orphaned_images = (
            settings.purge_orphaned_images
            if purge_orphaned_images is None
            else purge_orphaned_images
        )
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_products(self) -> list[Product]:
        """Product listing, newest first, served from the view."""
        return await self.view.products()

    async def list_categories(self) -> list[Category]:
        """Category listing in name order, served from the view."""
        return await self.view.categories()

    async def grouped_catalog(self) -> list[CategoryGroup]:
        """Public catalog: products grouped under their categories."""
        return await self.view.grouped()

    async def get_product(self, product_id: str) -> Product:
        """Read one product straight from the store.

        Raises:
            NotFoundError: If the product does not exist.
        """
        return await self.products.get(product_id)

    # ------------------------------------------------------------------
    # Category writes
    # ------------------------------------------------------------------

    async def create_category(self, name: str, actor: AdminContext | None) -> Category:
        """Create a category.

        Raises:
            AuthorizationError: Without an admin capability.
            ValidationError: If the name is blank.
            ConflictError: If the derived slug already exists.
        """
        _require_admin(actor, "create_category")

        async with self._write("create_category"):
            category = await self.categories.create(name)

        self.view.invalidate_categories()
        await self.category_notifier.notify()

        logger.info(
            "Category created by admin",
            category_id=category.id,
            actor_id=actor.actor_id,
            request_id=self.request_id,
        )
        return category

    async def delete_category(self, category_id: str, actor: AdminContext | None) -> DeletionResult:
        """Delete a category and every product in it.

        Irreversible and not preceded by a dry-run count; the caller must
        have obtained the user's confirmation.

        Raises:
            AuthorizationError: Without an admin capability.
            NotFoundError: If the category does not exist.
        """
        _require_admin(actor, "delete_category")

        async with self._write("delete_category"):
            image_paths = await self.products.image_paths_for_category(category_id)
            await self.categories.delete(category_id)

        self.view.invalidate_categories()
        self.view.invalidate_products()
        await self.category_notifier.notify()
        await self.product_notifier.notify()

        result = DeletionResult(entity_id=category_id)
        if self.purge_orphaned_images:
            result.removed_images, result.orphaned_images = await self._purge(image_paths)
        else:
            result.orphaned_images = image_paths

        logger.info(
            "Category deleted by admin",
            category_id=category_id,
            actor_id=actor.actor_id,
            removed_images=len(result.removed_images),
            orphaned_images=len(result.orphaned_images),
            request_id=self.request_id,
        )
        return result

    # ------------------------------------------------------------------
    # Product writes
    # ------------------------------------------------------------------

    async def submit_product(self, draft: ProductDraft, actor: AdminContext | None) -> SubmissionResult:
        """Create or update a product from a form draft.

        Steps: validate fields and files, upload new images in order,
        write retained + uploaded locators in one metadata write, commit,
        invalidate the local view, notify every other viewer.

        Args:
            draft: Form state; ``product_id`` set means update.
            actor: Admin capability.

        Returns:
            SubmissionResult with the stored product.

        Raises:
            AuthorizationError: Without an admin capability.
            ValidationError: On the first invalid field or file, or a retained
                image the product does not own.
            NotFoundError: If the product being updated no longer exists.
            UploadError: If an image upload fails; nothing is written.
            StorageError: If the metadata write fails.
        """
        _require_admin(actor, "submit_product")

        # Check fields before touching the object store
        self._validate(draft, draft.retained_images + ["pending"] * len(draft.new_images))
        for upload in draft.new_images:
            self.gateway.check(upload)

        previous: Product | None = None
        if draft.is_editing:
            previous = await self.products.get(draft.product_id)
        _check_retained(draft.retained_images, previous)

        uploaded = await self._upload_all(draft)

        try:
            data = self._validate(draft, draft.retained_images + uploaded)
            async with self._write("submit_product"):
                if previous is None:
                    product = await self.products.create(data)
                else:
                    product = await self.products.update(previous.id, data)
        except DomainError:
            if self.purge_orphaned_images and uploaded:
                await self._purge(uploaded)
            raise

        self.view.invalidate_products()
        await self.product_notifier.notify()

        result = SubmissionResult(
            product=product,
            created=previous is None,
            uploaded_images=uploaded,
        )
        if previous is not None:
            detached = [url for url in previous.image_paths if url not in product.image_paths]
            if self.purge_orphaned_images:
                result.removed_images, result.orphaned_images = await self._purge(detached)
            else:
                result.orphaned_images = detached

        logger.info(
            "Product submitted",
            product_id=product.id,
            created=result.created,
            uploaded_images=len(uploaded),
            actor_id=actor.actor_id,
            request_id=self.request_id,
        )
        return result

    async def delete_product(self, product_id: str, actor: AdminContext | None) -> DeletionResult:
        """Delete a product and, when purging is on, its stored images.

        Raises:
            AuthorizationError: Without an admin capability.
            NotFoundError: If the product does not exist.
        """
        _require_admin(actor, "delete_product")

        async with self._write("delete_product"):
            deleted = await self.products.delete(product_id)

        self.view.invalidate_products()
        await self.product_notifier.notify()

        result = DeletionResult(entity_id=product_id)
        if self.purge_orphaned_images:
            result.removed_images, result.orphaned_images = await self._purge(list(deleted.image_paths))
        else:
            result.orphaned_images = list(deleted.image_paths)

        logger.info(
            "Product deleted by admin",
            product_id=product_id,
            actor_id=actor.actor_id,
            removed_images=len(result.removed_images),
            request_id=self.request_id,
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(self, draft: ProductDraft, image_paths: list[str]) -> ProductData:
        return ProductData.validate(
            name=draft.name,
            description=draft.description,
            price=draft.price,
            category_id=draft.category_id,
            material=draft.material,
            sizes=draft.sizes,
            colors=draft.colors,
            image_paths=image_paths,
        )

    async def _upload_all(self, draft: ProductDraft) -> list[str]:
        """Upload new images sequentially; the first failure aborts."""
        uploaded: list[str] = []
        for upload in draft.new_images:
            try:
                uploaded.append(await self.gateway.upload(upload))
            except DomainError:
                if self.purge_orphaned_images and uploaded:
                    await self._purge(uploaded)
                raise
        return uploaded

    async def _purge(self, locators: list[str]) -> tuple[list[str], list[str]]:
        """Remove images best-effort after a committed write.

        Returns:
            Tuple of (removed, orphaned) locators.
        """
        removed: list[str] = []
        orphaned: list[str] = []
        for locator in locators:
            try:
                if await self.gateway.remove(locator):
                    removed.append(locator)
            except StorageError as e:
                logger.warning("Image left orphaned", locator=locator, error=e.message)
                orphaned.append(locator)
        return removed, orphaned

    @asynccontextmanager
    async def _write(self, operation: str) -> AsyncIterator[None]:
        """Commit the session after the block, or roll back if it raises."""
        try:
            yield
        except Exception:
            await self.session.rollback()
            raise

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(operation, str(e)) from e


def _require_admin(actor: AdminContext | None, operation: str) -> None:
    if not isinstance(actor, AdminContext):
        raise AuthorizationError(operation)


def _check_retained(retained: list[str], previous: Product | None) -> None:
    """Only images the product already owns may be retained."""
    owned = previous.image_paths if previous is not None else ()
    foreign = [url for url in retained if url not in owned]
    if foreign:
        raise ValidationError("retained_images", f"not an image of this product: {foreign[0]}")


# ============================================================================
# Service Factory
# ============================================================================


def get_synchronizer(session: AsyncSession, request_id: str | None = None) -> CatalogSynchronizer:
    """Get catalog synchronizer for a request.

    Args:
        session: Request-scoped database session.
        request_id: Request ID for correlation.

    Returns:
        CatalogSynchronizer instance.
    """
    return CatalogSynchronizer(session, request_id=request_id)
