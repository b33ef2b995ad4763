"""Cached catalog read model.

A CatalogView is one viewer's cached copy of the category and product
listings. It re-fetches lazily after being invalidated, either locally
by a writer or by a change event from the notifier.
"""

from collections.abc import Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.application.notifier import (
    ChangeNotifier,
    get_category_notifier,
    get_product_notifier,
)
from storefront.catalog.repository import CategoryRepository, ProductRepository
from storefront.domain.entities import Category, CategoryGroup, Product
from storefront.domain.events import ChangeEvent
from storefront.infrastructure.database import async_session_factory

logger = structlog.get_logger()


class CatalogView:
    """Per-viewer cached listings kept fresh by change events.

    A fetch that overlaps an invalidation is returned to its caller but
    not cached, so a stale result never outlives the event that made it
    stale.

    Attributes:
        product_fetches: Number of product listings loaded from the store.
        category_fetches: Number of category listings loaded from the store.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        product_notifier: ChangeNotifier | None = None,
        category_notifier: ChangeNotifier | None = None,
    ) -> None:
        """Initialize view and subscribe to change events.

        Args:
            session_factory: Factory for the short sessions used to re-fetch.
            product_notifier: Notifier for the product collection.
            category_notifier: Notifier for the category collection.
        """
        self.session_factory = session_factory or async_session_factory
        self._products: list[Product] | None = None
        self._categories: list[Category] | None = None
        self._product_generation = 0
        self._category_generation = 0
        self.product_fetches = 0
        self.category_fetches = 0

        product_notifier = product_notifier or get_product_notifier()
        category_notifier = category_notifier or get_category_notifier()
        self._unsubscribe: list[Callable[[], None]] = [
            product_notifier.subscribe(self._on_products_changed),
            category_notifier.subscribe(self._on_categories_changed),
        ]

    def close(self) -> None:
        """Stop listening for change events."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate_products(self) -> None:
        """Discard the cached product listing."""
        self._products = None
        self._product_generation += 1

    def invalidate_categories(self) -> None:
        """Discard the cached category listing."""
        self._categories = None
        self._category_generation += 1

    def _on_products_changed(self, event: ChangeEvent) -> None:
        logger.debug("Products changed, invalidating", event_id=str(event.event_id))
        self.invalidate_products()

    def _on_categories_changed(self, event: ChangeEvent) -> None:
        logger.debug("Categories changed, invalidating", event_id=str(event.event_id))
        self.invalidate_categories()

    @property
    def products_cached(self) -> bool:
        """Whether the next product read is served from cache."""
        return self._products is not None

    @property
    def categories_cached(self) -> bool:
        """Whether the next category read is served from cache."""
        return self._categories is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def products(self) -> list[Product]:
        """Product listing, newest first."""
        if self._products is not None:
            return list(self._products)

        generation = self._product_generation
        async with self.session_factory() as session:
            products = await ProductRepository(session).list()
        self.product_fetches += 1

        if generation == self._product_generation:
            self._products = products
        return list(products)

    async def categories(self) -> list[Category]:
        """Category listing in name order."""
        if self._categories is not None:
            return list(self._categories)

        generation = self._category_generation
        async with self.session_factory() as session:
            categories = await CategoryRepository(session).list()
        self.category_fetches += 1

        if generation == self._category_generation:
            self._categories = categories
        return list(categories)

    async def grouped(self) -> list[CategoryGroup]:
        """Products grouped under their categories.

        Categories keep name order and products keep newest-first order;
        categories without products are included with an empty group.
        """
        categories = await self.categories()
        products = await self.products()

        by_category: dict[str, list[Product]] = {c.id: [] for c in categories}
        for product in products:
            if product.category_id in by_category:
                by_category[product.category_id].append(product)

        return [
            CategoryGroup(category=category, products=tuple(by_category[category.id]))
            for category in categories
        ]


# Global view instance
_view: CatalogView | None = None


def get_catalog_view() -> CatalogView:
    """Get the process-wide catalog view."""
    global _view
    if _view is None:
        _view = CatalogView()
    return _view


def reset_catalog_view() -> None:
    """Close and drop the process-wide catalog view."""
    global _view
    if _view is not None:
        _view.close()
    _view = None
