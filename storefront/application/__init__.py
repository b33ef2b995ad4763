"""Application layer module.

Contains the catalog synchronizer that orchestrates repositories, the
asset store gateway and change notification, plus the cached read model
that viewers consume.
"""

from storefront.application.catalog_view import (
    CatalogView,
    get_catalog_view,
    reset_catalog_view,
)
from storefront.application.notifier import (
    ChangeNotifier,
    InMemoryChangeFeed,
    get_category_notifier,
    get_change_feed,
    get_product_notifier,
    reset_notifiers,
)
from storefront.application.synchronizer import (
    CatalogSynchronizer,
    DeletionResult,
    SubmissionResult,
    get_synchronizer,
)

__all__ = [
    "CatalogSynchronizer",
    "CatalogView",
    "ChangeNotifier",
    "DeletionResult",
    "InMemoryChangeFeed",
    "SubmissionResult",
    "get_catalog_view",
    "get_category_notifier",
    "get_change_feed",
    "get_product_notifier",
    "get_synchronizer",
    "reset_catalog_view",
    "reset_notifiers",
]
