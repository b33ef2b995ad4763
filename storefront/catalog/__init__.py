"""Product Catalog.

Relational models and repositories for categories and products, plus
the gateway that stores product images in the object store.
"""

from storefront.catalog.assets import AssetStoreGateway, get_asset_gateway
from storefront.catalog.models import CategoryModel, ProductModel
from storefront.catalog.repository import CategoryRepository, ProductRepository

__all__ = [
    # Models
    "CategoryModel",
    "ProductModel",
    # Repositories
    "CategoryRepository",
    "ProductRepository",
    # Assets
    "AssetStoreGateway",
    "get_asset_gateway",
]
