#!/usr/bin/env python3
"""Seed catalog script.

Creates a handful of categories and products through the catalog
synchronizer, so images go through the asset store like any admin
submission would.

Usage:
    python scripts/seed_catalog.py --image ./sample.jpg
    python scripts/seed_catalog.py --image ./sample.jpg --products-per-category 5
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.application.synchronizer import CatalogSynchronizer
from storefront.catalog.repository import CategoryRepository
from storefront.domain.entities import ImageUpload, ProductDraft
from storefront.domain.exceptions import ConflictError
from storefront.domain.value_objects import AdminContext, Slug
from storefront.infrastructure.database import async_session_factory, create_tables
from storefront.infrastructure.logging_config import configure_logging

SAMPLE_CATALOG = {
    "Wrist Watches": {
        "material": "Stainless steel",
        "sizes": ["38mm", "42mm"],
        "colors": ["Silver", "Black"],
        "base_price": 125000,
    },
    "Rings": {
        "material": "Gold",
        "sizes": ["6", "7", "8"],
        "colors": ["Yellow gold", "Rose gold"],
        "base_price": 85000,
    },
    "Necklaces": {
        "material": "Sterling silver",
        "sizes": ["40cm", "45cm"],
        "colors": ["Silver"],
        "base_price": 42000,
    },
}


async def seed(image: Path, products_per_category: int) -> dict:
    """Seed sample categories and products.

    Args:
        image: Image file attached to every product.
        products_per_category: Products to create per category.

    Returns:
        Seeding result counts.
    """
    admin = AdminContext.for_actor("seed-script")
    content = image.read_bytes()
    result = {"categories_created": 0, "categories_existing": 0, "products_created": 0}

    async with async_session_factory() as session:
        sync = CatalogSynchronizer(session)

        for name, template in SAMPLE_CATALOG.items():
            try:
                category = await sync.create_category(name, admin)
                result["categories_created"] += 1
            except ConflictError:
                category = await CategoryRepository(session).get_by_slug(str(Slug.from_name(name)))
                result["categories_existing"] += 1

            for index in range(1, products_per_category + 1):
                draft = ProductDraft(
                    name=f"{name} No. {index}",
                    description=f"Sample {name.lower()} piece number {index}.",
                    price=str(template["base_price"] + index * 1000),
                    category_id=category.id,
                    material=template["material"],
                )
                for size in template["sizes"]:
                    draft.add_size(size)
                for color in template["colors"]:
                    draft.add_color(color)
                draft.attach_image(ImageUpload(filename=image.name, content=content))

                await sync.submit_product(draft, admin)
                result["products_created"] += 1

    return result


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the storefront catalog with sample data",
    )
    parser.add_argument(
        "--image",
        type=Path,
        required=True,
        help="Image file attached to every seeded product",
    )
    parser.add_argument(
        "--products-per-category",
        type=int,
        default=3,
        help="Products to create per category (default: 3)",
    )

    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)
    print(f"Image: {args.image}")
    print(f"Products per category: {args.products_per_category}")
    print()

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    result = await seed(args.image, args.products_per_category)

    print(f"  ✓ Categories created: {result['categories_created']}")
    print(f"  ✓ Categories already present: {result['categories_existing']}")
    print(f"  ✓ Products created: {result['products_created']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
