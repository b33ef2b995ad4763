"""Shared fixtures for catalog tests.

Database tests run against a throwaway SQLite file through aiosqlite;
images go to a local object store under the test's tmp directory.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import storefront.catalog.models  # noqa: F401
from storefront.application.catalog_view import CatalogView
from storefront.application.notifier import ChangeNotifier, InMemoryChangeFeed
from storefront.application.synchronizer import CatalogSynchronizer
from storefront.catalog.assets import AssetStoreGateway
from storefront.domain.entities import ImageUpload, ProductDraft
from storefront.domain.events import CATEGORIES_TOPIC, PRODUCTS_TOPIC
from storefront.domain.value_objects import AdminContext
from storefront.infrastructure.database import Base
from storefront.infrastructure.object_store import LocalObjectStore

BUCKET = "product-images"
PUBLIC_BASE_URL = "http://testserver/media"

# Image bytes are stored as-is and never decoded
JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-body"


def database_url(tmp_path: Path) -> str:
    """SQLite URL for a database file inside tmp_path."""
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create an engine with the catalog schema."""
    engine = create_async_engine(database_url(tmp_path), poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session for one test."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def object_store(tmp_path: Path) -> LocalObjectStore:
    """Create a local object store under tmp_path."""
    return LocalObjectStore(BUCKET, base_path=tmp_path / "media")


@pytest.fixture
def gateway(object_store: LocalObjectStore) -> AssetStoreGateway:
    """Create an asset store gateway with small limits."""
    return AssetStoreGateway(
        object_store,
        public_base_url=PUBLIC_BASE_URL,
        prefix="products",
        allowed_extensions=frozenset({"jpg", "jpeg", "png"}),
        max_bytes=1024,
    )


# ============================================================================
# Notification Fixtures
# ============================================================================


@pytest.fixture
def feed() -> InMemoryChangeFeed:
    """Create an isolated change feed."""
    return InMemoryChangeFeed()


@pytest.fixture
def product_notifier(feed: InMemoryChangeFeed) -> ChangeNotifier:
    """Create a product notifier on the isolated feed."""
    return ChangeNotifier(PRODUCTS_TOPIC, feed)


@pytest.fixture
def category_notifier(feed: InMemoryChangeFeed) -> ChangeNotifier:
    """Create a category notifier on the isolated feed."""
    return ChangeNotifier(CATEGORIES_TOPIC, feed)


@pytest.fixture
def view(
    session_factory: async_sessionmaker[AsyncSession],
    product_notifier: ChangeNotifier,
    category_notifier: ChangeNotifier,
):
    """Create a catalog view subscribed to the isolated notifiers."""
    view = CatalogView(session_factory, product_notifier, category_notifier)
    yield view
    view.close()


# ============================================================================
# Synchronizer Fixtures
# ============================================================================


@pytest.fixture
def admin() -> AdminContext:
    """Create an admin capability."""
    return AdminContext.for_actor("admin-1")


@pytest.fixture
def sync(
    session: AsyncSession,
    gateway: AssetStoreGateway,
    view: CatalogView,
    product_notifier: ChangeNotifier,
    category_notifier: ChangeNotifier,
) -> CatalogSynchronizer:
    """Create a synchronizer wired to the test stores."""
    return CatalogSynchronizer(
        session,
        gateway=gateway,
        view=view,
        product_notifier=product_notifier,
        category_notifier=category_notifier,
        purge_orphaned_images=True,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


def _make_upload(filename: str = "front.jpg", content: bytes = JPEG_BYTES) -> ImageUpload:
    return ImageUpload(filename=filename, content=content, content_type="image/jpeg")


def _make_draft(category_id: str, *uploads: ImageUpload, **overrides) -> ProductDraft:
    fields = {
        "name": "Classic",
        "description": "Steel watch",
        "price": "125000",
        "category_id": category_id,
        "material": "Steel",
        "sizes": ["M"],
        "colors": ["Silver"],
    }
    fields.update(overrides)
    draft = ProductDraft(**fields)
    for upload in uploads or (_make_upload(),):
        draft.attach_image(upload)
    return draft


@pytest.fixture
def make_upload():
    """Factory for image uploads."""
    return _make_upload


@pytest.fixture
def make_draft():
    """Factory for valid product drafts; attaches one image unless given."""
    return _make_draft
