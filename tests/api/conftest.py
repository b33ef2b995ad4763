"""Shared fixtures for API tests."""

import asyncio
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import storefront.application.catalog_view as catalog_view
import storefront.catalog.assets as assets
from storefront.application.catalog_view import CatalogView, reset_catalog_view
from storefront.application.notifier import reset_notifiers
from storefront.catalog.assets import AssetStoreGateway
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import Base, get_session
from storefront.infrastructure.object_store import LocalObjectStore
from storefront.main import app


async def _create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def catalog_backend(tmp_path: Path) -> Generator[LocalObjectStore, None, None]:
    """Point the app at a throwaway database and object store."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        poolclass=NullPool,
    )
    asyncio.run(_create_schema(engine))
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    store = LocalObjectStore(settings.storage_bucket, base_path=tmp_path / "media")
    reset_notifiers()
    reset_catalog_view()
    catalog_view._view = CatalogView(factory)
    assets._gateway = AssetStoreGateway(store, public_base_url="http://testserver/media")
    app.dependency_overrides[get_session] = override_session

    yield store

    app.dependency_overrides.clear()
    reset_catalog_view()
    reset_notifiers()
    assets._gateway = None
    asyncio.run(engine.dispose())


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client with valid admin key authentication."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {settings.admin_api_key}"},
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {settings.admin_api_key}"}


def product_form(category_id: str, **overrides) -> dict:
    """Multipart form fields for a valid product."""
    fields = {
        "name": "Classic",
        "description": "Steel watch",
        "price": "125000",
        "category_id": category_id,
        "material": "Steel",
        "sizes": ["M", "L"],
        "colors": ["Silver"],
    }
    fields.update(overrides)
    return fields


def image_file(filename: str = "front.jpg", content: bytes = b"\xff\xd8\xffjpeg") -> tuple:
    """Multipart file tuple for the images field."""
    return ("images", (filename, content, "image/jpeg"))


@pytest.fixture
def category_id(auth_client: TestClient) -> str:
    """Create a category and return its ID."""
    response = auth_client.post("/categories", json={"name": "Wrist Watches"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def form():
    """Factory for product form fields."""
    return product_form


@pytest.fixture
def image():
    """Factory for multipart image tuples."""
    return image_file
