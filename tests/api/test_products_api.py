"""Tests for product API endpoints."""

from decimal import Decimal

from fastapi.testclient import TestClient

import storefront.catalog.assets as assets
from storefront.catalog.assets import AssetStoreGateway
from storefront.infrastructure.object_store import LocalObjectStore


def stored_files(store: LocalObjectStore) -> list[str]:
    if not store.root.exists():
        return []
    return [str(p) for p in store.root.rglob("*") if p.is_file()]


class TestCreateProduct:
    """Tests for POST /products endpoint."""

    def test_create_product_success(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Should upload images and create the product."""
        response = auth_client.post(
            "/products",
            data=form(category_id, sizes=["M", "L", "M"]),
            files=[image("front.jpg"), image("back.png")],
        )
        assert response.status_code == 201
        data = response.json()
        product = data["product"]

        assert product["name"] == "Classic"
        assert Decimal(product["price"]) == Decimal("125000")
        assert product["category"] == {"name": "Wrist Watches", "slug": "wrist-watches"}
        assert product["sizes"] == ["M", "L"]
        assert product["colors"] == ["Silver"]
        assert len(product["image_paths"]) == 2
        assert product["image_paths"] == data["uploaded_images"]
        assert product["image_paths"][0].startswith(
            "http://testserver/media/product-images/products/"
        )
        assert len(stored_files(catalog_backend)) == 2

    def test_create_product_without_images(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
    ) -> None:
        """Products need at least one image."""
        response = auth_client.post("/products", data=form(category_id))
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"][0]["field"] == "image_paths"

    def test_create_product_invalid_price(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Invalid fields are reported before anything is uploaded."""
        response = auth_client.post(
            "/products",
            data=form(category_id, price="-5"),
            files=[image()],
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "price"
        assert stored_files(catalog_backend) == []

    def test_create_product_sub_cent_price(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Prices the store would round are rejected instead."""
        response = auth_client.post(
            "/products",
            data=form(category_id, price="1.005"),
            files=[image()],
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "price"
        assert auth_client.get("/products").json()["total"] == 0
        assert stored_files(catalog_backend) == []

    def test_create_product_oversize_image(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Files above the upload limit are rejected and nothing is stored."""
        assets._gateway = AssetStoreGateway(
            catalog_backend,
            public_base_url="http://testserver/media",
            max_bytes=16,
        )
        response = auth_client.post(
            "/products",
            data=form(category_id),
            files=[image("front.jpg", b"\xff" * 64)],
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "images"
        assert stored_files(catalog_backend) == []

    def test_create_product_disallowed_file(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """Non-image files are rejected."""
        response = auth_client.post(
            "/products",
            data=form(category_id),
            files=[image("notes.txt", b"hello")],
        )
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "images"

    def test_create_product_unknown_category(
        self,
        auth_client: TestClient,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Unknown categories are rejected and uploads cleaned up."""
        response = auth_client.post("/products", data=form("missing"), files=[image()])
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "category_id"
        assert stored_files(catalog_backend) == []

    def test_create_product_requires_auth(
        self,
        client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """Anonymous writes should be rejected."""
        response = client.post("/products", data=form(category_id), files=[image()])
        assert response.status_code == 401

    def test_invalid_api_key_rejected(
        self,
        client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """A wrong admin key should be rejected."""
        response = client.post(
            "/products",
            data=form(category_id),
            files=[image()],
            headers={"Authorization": "Bearer wrong-key"},
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_API_KEY"


class TestReadProducts:
    """Tests for GET /products endpoints."""

    def test_list_newest_first(
        self,
        auth_client: TestClient,
        client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """Products are listed newest first, publicly."""
        first = auth_client.post("/products", data=form(category_id, name="First"), files=[image()])
        second = auth_client.post("/products", data=form(category_id, name="Second"), files=[image()])

        response = client.get("/products")
        assert response.status_code == 200
        data = response.json()

        assert data["total"] == 2
        assert [p["id"] for p in data["items"]] == [
            second.json()["product"]["id"],
            first.json()["product"]["id"],
        ]

    def test_list_is_idempotent(
        self,
        auth_client: TestClient,
        client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """Listing twice without writes returns the same data."""
        auth_client.post("/products", data=form(category_id), files=[image()])

        assert client.get("/products").json() == client.get("/products").json()

    def test_get_product(
        self,
        auth_client: TestClient,
        client: TestClient,
        category_id: str,
        form,
        image,
    ) -> None:
        """A single product can be read by ID."""
        created = auth_client.post("/products", data=form(category_id), files=[image()])
        product_id = created.json()["product"]["id"]

        response = client.get(f"/products/{product_id}")
        assert response.status_code == 200
        assert response.json()["id"] == product_id

    def test_get_missing_product(self, client: TestClient) -> None:
        """Unknown products return 404."""
        response = client.get("/products/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestUpdateProduct:
    """Tests for PUT /products/{id} endpoint."""

    def test_update_retained_then_new(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Stored images are the retained ones followed by new uploads."""
        created = auth_client.post(
            "/products",
            data=form(category_id),
            files=[image("a.jpg"), image("b.jpg")],
        ).json()["product"]
        dropped, kept = created["image_paths"]

        response = auth_client.put(
            f"/products/{created['id']}",
            data=form(category_id, name="Classic II", retained_images=[kept]),
            files=[image("c.png")],
        )
        assert response.status_code == 200
        data = response.json()
        product = data["product"]

        assert product["id"] == created["id"]
        assert product["name"] == "Classic II"
        assert product["image_paths"] == [kept, data["uploaded_images"][0]]
        assert data["removed_images"] == [dropped]
        assert len(stored_files(catalog_backend)) == 2

    def test_update_missing_product(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Updating a deleted product returns 404 and changes nothing."""
        auth_client.post("/products", data=form(category_id), files=[image()])
        before = auth_client.get("/products").json()
        files_before = stored_files(catalog_backend)

        response = auth_client.put("/products/missing", data=form(category_id), files=[image()])
        assert response.status_code == 404
        assert auth_client.get("/products").json() == before
        assert stored_files(catalog_backend) == files_before

    def test_cannot_retain_another_products_image(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Images owned by one product cannot be attached to another."""
        owner = auth_client.post(
            "/products", data=form(category_id, name="Owner"), files=[image()]
        ).json()["product"]
        other = auth_client.post(
            "/products", data=form(category_id, name="Other"), files=[image()]
        ).json()["product"]
        borrowed = owner["image_paths"][0]

        created = auth_client.post(
            "/products",
            data=form(category_id, name="Copy", retained_images=[borrowed]),
            files=[image()],
        )
        assert created.status_code == 422
        assert created.json()["details"][0]["field"] == "retained_images"

        updated = auth_client.put(
            f"/products/{other['id']}",
            data=form(category_id, retained_images=[*other["image_paths"], borrowed]),
        )
        assert updated.status_code == 422
        assert updated.json()["details"][0]["field"] == "retained_images"

        assert auth_client.delete(f"/products/{other['id']}").status_code == 200
        assert auth_client.get(f"/products/{owner['id']}").json()["image_paths"] == [borrowed]
        assert len(stored_files(catalog_backend)) == 1


class TestDeleteProduct:
    """Tests for DELETE /products/{id} endpoint."""

    def test_delete_product(
        self,
        auth_client: TestClient,
        category_id: str,
        form,
        image,
        catalog_backend: LocalObjectStore,
    ) -> None:
        """Deleting a product removes it and its images."""
        created = auth_client.post("/products", data=form(category_id), files=[image()])
        product_id = created.json()["product"]["id"]

        response = auth_client.delete(f"/products/{product_id}")
        assert response.status_code == 200
        assert response.json()["id"] == product_id

        assert auth_client.get(f"/products/{product_id}").status_code == 404
        assert stored_files(catalog_backend) == []

    def test_delete_missing_product(self, auth_client: TestClient) -> None:
        """Deleting an unknown product returns 404."""
        response = auth_client.delete("/products/missing")
        assert response.status_code == 404
