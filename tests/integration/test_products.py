"""
Integration tests for the product catalog
"""
import uuid

from fastapi import status


class TestProductCrud:

    def test_create_product(self, client, auth_headers, test_tenant):
        response = client.post(
            "/api/v1/products/",
            headers=auth_headers,
            json={"name": "Café Especial 500g", "price_cents": 4590, "stock_quantity": 10},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["slug"] == "cafe-especial-500g"
        assert data["tenant_id"] == str(test_tenant.id)
        assert data["is_active"] is True
        assert data["attributes"] == {}

    def test_negative_price_rejected(self, client, auth_headers):
        response = client.post(
            "/api/v1/products/",
            headers=auth_headers,
            json={"name": "Broken", "price_cents": -1},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_requires_token(self, client):
        response = client.get("/api/v1/products/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_get_product(self, client, auth_headers, test_product):
        response = client.get(f"/api/v1/products/{test_product.id}/", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Blue Mug"

    def test_get_unknown_product(self, client, auth_headers):
        response = client.get(f"/api/v1/products/{uuid.uuid4()}/", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_regenerates_slug(self, client, auth_headers, test_product):
        response = client.put(
            f"/api/v1/products/{test_product.id}/",
            headers=auth_headers,
            json={"name": "Red Mug", "price_cents": 2490},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["slug"] == "red-mug"
        assert data["price_cents"] == 2490
        assert data["stock_quantity"] == 5

    def test_other_tenant_cannot_update(self, client, other_tenant_headers, test_product):
        response = client.put(
            f"/api/v1/products/{test_product.id}/",
            headers=other_tenant_headers,
            json={"price_cents": 1},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_hides_product(self, client, auth_headers, test_product):
        response = client.delete(f"/api/v1/products/{test_product.id}/", headers=auth_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get(f"/api/v1/products/{test_product.id}/", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = client.get("/api/v1/products/", headers=auth_headers)
        assert response.json()["count"] == 0


class TestProductListing:

    def seed(self, client, headers):
        for name, price in [("Mug", 1000), ("Big Mug", 2000), ("Plate", 3000)]:
            client.post("/api/v1/products/", headers=headers, json={"name": name, "price_cents": price})

    def test_newest_first(self, client, auth_headers):
        self.seed(client, auth_headers)

        response = client.get("/api/v1/products/", headers=auth_headers)

        data = response.json()
        assert data["count"] == 3
        assert data["limit"] == 20
        assert [p["name"] for p in data["results"]] == ["Plate", "Big Mug", "Mug"]

    def test_filters(self, client, auth_headers):
        self.seed(client, auth_headers)

        response = client.get("/api/v1/products/?name=mug&max_price=1500", headers=auth_headers)

        assert [p["name"] for p in response.json()["results"]] == ["Mug"]

    def test_name_wildcards_match_literally(self, client, auth_headers):
        for name in ["100% Cotton Tee", "Linen_Shirt", "Plain Tee"]:
            client.post("/api/v1/products/", headers=auth_headers, json={"name": name, "price_cents": 100})

        percent = client.get("/api/v1/products/", headers=auth_headers, params={"name": "%"}).json()
        underscore = client.get("/api/v1/products/", headers=auth_headers, params={"name": "_"}).json()

        assert [p["name"] for p in percent["results"]] == ["100% Cotton Tee"]
        assert [p["name"] for p in underscore["results"]] == ["Linen_Shirt"]

    def test_price_range_inverted(self, client, auth_headers):
        response = client.get("/api/v1/products/?min_price=500&max_price=100", headers=auth_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_limit_clamped(self, client, auth_headers):
        response = client.get("/api/v1/products/?limit=5000&offset=-3", headers=auth_headers)

        data = response.json()
        assert data["limit"] == 100
        assert data["offset"] == 0

    def test_catalog_is_shared_across_tenants(self, client, other_tenant_headers, test_product):
        response = client.get("/api/v1/products/", headers=other_tenant_headers)
        assert response.json()["count"] == 1
