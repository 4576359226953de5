"""
Integration tests for purchased product endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.messages import get_message
from tests.factories import BoughtProductFactory, ProductFactory, UserFactory


class TestListIds:
    """Tests for GET /api/bought-products/ids."""

    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/bought-products/ids", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    @pytest.mark.asyncio
    async def test_own_purchases_only(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        mine = await ProductFactory.create(db_session, name="Mine")
        theirs = await ProductFactory.create(db_session, name="Theirs")
        other = await UserFactory.create(db_session)
        await BoughtProductFactory.create(db_session, test_user, mine)
        await BoughtProductFactory.create(db_session, other, theirs)

        response = await client.get("/api/bought-products/ids", headers=auth_headers)

        assert response.json()["data"] == [mine.id]

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/bought-products/ids")

        assert response.status_code in (401, 403)


class TestRecordPurchase:
    """Tests for POST /api/bought-products."""

    @pytest.mark.asyncio
    async def test_record(self, client: AsyncClient, db_session: AsyncSession, auth_headers):
        product = await ProductFactory.create(db_session)

        response = await client.post(
            "/api/bought-products", json={"productId": product.id}, headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["message"] == get_message("purchase_recorded")

        ids = await client.get("/api/bought-products/ids", headers=auth_headers)
        assert ids.json()["data"] == [product.id]

    @pytest.mark.asyncio
    async def test_unknown_product(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/bought-products", json={"productId": 9999}, headers=auth_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_product_id(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/bought-products", json={}, headers=auth_headers)

        assert response.status_code == 400


class TestRemovePurchase:
    """Tests for DELETE /api/bought-products/{product_id}."""

    @pytest.mark.asyncio
    async def test_remove(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        product = await ProductFactory.create(db_session)
        await BoughtProductFactory.create(db_session, test_user, product)

        response = await client.delete(f"/api/bought-products/{product.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == get_message("purchase_removed")

    @pytest.mark.asyncio
    async def test_not_bought(self, client: AsyncClient, db_session: AsyncSession, auth_headers):
        product = await ProductFactory.create(db_session)

        response = await client.delete(f"/api/bought-products/{product.id}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == get_message("purchase_not_found")
