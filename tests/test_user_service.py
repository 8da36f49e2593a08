import pytest

from conftest import ADMIN_ID, CUSTOMER_ID
from storefront.config import Config
from storefront.exceptions import AuthorizationError, NotFoundError, ValidationError
from storefront.services.auth_service import AuthService
from storefront.services.user_service import UserService


class TestAuthService:
    @pytest.mark.asyncio
    async def test_roles(self, db, roles):
        auth = AuthService(db)

        assert await auth.is_admin(ADMIN_ID)
        assert not await auth.is_admin(CUSTOMER_ID)
        assert not await auth.is_admin(12345)

    @pytest.mark.asyncio
    async def test_require_admin_names_the_action(self, db, roles):
        with pytest.raises(AuthorizationError, match="Only admins can delete products"):
            await AuthService(db).require_admin(CUSTOMER_ID, "delete products")

    @pytest.mark.asyncio
    async def test_demotion_takes_effect_immediately(self, db, roles):
        auth = AuthService(db)
        await auth.require_admin(ADMIN_ID)

        roles[ADMIN_ID] = "user"

        with pytest.raises(AuthorizationError):
            await auth.require_admin(ADMIN_ID)


class TestUserService:
    @pytest.mark.asyncio
    async def test_register_as_customer(self, db, conn, monkeypatch):
        monkeypatch.setattr(Config, "ADMIN_IDS", [])
        conn.on("fetchrow", "INSERT INTO users", lambda *args: {"user_id": args[0], "role": args[4]})

        user = await UserService(db).register_user(CUSTOMER_ID, "bob", "Bob", None)

        assert user == {"user_id": CUSTOMER_ID, "role": "user"}

    @pytest.mark.asyncio
    async def test_register_promotes_configured_admins(self, db, conn, monkeypatch):
        monkeypatch.setattr(Config, "ADMIN_IDS", [CUSTOMER_ID])
        conn.on("fetchrow", "INSERT INTO users", lambda *args: {"user_id": args[0], "role": args[4]})

        user = await UserService(db).register_user(CUSTOMER_ID, "bob", "Bob", None)

        assert user["role"] == "admin"
        assert "ELSE users.role END" in conn.find("INSERT INTO users")[0]["query"]

    @pytest.mark.asyncio
    async def test_listing_requires_admin(self, db, conn, roles):
        with pytest.raises(AuthorizationError):
            await UserService(db).get_paginated(CUSTOMER_ID)

        assert not conn.find("FROM users u")

    @pytest.mark.asyncio
    async def test_listing(self, db, conn, roles):
        conn.on("fetch", "FROM users u", [{"user_id": 2, "role": "user", "order_count": 4}])
        conn.on("fetchval", "SELECT COUNT(*) FROM users", 1)

        result = await UserService(db).get_paginated(ADMIN_ID)

        assert result["users"][0]["order_count"] == 4
        assert result["total_pages"] == 1

    @pytest.mark.asyncio
    async def test_detail_includes_orders_and_addresses(self, db, conn, roles):
        conn.on("fetchrow", "SELECT * FROM users", {"user_id": 2, "role": "user"})
        conn.on("fetch", "FROM orders o", [{"order_id": 100, "item_count": 3}])
        conn.on("fetch", "FROM addresses", [{"address_id": 3, "city": "Springfield"}])

        user = await UserService(db).get_user_detail(ADMIN_ID, 2)

        assert user["orders"] == [{"order_id": 100, "item_count": 3}]
        assert user["addresses"][0]["city"] == "Springfield"

    @pytest.mark.asyncio
    async def test_detail_of_unknown_user(self, db, roles):
        with pytest.raises(NotFoundError):
            await UserService(db).get_user_detail(ADMIN_ID, 404)

    @pytest.mark.asyncio
    async def test_update_role(self, db, conn, roles):
        conn.on("fetchrow", "UPDATE users", lambda role, user_id: {"user_id": user_id, "role": role})

        user = await UserService(db).update_role(ADMIN_ID, CUSTOMER_ID, "admin")

        assert user == {"user_id": CUSTOMER_ID, "role": "admin"}

    @pytest.mark.asyncio
    async def test_update_role_rejects_unknown_role(self, db, conn, roles):
        with pytest.raises(ValidationError):
            await UserService(db).update_role(ADMIN_ID, CUSTOMER_ID, "owner")

        assert not conn.find("UPDATE users")

    @pytest.mark.asyncio
    async def test_customer_cannot_change_roles(self, db, roles):
        with pytest.raises(AuthorizationError):
            await UserService(db).update_role(CUSTOMER_ID, CUSTOMER_ID, "admin")
