import unittest
from decimal import Decimal

from support import StateTestCase, make_user, request_json

from api import gateway as gw
from api.errors import Forbidden, NotFound
from api.models import ProductDraft, ProfileUpdate

PRODUCT = {
    "id": 5,
    "name": "Lamp",
    "description": "Desk lamp",
    "price": 24.5,
    "stockQuantity": 3,
    "manufacturer": "Acme",
    "productCategory": {"id": 2, "name": "Home"},
    "createdAt": [2024, 5, 1, 10, 30, 0, 0],
}


class CatalogTestCase(StateTestCase):
    async def test_list_products(self):
        self.gateway.route("GET", gw.PRODUCTS, body=[PRODUCT])

        (prod,) = await self.state.catalog.list_products()

        self.assertEqual(prod.price, Decimal("24.5"))
        self.assertEqual(prod.category.name, "Home")
        self.assertEqual(prod.description, "Desk lamp")
        self.assertEqual(prod.created_at.year, 2024)

    async def test_missing_product(self):
        self.gateway.route("GET", f"{gw.PRODUCTS}/99", status=404)

        with self.assertRaises(NotFound) as ctx:
            await self.state.catalog.get_product(99)
        self.assertEqual(ctx.exception.message, "Product not found.")

    async def test_service_status_is_plain_text(self):
        self.gateway.route("GET", f"{gw.PRODUCTS}/status", text="Product service is up")

        self.assertEqual(await self.state.catalog.service_status(), "Product service is up")

    async def test_list_categories(self):
        self.gateway.route("GET", gw.CATEGORIES, body=[{"id": 2, "name": "Home"}])

        (category,) = await self.state.catalog.list_categories()
        self.assertEqual(category.name, "Home")


class AdminConsoleTestCase(StateTestCase):
    draft = ProductDraft(
        name="Lamp", price=Decimal("24.50"), stock_quantity=3, category_id=2
    )

    async def test_customers_are_refused_locally(self):
        await self.log_in_as()

        with self.assertRaises(Forbidden):
            await self.state.admin.create_product(self.draft)
        with self.assertRaises(Forbidden):
            await self.state.admin.list_clients()
        self.assertEqual(self.gateway.requests, [])

    async def test_create_product(self):
        await self.log_in_as(make_user(role="ADMIN"))
        self.gateway.route("POST", gw.PRODUCTS, status=201, body=PRODUCT)

        prod = await self.state.admin.create_product(self.draft)

        self.assertEqual(prod.id, 5)
        (req,) = self.gateway.requests
        body = request_json(req)
        self.assertEqual(body["categoryId"], 2)
        self.assertEqual(body["price"], 24.5)
        self.assertEqual(body["stockQuantity"], 3)

    async def test_set_client_role(self):
        await self.log_in_as(make_user(role="ADMIN"))
        self.gateway.route(
            "PUT",
            f"{gw.USERS}/9/role",
            body={"id": 9, "email": "bob@example.com", "roles": ["ADMIN"]},
        )

        client = await self.state.admin.set_client_role(9, "ADMIN")

        self.assertEqual(client.roles, frozenset(["ADMIN"]))
        self.assertEqual(self.gateway.requests[0].url.params["role"], "ADMIN")

    async def test_get_client(self):
        await self.log_in_as(make_user(role="ADMIN"))
        self.gateway.route(
            "GET", f"{gw.USERS}/9", body={"id": 9, "email": "bob@example.com", "roles": ["USER"]}
        )

        client = await self.state.admin.get_client(9)

        self.assertEqual(client.email, "bob@example.com")

    async def test_update_client_sends_only_filled_fields(self):
        await self.log_in_as(make_user(role="ADMIN"))
        self.gateway.route(
            "PUT",
            f"{gw.USERS}/9",
            body={"id": 9, "email": "bob@example.com", "phone": "555-0100", "roles": ["USER"]},
        )

        client = await self.state.admin.update_client(9, ProfileUpdate(phone="555-0100"))

        (req,) = self.gateway.requests
        self.assertEqual(request_json(req), {"phone": "555-0100"})
        self.assertEqual(client.phone, "555-0100")

    async def test_client_edits_are_refused_for_customers(self):
        await self.log_in_as()

        with self.assertRaises(Forbidden):
            await self.state.admin.get_client(9)
        with self.assertRaises(Forbidden):
            await self.state.admin.update_client(9, ProfileUpdate(phone="555-0100"))
        self.assertEqual(self.gateway.requests, [])

    async def test_cannot_delete_self(self):
        await self.log_in_as(make_user(user_id=7, role="ADMIN"))

        with self.assertRaises(Forbidden):
            await self.state.admin.delete_client(7)
        self.assertEqual(self.gateway.requests, [])

    async def test_delete_client(self):
        await self.log_in_as(make_user(user_id=7, role="ADMIN"))
        self.gateway.route("DELETE", f"{gw.USERS}/9", status=204)

        await self.state.admin.delete_client(9)

        self.assertEqual(len(self.gateway.sent("DELETE", f"{gw.USERS}/9")), 1)


if __name__ == "__main__":
    unittest.main()
