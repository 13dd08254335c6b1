import unittest
from datetime import datetime
from decimal import Decimal

import httpx

from support import BASE_URL, cart_body, cart_line, order_body

from api import payloads
from api.errors import (
    ApiError,
    Forbidden,
    MalformedPayload,
    NotFound,
    ServerError,
    TransportError,
    Unauthorized,
    ValidationError,
    error_for_status,
)
from api.gateway import Gateway
from api.models import Cart


class ErrorForStatusTestCase(unittest.TestCase):
    def test_status_mapping(self):
        self.assertIsInstance(error_for_status(400), ValidationError)
        self.assertIsInstance(error_for_status(401), Unauthorized)
        self.assertIsInstance(error_for_status(403), Forbidden)
        self.assertIsInstance(error_for_status(404), NotFound)
        self.assertIsInstance(error_for_status(502), ServerError)
        self.assertIs(type(error_for_status(409)), ApiError)

    def test_service_wording_wins(self):
        err = error_for_status(404, {404: "Order not found."})
        self.assertEqual(err.message, "Order not found.")
        self.assertEqual(err.status_code, 404)

    def test_any_5xx_uses_500_wording(self):
        err = error_for_status(503, {500: "Cart service unavailable."})
        self.assertEqual(err.message, "Cart service unavailable.")


class PayloadTestCase(unittest.TestCase):
    def test_login(self):
        result = payloads.parse_login(
            {"token": "T1", "userId": "7", "email": "a@b.c", "role": "ADMIN", "expiresIn": 60}
        )
        user = payloads.user_from_login(result)
        self.assertEqual(user.id, 7)
        self.assertEqual(user.roles, frozenset(["ADMIN"]))

    def test_login_without_token(self):
        with self.assertRaises(MalformedPayload):
            payloads.parse_login({"userId": 7, "email": "a@b.c"})

    def test_user_with_single_role_field(self):
        user = payloads.parse_user({"id": 3, "email": "a@b.c", "role": "USER"})
        self.assertEqual(user.roles, frozenset(["USER"]))
        self.assertEqual(user.username, "a@b.c")

    def test_corrupt_stored_user(self):
        with self.assertRaises(MalformedPayload):
            payloads.load_user("{")
        with self.assertRaises(MalformedPayload):
            payloads.load_user('{"email": "no id"}')

    def test_user_roles_must_be_lists(self):
        with self.assertRaises(MalformedPayload):
            payloads.parse_user({"id": 7, "roles": 5})
        with self.assertRaises(MalformedPayload):
            payloads.parse_user({"id": 7, "roles": ["USER"], "permissions": "read"})

    def test_cart_amounts_are_exact(self):
        cart = payloads.parse_cart(cart_body(cart_line(1, 3, "0.10")))
        self.assertEqual(cart.total, Decimal("0.30"))
        self.assertEqual(cart.item_count, 3)

    def test_cart_without_items(self):
        self.assertEqual(payloads.parse_cart({"id": 1, "items": None}), Cart())

    def test_cart_item_quantity_below_one(self):
        with self.assertRaises(MalformedPayload):
            payloads.parse_cart(cart_body(cart_line(1, 0)))

    def test_order(self):
        order = payloads.parse_order(order_body(42, status="confirmed"))
        self.assertEqual(order.status, "CONFIRMED")
        self.assertEqual(order.order_date, datetime(2024, 5, 1, 10, 30))
        self.assertEqual(order.line_items[0].price, Decimal("10.00"))

    def test_order_unknown_status(self):
        with self.assertRaises(MalformedPayload):
            payloads.parse_order(order_body(1, status="SHIPPED"))

    def test_order_with_bad_date_list(self):
        for date in ([2024, 13, 1], [2024], ["x", 1, 1]):
            body = dict(order_body(1), orderDate=date)
            with self.assertRaises(MalformedPayload):
                payloads.parse_order(body)

    def test_non_finite_price(self):
        for price in ("NaN", "Infinity", "-Infinity"):
            with self.assertRaises(MalformedPayload):
                payloads.parse_cart(cart_body(cart_line(1, 1, price)))

    def test_order_request_body(self):
        cart = payloads.parse_cart(cart_body(cart_line(4, 2), cart_line(9, 1)))
        self.assertEqual(
            payloads.order_request_body(cart),
            {
                "orderLineItemsDtoList": [
                    {"productId": 4, "quantity": 2},
                    {"productId": 9, "quantity": 1},
                ]
            },
        )


class GatewayTestCase(unittest.IsolatedAsyncioTestCase):
    async def request_with(self, handler, **kwargs):
        async with Gateway(BASE_URL, transport=httpx.MockTransport(handler)) as api:
            return await api.get("/anything", **kwargs)

    async def test_empty_body_is_none(self):
        self.assertIsNone(await self.request_with(lambda r: httpx.Response(204)))

    async def test_invalid_json(self):
        with self.assertRaises(MalformedPayload):
            await self.request_with(lambda r: httpx.Response(200, text="<html>"))

    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(TransportError):
            await self.request_with(handler)

    async def test_status_uses_messages(self):
        with self.assertRaises(ServerError) as ctx:
            await self.request_with(
                lambda r: httpx.Response(500), messages={500: "Down for maintenance."}
            )
        self.assertEqual(ctx.exception.message, "Down for maintenance.")


if __name__ == "__main__":
    unittest.main()
