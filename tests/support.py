import json
import os
import sys
import tempfile
import unittest
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api import payloads  # noqa: E402
from api.models import User  # noqa: E402
from core.session import authenticated  # noqa: E402
from utils.state import GlobalState  # noqa: E402

BASE_URL = "http://gateway.test"

Handler = Callable[[httpx.Request], Any]


class FakeGateway:
    """
    In-memory stand-in for the API gateway, served through httpx.MockTransport.

    Routes are keyed by (method, path). A route is either a fixed
    (status, body) pair or a handler taking the request; handlers may be
    coroutines so a test can hold a response back.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, status: int = 200, body: Any = None, text: Optional[str] = None):
        def handler(_request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = handler

    def handle(self, method: str, path: str, handler: Handler):
        self.routes[(method, path)] = handler

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404)
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._dispatch)

    def sent(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


def make_user(user_id: int = 7, email: str = "alice@example.com", role: str = "USER") -> User:
    return User(id=user_id, username=email, email=email, roles=frozenset([role]))


def cart_line(product_id: int, quantity: int, price: str = "10.00", name: str = "") -> Dict[str, Any]:
    subtotal = f"{float(price) * quantity:.2f}"
    return {
        "id": product_id * 100,
        "productId": product_id,
        "productName": name or f"Product {product_id}",
        "productImageUrl": None,
        "price": price,
        "quantity": quantity,
        "subtotal": subtotal,
    }


def cart_body(*lines: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": 1, "userId": 7, "items": list(lines)}


def order_body(order_id: int = 42, status: str = "CREATED", total: str = "20.00") -> Dict[str, Any]:
    return {
        "id": order_id,
        "orderNumber": f"ORD-{order_id}",
        "totalPrice": total,
        "orderDate": "2024-05-01T10:30:00",
        "status": status,
        "userId": 7,
        "orderLineItems": [
            {"id": 1, "productId": 1, "quantity": 2, "price": "10.00"},
        ],
    }


class StateTestCase(unittest.IsolatedAsyncioTestCase):
    """Builds a fully wired GlobalState against a FakeGateway and a temp credential db."""

    banner_seconds = 0.05

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "credentials.sqlite")
        self.gateway = FakeGateway()
        self.navigations = 0
        self.state = GlobalState.build(
            api_url=BASE_URL,
            credentials_path=self.db_path,
            transport=self.gateway.transport,
            banner_seconds=self.banner_seconds,
        )
        self.state.set_navigator(self._navigate)

    async def asyncTearDown(self):
        await self.state.close()

    def tearDown(self):
        self.temp_dir.cleanup()

    def _navigate(self):
        self.navigations += 1

    async def log_in_as(self, user: Optional[User] = None, token: str = "T1") -> User:
        """Put a user in the store and the session without going through /auth/login."""
        user = user or make_user()
        await self.state.credentials.save(token, payloads.dump_user(user))
        self.state.session.publish(authenticated(user))
        return user
