from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from api.gateway import Gateway
from api.models import Session
from core.admin import AdminConsole, Catalog
from core.cart import CartSynchronizer
from core.credentials import CredentialStore
from core.middleware import RequestAuthMiddleware
from core.observable import Observable
from core.orders import OrderSubmissionPipeline
from core.session import SessionManager
from utils import config


@dataclass
class GlobalState:
    """
    Process-wide wiring, built once and handed to screens by reference.

    Fields:
      - session: the shared Observable[Session]
      - auth: SessionManager (login/logout/profile)
      - cart: CartSynchronizer (server-backed cart projection)
      - orders: OrderSubmissionPipeline (checkout and order history)
      - catalog / admin: product and client access
    """

    credentials: CredentialStore
    session: Observable[Session]
    middleware: RequestAuthMiddleware
    api: Gateway
    auth: SessionManager
    cart: CartSynchronizer
    orders: OrderSubmissionPipeline
    catalog: Catalog
    admin: AdminConsole

    @classmethod
    def build(
        cls,
        api_url: str = config.API_URL,
        credentials_path: str = config.CREDENTIALS_DB_PATH,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        banner_seconds: float = config.ORDER_BANNER_SECONDS,
    ) -> "GlobalState":
        credentials = CredentialStore(credentials_path)
        session: Observable[Session] = Observable(Session.anonymous(), name="session")
        middleware = RequestAuthMiddleware(credentials, session)
        api = Gateway(
            api_url,
            request_hooks=[middleware.on_request],
            response_hooks=[middleware.on_response],
            transport=transport,
        )
        auth = SessionManager(api, credentials, session)
        cart = CartSynchronizer(api, session)
        orders = OrderSubmissionPipeline(api, cart, session, banner_seconds=banner_seconds)
        return cls(
            credentials=credentials,
            session=session,
            middleware=middleware,
            api=api,
            auth=auth,
            cart=cart,
            orders=orders,
            catalog=Catalog(api),
            admin=AdminConsole(api, session),
        )

    def set_navigator(self, navigate_to_login: Callable[[], None]) -> None:
        """Where both the middleware and logout send the user."""
        self.middleware.set_navigator(navigate_to_login)
        self.auth.set_navigator(navigate_to_login)

    async def start(self) -> Session:
        return await self.auth.restore()

    async def close(self) -> None:
        await self.api.aclose()
