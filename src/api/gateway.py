# owns the single http client to the gateway, translates failures into api.errors
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from api.errors import MalformedPayload, TransportError, Unauthorized, error_for_status
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

RequestHook = Callable[[httpx.Request], Awaitable[None]]
ResponseHook = Callable[[httpx.Response], Awaitable[None]]

# per-service path prefixes behind the gateway
AUTH = "/auth"
USERS = "/MS-CLIENT/api/v1/users"
CART = "/COMMANDE-SERVICE/api/cart"
ORDERS = "/COMMANDE-SERVICE/api/orders"
PRODUCTS = "/PRODUCT-SERVICE/products"
CATEGORIES = "/PRODUCT-SERVICE/categories"


class Gateway:
    """
    Thin wrapper over one ``httpx.AsyncClient``.

    Every call goes through the client's event hooks (that is where the auth
    middleware lives), so nothing here knows about tokens.
    """

    def __init__(
        self,
        base_url: str = config.API_URL,
        *,
        request_hooks: Optional[List[RequestHook]] = None,
        response_hooks: Optional[List[ResponseHook]] = None,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            event_hooks={
                "request": list(request_hooks or []),
                "response": list(response_hooks or []),
            },
        )

    async def __aenter__(self) -> "Gateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        messages: Optional[Dict[int, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None for empty bodies).

        Raises:
            TransportError: gateway unreachable
            ApiError subclasses: non-2xx status, worded from ``messages``
            MalformedPayload: 2xx with a body that is not JSON
        """
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except Unauthorized:
            # the auth middleware already ended the session; reword for this service
            raise error_for_status(401, messages) from None
        except httpx.RequestError as e:
            _logger.error(f"{method} {path} failed: {e!r}")
            raise TransportError(
                "Cannot reach the server. Check your connection and try again."
            ) from e

        if response.is_success:
            if not response.content:
                return None
            if not expect_json:
                return response.text
            try:
                return response.json()
            except ValueError as e:
                raise MalformedPayload("Server returned an invalid response.") from e

        error = error_for_status(response.status_code, messages)
        _logger.warning(f"{method} {path} -> {response.status_code}: {error.message}")
        raise error

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)
