from __future__ import annotations

from typing import List

from api import models, services
from api.errors import Forbidden
from api.gateway import Gateway
from api.models import Session
from core.observable import Observable
from utils.logger import get_logger

_logger = get_logger(__name__)


class Catalog:
    """Public, read-only catalog access."""

    def __init__(self, api: Gateway):
        self._api = api

    async def list_products(self) -> List[models.Product]:
        return await services.list_products(self._api)

    async def get_product(self, product_id: int) -> models.Product:
        return await services.get_product(self._api, product_id)

    async def list_categories(self) -> List[models.Category]:
        return await services.list_categories(self._api)

    async def service_status(self) -> str:
        return await services.product_service_status(self._api)


class AdminConsole:
    """
    Product and client management for administrators.

    Every method checks the published session first and raises ``Forbidden``
    without touching the network when the current user is not an ADMIN.
    """

    def __init__(self, api: Gateway, session: Observable[Session]):
        self._api = api
        self._session = session

    def _require_admin(self) -> None:
        if self._session.value.role != "ADMIN":
            raise Forbidden("Administrator access required.", 403)

    # products

    async def create_product(self, draft: models.ProductDraft) -> models.Product:
        self._require_admin()
        product = await services.create_product(self._api, draft)
        _logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def update_product(
        self, product_id: int, draft: models.ProductDraft
    ) -> models.Product:
        self._require_admin()
        return await services.update_product(self._api, product_id, draft)

    async def delete_product(self, product_id: int) -> None:
        self._require_admin()
        await services.delete_product(self._api, product_id)
        _logger.info(f"Deleted product {product_id}")

    # clients

    async def list_clients(self) -> List[models.User]:
        self._require_admin()
        return await services.list_users(self._api)

    async def get_client(self, user_id: int) -> models.User:
        self._require_admin()
        return await services.get_user(self._api, user_id)

    async def update_client(
        self, user_id: int, update: models.ProfileUpdate
    ) -> models.User:
        self._require_admin()
        return await services.update_user(self._api, user_id, update)

    async def set_client_role(self, user_id: int, role: str) -> models.User:
        self._require_admin()
        return await services.update_user_role(self._api, user_id, role)

    async def delete_client(self, user_id: int) -> None:
        self._require_admin()
        current = self._session.value.user
        if current is not None and current.id == user_id:
            raise Forbidden("Use profile deletion to remove your own account.", 403)
        await services.delete_user(self._api, user_id)
        _logger.info(f"Deleted client {user_id}")
