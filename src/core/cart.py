from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Literal, Optional

from api import services
from api.gateway import Gateway
from api.models import Cart, ProductSummary, Session
from core.observable import Observable
from utils.logger import get_logger

_logger = get_logger(__name__)

CartOutcome = Literal["applied", "stale", "rejected_not_authenticated"]

APPLIED: CartOutcome = "applied"
STALE: CartOutcome = "stale"
REJECTED_NOT_AUTHENTICATED: CartOutcome = "rejected_not_authenticated"


@dataclass(frozen=True)
class CartUpdate:
    """What a cart call did to the projection, plus the projection afterwards."""

    cart: Cart
    outcome: CartOutcome

    @property
    def applied(self) -> bool:
        return self.outcome == APPLIED

    @property
    def rejected(self) -> bool:
        return self.outcome == REJECTED_NOT_AUTHENTICATED


class CartSynchronizer:
    """
    Local projection of the server-held cart.

    Every mutation is a round trip; on success the projection is replaced by
    the server's items, on failure it is left as is and the error propagates.
    Each call takes a sequence number when it is issued, and a response older
    than the last applied one is dropped, so overlapping calls resolve to the
    most recently issued one regardless of arrival order.
    """

    def __init__(self, api: Gateway, session: Observable[Session]):
        self._api = api
        self._session = session
        self.cart: Observable[Cart] = Observable(Cart(), name="cart")

        self._issued = 0
        self._applied = 0
        self._owner: Optional[int] = self._user_id(session.value)
        session.subscribe(self._on_session)

    @staticmethod
    def _user_id(session: Session) -> Optional[int]:
        if not session.is_authenticated or session.user is None:
            return None
        return session.user.id

    def _on_session(self, session: Session) -> None:
        owner = self._user_id(session)
        if owner == self._owner:
            return
        # cart belongs to someone else now: drop it and anything in flight
        _logger.debug(f"Cart owner changed {self._owner} -> {owner}, resetting")
        self._owner = owner
        self._reset()

    def _reset(self) -> None:
        self._issued += 1
        self._applied = self._issued
        self.cart.publish(Cart())

    def _is_authenticated(self) -> bool:
        return self._session.value.is_authenticated

    def _rejected(self, op: str) -> CartUpdate:
        _logger.warning(f"Cart {op} refused: not logged in")
        return CartUpdate(self.cart.value, REJECTED_NOT_AUTHENTICATED)

    async def _sync(self, op: str, call: Callable[[], Awaitable[Cart]]) -> CartUpdate:
        self._issued += 1
        seq = self._issued

        cart = await call()

        if seq < self._applied:
            _logger.debug(f"Cart {op} #{seq} arrived after #{self._applied}, dropped")
            return CartUpdate(self.cart.value, STALE)
        self._applied = seq
        self.cart.publish(cart)
        return CartUpdate(cart, APPLIED)

    # ---------------------------
    # Operations
    # ---------------------------

    async def load_cart(self) -> CartUpdate:
        if not self._is_authenticated():
            self._reset()
            return CartUpdate(self.cart.value, REJECTED_NOT_AUTHENTICATED)
        return await self._sync("load", lambda: services.get_cart(self._api))

    async def add_item(self, product: ProductSummary, quantity: int = 1) -> CartUpdate:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")
        if not self._is_authenticated():
            return self._rejected("add")
        return await self._sync(
            "add", lambda: services.add_cart_item(self._api, product.id, quantity)
        )

    async def remove_item(self, product_id: int) -> CartUpdate:
        if not self._is_authenticated():
            return self._rejected("remove")
        return await self._sync(
            "remove", lambda: services.remove_cart_item(self._api, product_id)
        )

    async def update_quantity(self, product_id: int, quantity: int) -> CartUpdate:
        """Set the quantity of a line. 0 removes the line."""
        if quantity < 0:
            raise ValueError("Quantity cannot be negative.")
        if quantity == 0:
            return await self.remove_item(product_id)
        if not self._is_authenticated():
            return self._rejected("update")
        return await self._sync(
            "update", lambda: services.update_cart_item(self._api, product_id, quantity)
        )

    async def clear(self) -> CartUpdate:
        if not self._is_authenticated():
            self._reset()
            return CartUpdate(self.cart.value, REJECTED_NOT_AUTHENTICATED)

        async def call() -> Cart:
            await services.clear_cart(self._api)
            return Cart()

        return await self._sync("clear", call)

    # ---------------------------
    # Derived reads, no I/O
    # ---------------------------

    def items(self):
        return self.cart.value.items

    def item_count(self) -> int:
        return self.cart.value.item_count

    def total(self) -> Decimal:
        return self.cart.value.total

    def contains(self, product_id: int) -> bool:
        return self.cart.value.find(product_id) is not None

    def quantity_of(self, product_id: int) -> int:
        item = self.cart.value.find(product_id)
        return item.quantity if item else 0

    def is_empty(self) -> bool:
        return not self.cart.value.items
