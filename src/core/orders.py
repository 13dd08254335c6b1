from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from api import services
from api.errors import EmptyCartError, Forbidden, StorefrontError, SubmissionInProgress
from api.gateway import Gateway
from api.models import Order, OrderStatus, Session
from core.cart import CartSynchronizer
from core.observable import Observable
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

Phase = Literal["idle", "submitting", "succeeded", "failed"]


@dataclass(frozen=True)
class SubmissionState:
    phase: Phase = "idle"
    order: Optional[Order] = None
    error: Optional[str] = None


class OrderSubmissionPipeline:
    """
    Turns the cart projection into an order.

    ``state`` walks idle -> submitting -> succeeded | failed and falls back to
    idle by itself once ``banner_seconds`` have passed, so the UI only has to
    render whatever it is told. ``orders`` is the locally held history,
    most recent first.
    """

    def __init__(
        self,
        api: Gateway,
        cart: CartSynchronizer,
        session: Observable[Session],
        banner_seconds: float = config.ORDER_BANNER_SECONDS,
    ):
        self._api = api
        self._cart = cart
        self._session = session
        self.banner_seconds = banner_seconds

        self.state: Observable[SubmissionState] = Observable(
            SubmissionState(), name="order-submission"
        )
        self.orders: Observable[Tuple[Order, ...]] = Observable((), name="orders")
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._owner = session.value.user.id if session.value.user else None
        self._generation = 0

        session.subscribe(self._on_session)

    def _on_session(self, session: Session) -> None:
        # order history is per user
        owner = session.user.id if session.is_authenticated and session.user else None
        if owner != self._owner:
            self._owner = owner
            self._generation += 1
            self.orders.publish(())

    # ---------------------------
    # State machine
    # ---------------------------

    def _enter(self, state: SubmissionState) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self.state.publish(state)
        if state.phase in ("succeeded", "failed"):
            loop = asyncio.get_running_loop()
            self._reset_handle = loop.call_later(self.banner_seconds, self._back_to_idle)

    def _back_to_idle(self) -> None:
        self._reset_handle = None
        if self.state.value.phase in ("succeeded", "failed"):
            self.state.publish(SubmissionState())

    @property
    def is_submitting(self) -> bool:
        return self.state.value.phase == "submitting"

    # ---------------------------
    # Operations
    # ---------------------------

    async def submit(self) -> Order:
        """
        Place an order for everything in the cart.

        Raises:
            EmptyCartError: the cart projection is empty; nothing is sent
            SubmissionInProgress: a previous submit has not finished
            StorefrontError: the order service refused or failed; the cart
                is left untouched
        """
        if self.is_submitting:
            raise SubmissionInProgress()
        cart = self._cart.cart.value
        if not cart.items:
            error = EmptyCartError()
            self._enter(SubmissionState(phase="failed", error=error.message))
            raise error

        self._enter(SubmissionState(phase="submitting"))
        generation = self._generation
        try:
            order = await services.create_order(self._api, cart)
        except StorefrontError as e:
            _logger.error(f"Order placement failed: {e.message}")
            self._enter(SubmissionState(phase="failed", error=e.message))
            raise

        if generation == self._generation:
            self.orders.publish((order,) + self.orders.value)
        _logger.info(f"Order {order.order_number or order.id} placed")

        try:
            await self._cart.clear()
        except StorefrontError as e:
            # the order exists; resync instead of guessing what the cart holds
            _logger.warning(f"Clearing cart after order failed: {e.message}")
            try:
                await self._cart.load_cart()
            except StorefrontError as reload_error:
                _logger.warning(f"Cart reload failed: {reload_error.message}")

        self._enter(SubmissionState(phase="succeeded", order=order))
        return order

    async def list_orders(self) -> List[Order]:
        """Fetch the history. A reply that lands after the user changed is not published."""
        generation = self._generation
        orders = await services.list_orders(self._api)
        if generation != self._generation:
            _logger.debug("Dropping order history fetched for a previous user")
            return orders
        self.orders.publish(tuple(orders))
        return orders

    async def get_order(self, order_id: int) -> Order:
        generation = self._generation
        order = await services.get_order(self._api, order_id)
        self._replace(order, generation)
        return order

    async def set_order_status(self, order_id: int, status: OrderStatus) -> Order:
        """
        Admin only. The local entry is replaced with what the server returns,
        never with a locally predicted status. Concurrent admins: last write wins.
        """
        if self._session.value.role != "ADMIN":
            raise Forbidden("Only administrators can change an order's status.", 403)
        generation = self._generation
        order = await services.update_order_status(self._api, order_id, status)
        self._replace(order, generation)
        _logger.info(f"Order {order_id} is now {order.status}")
        return order

    def _replace(self, order: Order, generation: int) -> None:
        if generation != self._generation:
            return
        current = self.orders.value
        if not any(o.id == order.id for o in current):
            return
        self.orders.publish(tuple(order if o.id == order.id else o for o in current))
