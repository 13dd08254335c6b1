from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Label, Rule

from api.errors import StorefrontError
from api.models import Cart, CartItem
from utils.messages import CartChangedMessage, ModeSwitchedMessage, OrderStateMessage
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal, QuantityModal


class CartItemActionEditMessage(Message):
    bubble = True


class CartItemActionRemoveMessage(Message):
    bubble = True


class CartItemActionLabel(Label):
    def action_edit(self):
        self.post_message(CartItemActionEditMessage())

    def action_remove(self):
        self.post_message(CartItemActionRemoveMessage())


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartItem):
        super().__init__()
        self.item = item

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(
                    self.item.product.name or f"Product {self.item.product.id}",
                    id="label-item-name",
                )
                yield Label(str(self.item.quantity), id="label-item-qty")
                yield Label(format_price(self.item.subtotal), id="label-item-price")
            with Container(id="div-actions"):
                yield CartItemActionLabel(
                    content="[@click=edit()]Edit[/]", id="link-item-edit"
                )
                yield CartItemActionLabel(
                    content="[@click=remove()]Remove[/]", id="link-item-remove"
                )

    @on(CartItemActionEditMessage)
    @work()
    async def handle_edit_item(self):
        qty = await self.app.push_screen_wait(
            QuantityModal(
                f"New quantity for '{self.item.product.name}' (0 removes it)",
                initial=self.item.quantity,
                minimum=0,
            )
        )
        if qty is None or qty == self.item.quantity:
            return
        try:
            await self.app.state.cart.update_quantity(self.item.product.id, qty)
        except StorefrontError as e:
            self.notify(e.message, severity="error")

    @on(CartItemActionRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )
        if not remove_confirmed:
            return

        try:
            update = await self.app.state.cart.remove_item(self.item.product.id)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        if update.applied:
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    Cart lines with edit/remove, plus checkout.

    The list is rendered from the cart projection only; every change arrives
    as a CartChangedMessage once the server has answered.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total Cart Value: $0.00", id="label-cart-total")
        yield Label("", id="label-order-banner")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        await self.render_cart(self.app.state.cart.cart.value)

    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="cart-load")
    async def handle_refresh(self):
        try:
            await self.app.state.cart.load_cart()
        except StorefrontError as e:
            self.notify(e.message, severity="error")

    @on(CartChangedMessage)
    async def handle_cart_change(self, message: CartChangedMessage):
        await self.render_cart(message.cart)

    async def render_cart(self, cart: Cart) -> None:
        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in cart.items])

        if not cart.items:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        self.query_one(
            "#label-cart-total", Label
        ).content = f"Total Cart Value: {format_price(cart.total)}"

    @on(OrderStateMessage)
    def handle_order_state(self, message: OrderStateMessage):
        state = message.state
        banner = self.query_one("#label-order-banner", Label)
        self.query_one("#btn-checkout", Button).disabled = state.phase == "submitting"
        if state.phase == "submitting":
            banner.content = "Placing order..."
        elif state.phase == "succeeded":
            number = state.order.order_number or state.order.id
            banner.content = f"Order {number} placed."
        elif state.phase == "failed":
            banner.content = f"Order failed: {state.error}"
        else:
            banner.content = ""

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if not remove_confirmed:
            return
        try:
            await self.app.state.cart.clear()
        except StorefrontError as e:
            self.notify(e.message, severity="error")

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        await self.app.push_screen_wait(CheckoutModal())
