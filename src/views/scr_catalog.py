from typing import Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.events import ScreenResume
from textual.widgets import DataTable, Input, Label

from api.errors import StorefrontError
from api.models import Product
from utils import config
from utils.messages import CartChangedMessage, ModeSwitchedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_dialog import QuantityModal


class CatalogScreen(BaseScreen):
    """
    Product list with a name filter; enter on a row adds it to the cart.
    """

    # only here to be displayed in footer
    BINDINGS = [
        Binding("enter", "noop", "Add to Cart", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()
        self._products: Dict[int, Product] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Filter products by name...")
        yield DataTable(id="table-products")
        yield Label("", id="label-banner")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Category", "Manufacturer", "Price", "Stock", "In Cart")
        self.query_one("#input-search").focus()

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True, group="catalog")
    async def load_products(self) -> None:
        try:
            products = await self.app.state.catalog.list_products()
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self._products = {p.id: p for p in products}
        self.render_table()

    @on(Input.Changed, "#input-search")
    @on(CartChangedMessage)
    def render_table(self) -> None:
        query = self.query_one("#input-search", Input).value.strip().lower()
        shown: List[Product] = [
            p for p in self._products.values() if not query or query in p.name.lower()
        ]
        cart = self.app.state.cart
        table = self.query_one(DataTable)
        table.clear()
        for p in shown:
            table.add_row(
                p.id,
                p.name,
                p.category.name if p.category else "-",
                p.manufacturer,
                format_price(p.price),
                p.stock_quantity,
                cart.quantity_of(p.id) or "",
                key=str(p.id),
            )

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="add-to-cart")
    async def handle_add_to_cart(self, event: DataTable.RowSelected) -> None:
        product = self._products.get(int(event.row_key.value))
        if product is None:
            return

        if not self.app.state.auth.is_logged_in():
            self.notify("Please log in to add items to your cart.", severity="warning")
            return

        qty = await self.app.push_screen_wait(
            QuantityModal(f"How many '{product.name}'?", initial=1, minimum=1)
        )
        if not qty:
            return

        try:
            update = await self.app.state.cart.add_item(product, qty)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        if update.applied:
            banner = self.query_one("#label-banner", Label)
            banner.update(f"Added {qty} x {product.name} to cart.")
            self.set_timer(config.CART_BANNER_SECONDS, lambda: banner.update(""))
