from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

from api.errors import StorefrontError
from api.models import ORDER_STATUSES, Order
from utils.messages import (
    ModeSwitchedMessage,
    NewOrderMessage,
    OrderStateMessage,
    SessionChangedMessage,
)
from utils.pure import format_price, order_detail_markdown
from views.base_screen import BaseScreen


class PastOrdersScreen(BaseScreen):
    """
    Order history, most recent first, with a detail view of the highlighted row.

    Customers see their own orders. Administrators see every order and get
    one button per status to move the highlighted order along.
    """

    # Show some hints in footer
    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[int, Order] = {}
        self._selected: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            for status in ORDER_STATUSES:
                yield Button(
                    status.title(),
                    id=f"btn-status-{status.lower()}",
                    classes="btn-status",
                )

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Items", "Total")

        self.sync_admin_controls()
        self.render_orders()

    @on(SessionChangedMessage)
    def sync_admin_controls(self) -> None:
        is_admin = self.app.state.auth.is_admin()
        for btn in self.query(".btn-status"):
            btn.display = is_admin

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="orders")
    async def handle_refresh(self):
        try:
            await self.app.state.orders.list_orders()
        except StorefrontError as e:
            self.notify(e.message, severity="error")

    @on(NewOrderMessage)
    @on(OrderStateMessage)
    def render_orders(self) -> None:
        orders = self.app.state.orders.orders.value
        self._orders = {o.id: o for o in orders}

        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            date = o.order_date.strftime("%Y-%m-%d %H:%M") if o.order_date else "-"
            table.add_row(
                o.order_number or o.id,
                date,
                o.status,
                sum(li.quantity for li in o.line_items),
                format_price(o.total_price),
                key=str(o.id),
            )

        if self._selected in self._orders:
            table.move_cursor(row=table.get_row_index(str(self._selected)))
        elif orders:
            self._selected = orders[0].id
        else:
            self._selected = None
        self._render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        self._selected = int(event.row_key.value)
        self._render_detail()

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="order-detail")
    async def handle_row_select(self, event: DataTable.RowSelected) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        try:
            # replaces the entry in the history, which re-renders through NewOrderMessage
            await self.app.state.orders.get_order(int(event.row_key.value))
        except StorefrontError as e:
            self.notify(e.message, severity="error")

    def _render_detail(self) -> None:
        order = self._orders.get(self._selected) if self._selected is not None else None
        self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_detail_markdown(order)
        )

    @on(Button.Pressed, ".btn-status")
    @work(exclusive=True, group="order-status")
    async def handle_set_status(self, event: Button.Pressed) -> None:
        if self._selected is None:
            self.notify("Select an order first.", severity="warning")
            return

        status = event.button.id.removeprefix("btn-status-").upper()
        order = self._orders[self._selected]
        if order.status == status:
            return

        try:
            updated = await self.app.state.orders.set_order_status(order.id, status)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"Order {updated.order_number or updated.id} is now {updated.status}.")
