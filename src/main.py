from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.errors import StorefrontError
from utils.logger import get_logger
from utils.messages import (
    CartChangedMessage,
    LoginRequiredMessage,
    ModeSwitchedMessage,
    NewOrderMessage,
    OrderStateMessage,
    QuitRequestedMessage,
    SessionChangedMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.scr_admin_clients import AdminClientsScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen
from views.scr_past_orders import PastOrdersScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    CSS = """
    .hidden {
        display: none;
    }
    Sidebar {
        dock: left;
        width: 32;
        padding: 0 1;
    }
    ModalScreen {
        align: center middle;
    }
    #div-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: thick $primary;
    }
    #hort-buttons, #hort-table-control, #hort-client-form, #div-button {
        height: auto;
    }
    #div-cart-item-group, #div-item, #div-actions {
        layout: horizontal;
        height: auto;
    }
    #div-item Label {
        width: 1fr;
    }
    """

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "orders": PastOrdersScreen,
        "adm_products": AdminProductsScreen,
        "adm_clients": AdminClientsScreen,
    }

    CUSTOMER_MODES = {
        "catalog": "Catalog",
        "cart": "Cart",
        "orders": "My Orders",
    }
    ADMIN_MODES = {
        "orders": "Orders",
        "adm_products": "Products",
        "adm_clients": "Clients",
    }

    state: GlobalState

    def __init__(self, state: GlobalState | None = None):
        super().__init__()
        self.state = state or GlobalState.build()
        self._unsubscribe = []

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        # observables -> messages on the active screen (messages only bubble up)
        self._unsubscribe = [
            self.state.session.subscribe(
                lambda s: self.screen.post_message(SessionChangedMessage(s))
            ),
            self.state.cart.cart.subscribe(
                lambda c: self.screen.post_message(CartChangedMessage(c))
            ),
            self.state.orders.state.subscribe(
                lambda st: self.screen.post_message(OrderStateMessage(st))
            ),
            self.state.orders.orders.subscribe(
                lambda _: self.screen.post_message(NewOrderMessage())
            ),
        ]
        self.state.set_navigator(lambda: self.post_message(LoginRequiredMessage()))
        await self.state.start()
        self.main_flow()

    async def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        await self.state.close()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.auth.logout()
        self.notify("Logout successful.")

    @on(LoginRequiredMessage)
    def handle_login_required(self):
        if any(isinstance(s, LoginScreen) for s in self.screen_stack):
            return
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        # the session stays stored so the next start resumes it
        self.exit()

    @work(exclusive=True, group="main-flow")
    async def main_flow(self):
        if not self.state.auth.is_logged_in():
            await self.push_screen_wait(LoginScreen())

        try:
            await self.state.cart.load_cart()
        except StorefrontError as e:
            self.notify(e.message, severity="error")

        target = "orders" if self.state.auth.is_admin() else "catalog"
        self.post_message(ModeSwitchedMessage(self.current_mode, target))
        await self.switch_mode(target)


def run():
    app = StorefrontApp()
    app.run()


if __name__ == "__main__":
    run()
