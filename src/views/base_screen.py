from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from api.models import Session
from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    SessionChangedMessage,
    UserLogoutMessage,
)
from utils.pure import format_price, generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode
        await self.render_session(self.app.state.session.value)

    async def render_session(self, session: Session) -> None:
        if not session.is_authenticated or session.user is None:
            await self.query_one(Markdown).update("")
            await self.query_one("#list-menu", ListView).clear()
            return

        user = session.user
        rows = [["User", user.display_name], ["Email", user.email], ["Role", session.role]]
        if session.role != "ADMIN":
            rows.append(["Cart", format_price(self.app.state.cart.total())])
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

        modes = self.app.ADMIN_MODES if session.role == "ADMIN" else self.app.CUSTOMER_MODES
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.highlight_item(self.init_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        for item in self.query_one("#list-menu").children:
            item.highlighted = mode_str in item.id


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Storefront",
        show_sidebar: bool = True,
    ) -> None:
        """
        set the header subtitle (taken from the mode tables when this
        screen is a mode) and whether the sidebar shows
        """
        self.app.title = "Storefront"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.ADMIN_MODES.get(
                    k, self.app.CUSTOMER_MODES.get(k, header_sub_title)
                )

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(SessionChangedMessage)
    async def handle_session_changed(self, message: SessionChangedMessage):
        if self._show_sidebar:
            await self.query_one(Sidebar).render_session(message.session)

    @on(CartChangedMessage)
    async def handle_sidebar_cart(self):
        if self._show_sidebar:
            await self.query_one(Sidebar).render_session(self.app.state.session.value)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
