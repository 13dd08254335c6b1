from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.binding import Binding
from textual.widgets import Button, DataTable, Input, Markdown

from api.errors import StorefrontError
from api.models import ProfileUpdate, User
from core.session import derive_role
from utils.messages import ModeSwitchedMessage
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class AdminClientsScreen(BaseScreen):
    """
    Administrators list registered users, edit their contact details,
    change their role or remove them. Enter reloads the highlighted client.
    """

    # Show some hints in footer
    BINDINGS = [
        Binding("enter", "noop", "Reload Client", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._clients: Dict[int, User] = {}
        self._selected: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-clients")
            yield Markdown("", id="md-client")
            with Horizontal(id="hort-client-form"):
                yield Input(placeholder="First name", id="input-first-name")
                yield Input(placeholder="Last name", id="input-last-name")
                yield Input(placeholder="Shipping address", id="input-address")
                yield Input(placeholder="Phone", id="input-phone")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("Save", id="btn-save", variant="primary")
            yield Button("Make Admin", id="btn-role-admin")
            yield Button("Make User", id="btn-role-user")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Email", "Role")

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="clients")
    async def load_clients(self) -> None:
        try:
            clients = await self.app.state.admin.list_clients()
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        self._clients = {c.id: c for c in clients}
        self.render_clients()
        self._fill_form()

    def render_clients(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for c in self._clients.values():
            table.add_row(
                c.id, c.display_name, c.email, derive_role(c.roles) or "-", key=str(c.id)
            )
        if self._selected in self._clients:
            table.move_cursor(row=table.get_row_index(str(self._selected)))
        else:
            self._selected = next(iter(self._clients), None)
        self._render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        self._selected = int(event.row_key.value)
        self._render_detail()
        self._fill_form()

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="client-update")
    async def handle_row_select(self, event: DataTable.RowSelected) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        try:
            client = await self.app.state.admin.get_client(int(event.row_key.value))
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self._clients[client.id] = client
        self.render_clients()
        self._fill_form()

    def _fill_form(self) -> None:
        client = self._clients.get(self._selected) if self._selected is not None else None
        values = {
            "#input-first-name": client.first_name if client else None,
            "#input-last-name": client.last_name if client else None,
            "#input-address": client.shipping_address if client else None,
            "#input-phone": client.phone if client else None,
        }
        for selector, value in values.items():
            self.query_one(selector, Input).value = value or ""

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True, group="client-update")
    async def handle_save(self) -> None:
        if self._selected is None:
            return
        # blank inputs leave the field as it is
        update = ProfileUpdate(
            first_name=self.query_one("#input-first-name", Input).value.strip() or None,
            last_name=self.query_one("#input-last-name", Input).value.strip() or None,
            shipping_address=self.query_one("#input-address", Input).value.strip() or None,
            phone=self.query_one("#input-phone", Input).value.strip() or None,
        )
        try:
            client = await self.app.state.admin.update_client(self._selected, update)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self._clients[client.id] = client
        self.render_clients()
        self.notify(f"Saved {client.email}.")

    def _render_detail(self) -> None:
        client = self._clients.get(self._selected) if self._selected is not None else None
        if client is None:
            self.query_one("#md-client", Markdown).update("")
            return
        rows = [
            ["Username", client.username],
            ["Email", client.email],
            ["Roles", ", ".join(sorted(client.roles)) or "-"],
            ["Shipping Address", client.shipping_address or "-"],
            ["Phone", client.phone or "-"],
        ]
        self.query_one("#md-client", Markdown).update(
            generate_markdown_table(["Field", "Value"], rows, ["l", "l"])
        )

    @on(Button.Pressed, "#btn-role-admin")
    @on(Button.Pressed, "#btn-role-user")
    @work(exclusive=True, group="client-update")
    async def handle_set_role(self, event: Button.Pressed) -> None:
        if self._selected is None:
            return
        role = event.button.id.removeprefix("btn-role-").upper()
        try:
            client = await self.app.state.admin.set_client_role(self._selected, role)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self._clients[client.id] = client
        self.render_clients()
        self.notify(f"{client.email} is now {role}.")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="client-update")
    async def handle_delete(self) -> None:
        if self._selected is None:
            return
        client = self._clients[self._selected]
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete {client.email}? This cannot be undone.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return

        try:
            await self.app.state.admin.delete_client(client.id)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return
        self._clients.pop(client.id, None)
        self.render_clients()
        self.notify("Client deleted.")
