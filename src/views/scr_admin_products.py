import dataclasses
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer, OptionList, Select

from api.errors import StorefrontError
from api.models import Category, Product, ProductDraft
from utils.messages import ModeSwitchedMessage
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class AdminProductsScreen(BaseScreen):
    """
    Administrators search the catalog, then create, edit or delete products.
    Selecting nothing (or pressing New) turns the form into a create form.
    """

    current_pid: Optional[int] = None

    def __init__(self) -> None:
        super().__init__()
        self._products: Dict[int, Product] = {}
        self._categories: List[Category] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search for product...")
            yield OptionList(id="optlist-prods")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
            with Horizontal(id="div-new-inputs"):
                with Vertical():
                    yield Label("Name:")
                    yield Input(id="input-name")
                with Vertical():
                    yield Label("Price ($):")
                    yield Input(
                        id="input-price", type="number", validators=[Number(minimum=0.0)]
                    )
                with Vertical():
                    yield Label("Stock:")
                    yield Input(
                        id="input-stock", type="integer", validators=[Number(minimum=0)]
                    )
                with Vertical():
                    yield Label("Category:")
                    yield Select([], id="select-category", allow_blank=True)
            with Horizontal(id="div-more-inputs"):
                with Vertical():
                    yield Label("Manufacturer:")
                    yield Input(id="input-manufacturer")
                with Vertical():
                    yield Label("Description:")
                    yield Input(id="input-description")
            with Horizontal(id="div-button"):
                yield Button("New", id="btn-new")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Save", id="btn-save", variant="success")

    def on_mount(self) -> None:
        self.query_one("#input-search", Input).focus()
        self.query_one("#md-prod").add_class("hidden")

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True, group="admin-products")
    async def load_catalog(self) -> None:
        try:
            products = await self.app.state.catalog.list_products()
            self._categories = await self.app.state.catalog.list_categories()
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        self._products = {p.id: p for p in products}
        self.query_one("#select-category", Select).set_options(
            [(c.name, c.id) for c in self._categories]
        )
        self.update_optlist(self.query_one("#input-search", Input).value)

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self.update_optlist(message.value)

    def update_optlist(self, query: str) -> None:
        """
        fill option list with products whose name or id matches
        """
        query = query.strip().lower()
        matches = [
            p
            for p in self._products.values()
            if not query or query in p.name.lower() or query == str(p.id)
        ]
        opt_list = self.query_one("#optlist-prods", OptionList)
        opt_list.clear_options()
        opt_list.add_options([f"{p.id} {p.name}" for p in matches])

    def on_option_list_option_selected(self, message: OptionList.OptionSelected):
        self.current_pid = int(str(message.option.prompt).split(" ")[0])
        self.render_product()

    def render_product(self) -> None:
        prod = self._products.get(self.current_pid) if self.current_pid else None
        md_prod = self.query_one("#md-prod", MarkdownViewer)

        if prod is None:
            md_prod.add_class("hidden")
            for input_id in ("#input-name", "#input-price", "#input-stock",
                             "#input-manufacturer", "#input-description"):
                self.query_one(input_id, Input).value = ""
            self.query_one("#select-category", Select).clear()
            return

        rows = [[k, v] for k, v in dataclasses.asdict(prod).items()]
        md_table = generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        md_prod.document.update(f"### Product Detail: {prod.name}\n\n" + md_table)
        md_prod.remove_class("hidden")

        # prefill inputs with current values for convenience
        self.query_one("#input-name", Input).value = prod.name
        self.query_one("#input-price", Input).value = f"{prod.price:.2f}"
        self.query_one("#input-stock", Input).value = str(prod.stock_quantity)
        self.query_one("#input-manufacturer", Input).value = prod.manufacturer
        self.query_one("#input-description", Input).value = prod.description
        if prod.category is not None:
            self.query_one("#select-category", Select).value = prod.category.id

    def _read_draft(self) -> Optional[ProductDraft]:
        name_input = self.query_one("#input-name", Input)
        price_input = self.query_one("#input-price", Input)
        stock_input = self.query_one("#input-stock", Input)
        category = self.query_one("#select-category", Select)

        if not name_input.value.strip():
            name_input.focus()
            name_input.add_class("-invalid")
            return None
        try:
            price = Decimal(price_input.value)
        except InvalidOperation:
            price_input.focus()
            price_input.add_class("-invalid")
            return None
        if not stock_input.value or not stock_input.is_valid:
            stock_input.focus()
            stock_input.add_class("-invalid")
            return None
        if category.value is Select.BLANK:
            self.notify("Pick a category.", severity="error")
            return None

        prod = self._products.get(self.current_pid) if self.current_pid else None
        return ProductDraft(
            name=name_input.value.strip(),
            price=price,
            stock_quantity=int(stock_input.value),
            category_id=category.value,
            description=self.query_one("#input-description", Input).value.strip(),
            image_url=prod.image_url if prod else None,
            manufacturer=self.query_one("#input-manufacturer", Input).value.strip(),
        )

    @on(Button.Pressed, "#btn-new")
    def handle_new(self) -> None:
        self.current_pid = None
        self.render_product()
        self.query_one("#input-name", Input).focus()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        draft = self._read_draft()
        if draft is None:
            return

        admin = self.app.state.admin
        try:
            if self.current_pid is None:
                prod = await admin.create_product(draft)
                self.notify(f"Product {prod.id} created.")
            else:
                prod = await admin.update_product(self.current_pid, draft)
                self.notify("Product updated successfully.")
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        self._products[prod.id] = prod
        self.current_pid = prod.id
        self.render_product()
        self.update_optlist(self.query_one("#input-search", Input).value)

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if self.current_pid is None:
            self.notify("Select a product first.", severity="warning")
            return

        prod = self._products[self.current_pid]
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete '{prod.name}'? This cannot be undone.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return

        try:
            await self.app.state.admin.delete_product(prod.id)
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        self._products.pop(prod.id, None)
        self.current_pid = None
        self.render_product()
        self.update_optlist(self.query_one("#input-search", Input).value)
        self.notify("Product deleted.")
