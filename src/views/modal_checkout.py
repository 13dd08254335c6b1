from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from api.errors import StorefrontError, SubmissionInProgress
from utils.pure import cart_summary_markdown
from views.modal_dialog import DialogModal


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary of the cart with a confirm button.
    Dismisses with True once the order is placed, False otherwise.
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        cart = self.app.state.cart.cart.value
        await self.query_one(MarkdownViewer).document.update(cart_summary_markdown(cart))
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            self.dismiss(False)
            return

        submit_btn = self.query_one("#btn-submit", Button)
        submit_btn.disabled = True
        try:
            order = await self.app.state.orders.submit()
        except SubmissionInProgress as e:
            self.notify(e.message, severity="warning")
            return
        except StorefrontError as e:
            # the cart is untouched, stay here so the user can retry
            self.notify(e.message, severity="error")
            submit_btn.disabled = False
            return

        self.notify(f"Order placed. Your order number is {order.order_number or order.id}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
