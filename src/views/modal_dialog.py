from typing import Dict, Literal, Optional, Tuple, override

from textual import on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]


class DialogModal(ModalScreen[bool]):
    """
    A yes/no dialog. Dismisses with True for the primary button.
    """

    VARIANT_MAP: Dict[str, Tuple[str, str]] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        primary, secondary = DialogModal.VARIANT_MAP[self.tone]
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(self.secondary_text, variant=secondary, id="btn-secondary")
                yield Button(self.primary_text, variant=primary, id="btn-primary")

    def on_mount(self):
        # destructive dialogs focus the safe choice
        if self.secondary_text and self.tone == "error":
            self.query_one("#btn-secondary").focus()
        else:
            self.query_one("#btn-primary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-primary")


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class QuantityModal(ModalScreen[Optional[int]]):
    """
    Ask for a quantity. Dismisses with the number, or None when cancelled.
    ``minimum`` is 0 when editing a cart line (0 removes it), 1 when adding.
    """

    def __init__(self, caption: str, initial: int = 1, minimum: int = 1):
        super().__init__()
        self.caption = caption
        self.initial = initial
        self.minimum = minimum

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            yield Input(
                str(self.initial),
                id="input-qty",
                type="integer",
                validators=[Number(minimum=self.minimum)],
            )
            with Horizontal(id="dialog"):
                yield Button("Cancel", id="btn-secondary")
                yield Button("OK", variant="primary", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-qty", Input).focus()

    @on(Input.Submitted, "#input-qty")
    @on(Button.Pressed, "#btn-primary")
    def handle_ok(self) -> None:
        qty_input = self.query_one("#input-qty", Input)
        if not qty_input.value or not qty_input.is_valid:
            qty_input.add_class("-invalid")
            self.notify(f"Enter a whole number of at least {self.minimum}.", severity="error")
            return
        self.dismiss(int(qty_input.value))

    @on(Button.Pressed, "#btn-secondary")
    def handle_cancel(self) -> None:
        self.dismiss(None)
