from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from api.errors import AuthError, StorefrontError
from api.models import NewUser
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal, DialogModal


class LoginScreen(BaseScreen):
    """
    Login and sign-up tabs. Dismissed once the session is authenticated.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("First name")
                    yield Input(placeholder="Jane", id="input-reg-first")
                    yield Label("Last name")
                    yield Input(placeholder="Doe", id="input-reg-last")
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd"
                    )
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    @on(Input.Submitted, "#input-login-pwd")
    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value.strip()

        if not email or not pwd:
            self.notify("Email or password cannot be empty!", severity="error")
            return

        try:
            session = await self.app.state.auth.login(email, pwd)
        except AuthError as e:
            self.notify(e.message, severity="error")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        self.notify(f"Hello {session.user.display_name}!")
        self.dismiss()

    @on(Input.Submitted, "#input-reg-pwd")
    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        first = self.query_one("#input-reg-first", Input).value.strip()
        last = self.query_one("#input-reg-last", Input).value.strip()
        email = self.query_one("#input-reg-email", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value.strip()

        if not first or not email or not pwd:
            self.notify("Make sure all inputs are filled.", severity="error")
            return

        try:
            user = await self.app.state.auth.register(
                NewUser(email=email, password=pwd, first_name=first, last_name=last)
            )
        except StorefrontError as e:
            self.notify(e.message, severity="error")
            return

        await self.app.push_screen_wait(
            DialogModal(f"Registration successful. You can now log in as {user.email}.")
        )

        # registration does not log in: prefill the login tab instead
        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = user.email
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = pwd
        input_login_pwd.focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
