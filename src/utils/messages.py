from textual.message import Message

from api.models import Cart, Session
from core.orders import SubmissionState


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    posted by the sidebar when the user asks to log out
    """

    bubble = True


class LoginRequiredMessage(Message):
    """
    The session ended (logout or a 401 from any service).
    The app answers by showing the login screen.
    """

    bubble = True


class SessionChangedMessage(Message):
    """
    Republished from the session observable, so screens can refresh
    user info and role-dependent menus
    """

    bubble = True

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session


class CartChangedMessage(Message):
    """
    Republished from the cart observable whenever the projection is replaced.
    Posted to the active screen by the app.
    """

    bubble = True

    def __init__(self, cart: Cart) -> None:
        super().__init__()
        self.cart = cart


class OrderStateMessage(Message):
    """
    The order submission pipeline moved to another phase
    (including the timed fall back to idle)
    """

    bubble = True

    def __init__(self, state: SubmissionState) -> None:
        super().__init__()
        self.state = state


class NewOrderMessage(Message):
    """
    Fired when the local order history changes.
    Listened to by past orders
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
