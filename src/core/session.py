from __future__ import annotations

from typing import Callable, Iterable, Optional

from api import models, payloads, services
from api.errors import MalformedPayload, NotAuthenticated, StorefrontError
from api.gateway import Gateway
from api.models import Role, Session
from core.credentials import ACCESS_TOKEN, USER, CredentialStore
from core.observable import Observable
from utils.logger import get_logger

_logger = get_logger(__name__)


def derive_role(roles: Iterable[str]) -> Optional[Role]:
    """ADMIN wins over everything; any other non-empty role set is USER."""
    roles = set(roles)
    if not roles:
        return None
    return "ADMIN" if "ADMIN" in roles else "USER"


def authenticated(user: models.User) -> Session:
    return Session(is_authenticated=True, user=user, role=derive_role(user.roles))


class SessionManager:
    """
    Owns the authentication state of the process.

    The session lives in an ``Observable[Session]`` that is shared with the
    auth middleware (which may reset it on a 401) and with every consumer
    that wants to react to login/logout.
    """

    def __init__(
        self,
        api: Gateway,
        credentials: CredentialStore,
        session: Observable[Session],
        navigate_to_login: Optional[Callable[[], None]] = None,
    ):
        self._api = api
        self._credentials = credentials
        self.session = session
        self._navigate_to_login = navigate_to_login or (lambda: None)
        self._token: Optional[str] = None
        # keep the in-memory token mirror in step with whoever publishes
        self.session.subscribe(self._on_session)

    def set_navigator(self, navigate_to_login: Callable[[], None]) -> None:
        self._navigate_to_login = navigate_to_login

    def _on_session(self, session: Session) -> None:
        if not session.is_authenticated:
            self._token = None

    # ---------------------------
    # Startup
    # ---------------------------

    async def restore(self) -> Session:
        """
        Rebuild the session from the credential store at process start.
        Missing, partial or corrupt credentials wipe the store and leave the
        session anonymous.
        """
        stored = await self._credentials.get_all()
        token, raw_user = stored.get(ACCESS_TOKEN), stored.get(USER)

        if not token and not raw_user:
            self.session.publish(Session.anonymous())
            return self.session.value

        try:
            if not token or not raw_user:
                raise MalformedPayload("Stored credentials are incomplete.")
            user = payloads.load_user(raw_user)
        except (MalformedPayload, TypeError, ValueError) as e:
            reason = e.message if isinstance(e, MalformedPayload) else repr(e)
            _logger.warning(f"Discarding stored credentials: {reason}")
            await self._credentials.clear()
            self.session.publish(Session.anonymous())
            return self.session.value

        self._token = token
        self.session.publish(authenticated(user))
        _logger.info(f"Restored session for {user.email}")
        return self.session.value

    # ---------------------------
    # Auth
    # ---------------------------

    async def login(self, email: str, password: str) -> Session:
        """
        Raises:
            AuthError: credentials rejected (Unauthorized/Forbidden)
            StorefrontError: anything else, unchanged
        """
        result = await services.login(self._api, email, password)
        user = payloads.user_from_login(result)

        await self._credentials.save(result.token, payloads.dump_user(user))
        self._token = result.token
        self.session.publish(authenticated(user))
        _logger.info(f"Logged in as {user.email} ({self.session.value.role})")
        return self.session.value

    async def register(self, new_user: models.NewUser) -> models.User:
        """Create an account. Does not log in."""
        user = await services.register(self._api, new_user)
        _logger.info(f"Registered {user.email}")
        return user

    async def logout(self) -> None:
        """
        Tell the backend when a refresh token exists, then always drop the
        local credentials, reset the session and go to the login screen.
        """
        refresh_token = await self._credentials.refresh_token()
        if refresh_token:
            try:
                await services.logout(self._api, refresh_token)
            except StorefrontError as e:
                _logger.warning(f"Backend logout failed, clearing locally: {e.message}")

        await self._credentials.clear()
        self._token = None
        self.session.publish(Session.anonymous())
        self._navigate_to_login()
        _logger.info("Logged out")

    # ---------------------------
    # Profile
    # ---------------------------

    def _require_user_id(self) -> int:
        user = self.session.value.user
        if user is None:
            raise NotAuthenticated()
        return user.id

    async def _republish_user(self, user: models.User) -> None:
        current = self.session.value
        if current.user is None or current.user.id != user.id:
            # session ended or switched while the request was in flight
            return
        self.session.publish(
            Session(
                is_authenticated=current.is_authenticated,
                user=user,
                role=derive_role(user.roles),
            )
        )
        await self._credentials.set_user(payloads.dump_user(user))

    async def get_current_profile(self) -> models.User:
        user = await services.get_user(self._api, self._require_user_id())
        await self._republish_user(user)
        return user

    async def update_profile(self, update: models.ProfileUpdate) -> models.User:
        user = await services.update_user(self._api, self._require_user_id(), update)
        await self._republish_user(user)
        return user

    async def delete_profile(self) -> None:
        await services.delete_user(self._api, self._require_user_id())
        await self.logout()

    # ---------------------------
    # Synchronous reads
    # ---------------------------

    def is_logged_in(self) -> bool:
        return self.session.value.is_authenticated

    def is_admin(self) -> bool:
        return self.session.value.role == "ADMIN"

    def current_token(self) -> Optional[str]:
        return self._token if self.is_logged_in() else None

    @property
    def current_user(self) -> Optional[models.User]:
        return self.session.value.user
