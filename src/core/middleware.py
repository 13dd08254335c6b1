from __future__ import annotations

from typing import Callable, Optional

import httpx

from api.errors import DEFAULT_MESSAGES, Unauthorized
from api.models import Session
from core.credentials import CredentialStore
from core.observable import Observable
from utils.logger import get_logger

_logger = get_logger(__name__)


class RequestAuthMiddleware:
    """
    Request/response hooks installed on the gateway's http client.

    - request: attach ``Authorization: Bearer <token>`` when a token is stored,
      otherwise send the request anonymously.
    - response: a 401 wipes the credential store, resets the session, sends
      the user to the login entry point and raises ``Unauthorized`` so the
      caller's own failure path still runs.

    This is the only place allowed to invalidate a session because the
    server stopped accepting its credential.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        session: Observable[Session],
        navigate_to_login: Optional[Callable[[], None]] = None,
    ):
        self._credentials = credentials
        self._session = session
        self._navigate_to_login = navigate_to_login or (lambda: None)

    def set_navigator(self, navigate_to_login: Callable[[], None]) -> None:
        self._navigate_to_login = navigate_to_login

    async def on_request(self, request: httpx.Request) -> None:
        token = await self._credentials.access_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def on_response(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return

        request = response.request
        _logger.warning(
            f"{request.method} {request.url.path} -> 401, ending session"
        )
        await self._credentials.clear()
        self._session.publish(Session.anonymous())
        self._navigate_to_login()
        raise Unauthorized(DEFAULT_MESSAGES[401], 401)
