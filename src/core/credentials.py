# durable key/value slot for the bearer token and the serialized user
import asyncio
import os.path
from contextlib import asynccontextmanager
from typing import Dict, Optional

import aiosqlite

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

ACCESS_TOKEN = "accessToken"
REFRESH_TOKEN = "refreshToken"
USER = "user"

_KEYS = (ACCESS_TOKEN, REFRESH_TOKEN, USER)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS credentials (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class CredentialStore:
    """
    SQLite-backed store for ``accessToken``, ``refreshToken`` and ``user``.

    The three keys are written and cleared in one transaction, so a reader
    never sees a token without its user (or the other way round) unless the
    file itself was tampered with.
    """

    def __init__(self, db_path: str = config.CREDENTIALS_DB_PATH):
        self.db_path = db_path
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def connect(self):
        """Yield a connection, creating the table on first use."""
        folder = os.path.dirname(self.db_path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        try:
            if not self._initialized:
                async with self._init_lock:
                    if not self._initialized:
                        _logger.debug(f"Initializing credential store at {self.db_path}")
                        await conn.executescript(_SCHEMA)
                        await conn.commit()
                        self._initialized = True
            yield conn
        finally:
            await conn.close()

    async def get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM credentials WHERE key = ?;", (key,)
            )
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def get_all(self) -> Dict[str, str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT key, value FROM credentials;")
            rows = await cur.fetchall()
            await cur.close()
        return {key: value for key, value in rows if key in _KEYS}

    async def save(
        self,
        access_token: str,
        user: str,
        refresh_token: Optional[str] = None,
    ) -> None:
        """Replace the whole credential set. A missing refresh token is removed."""
        async with self.connect() as conn:
            await conn.execute("DELETE FROM credentials;")
            await conn.executemany(
                "INSERT INTO credentials(key, value) VALUES (?, ?);",
                [
                    (k, v)
                    for k, v in (
                        (ACCESS_TOKEN, access_token),
                        (REFRESH_TOKEN, refresh_token),
                        (USER, user),
                    )
                    if v is not None
                ],
            )
            await conn.commit()

    async def set_user(self, user: str) -> None:
        """Refresh the stored user record. Ignored when nobody is logged in."""
        async with self.connect() as conn:
            await conn.execute(
                "UPDATE credentials SET value = ? WHERE key = ?;", (user, USER)
            )
            await conn.commit()

    async def clear(self) -> None:
        async with self.connect() as conn:
            await conn.execute("DELETE FROM credentials;")
            await conn.commit()

    async def access_token(self) -> Optional[str]:
        return await self.get(ACCESS_TOKEN)

    async def refresh_token(self) -> Optional[str]:
        return await self.get(REFRESH_TOKEN)
