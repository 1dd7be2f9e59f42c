"""Authentication state events.

Credential checks belong to the identity provider; liftbook only needs
to know which user id, if any, is signed in and when that changes.
"""

import logging
from collections.abc import Awaitable, Callable

from ..config import SESSION_KEY
from ..db.kv import KeyValueStorage

logger = logging.getLogger(__name__)

AuthListener = Callable[[str | None], Awaitable[None]]


class AuthStateNotifier:
    """Source of authentication-state-changed events.

    Listeners are awaited one after another, in registration order, so a
    listener finishes handling one event before the next is dispatched.
    """

    def __init__(self):
        self.current_user: str | None = None
        self._listeners: list[AuthListener] = []

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("User id must not be empty")
        await self._emit(user_id)

    async def sign_out(self) -> None:
        await self._emit(None)

    async def _emit(self, user_id: str | None) -> None:
        self.current_user = user_id
        for listener in list(self._listeners):
            await listener(user_id)


class SessionFileProvider(AuthStateNotifier):
    """Notifier that remembers the signed-in user between processes."""

    def __init__(self, storage: KeyValueStorage, key: str = SESSION_KEY):
        super().__init__()
        self.storage = storage
        self.key = key

    @property
    def stored_user(self) -> str | None:
        value = self.storage.get(self.key)
        return value.strip() if value and value.strip() else None

    async def restore(self) -> str | None:
        """Re-announce the stored user, if any."""
        user_id = self.stored_user
        if user_id:
            logger.debug("Restoring session for %s", user_id)
            await self._emit(user_id)
        return user_id

    async def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("User id must not be empty")
        self.storage.set(self.key, user_id)
        await self._emit(user_id)

    async def sign_out(self) -> None:
        self.storage.remove(self.key)
        await self._emit(None)
