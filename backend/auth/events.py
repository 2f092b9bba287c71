"""Sign-in / sign-out notifications for the synchronizers."""

import logging
from typing import Awaitable, Callable, Optional

from server.errors import PlannerError

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[str]], Awaitable[None]]


class IdentityEvents:
    """Listeners receive the owner key on sign-in and None on sign-out."""

    def __init__(self):
        self._listeners: list[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> None:
        self._listeners.append(listener)

    async def signed_in(self, owner_key: str) -> None:
        for listener in self._listeners:
            try:
                await listener(owner_key)
            except PlannerError as e:
                # Prefetch only; the next list call fetches again.
                logger.warning(f"Prefetch after sign-in failed for {owner_key}: {e}")

    async def signed_out(self) -> None:
        for listener in self._listeners:
            await listener(None)
