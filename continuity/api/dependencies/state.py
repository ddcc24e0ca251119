from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from fastapi import Request

from continuity.core.database import StoreUnavailableError
from continuity.core.logging import log_error
from continuity.services.state import AppState


class StateHolder:
    """Holds the current register snapshot of one application instance.

    Mutations are serialised; reads use whichever snapshot is current. A
    holder whose register could not be loaded refuses every mutation, since
    the snapshot would not reflect what is stored.
    """

    def __init__(self, state: AppState | None = None) -> None:
        self.state = state or AppState()
        self.available = True
        self._lock = asyncio.Lock()

    def mark_unavailable(self, reason: str) -> None:
        log_error("Register is read-only until restart", reason=reason)
        self.available = False

    async def apply(self, operation: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Run a state operation and keep its resulting snapshot.

        Operations return either a new ``AppState`` or ``(AppState, record)``;
        the record is passed back to the caller. When the operation raises the
        current snapshot is left untouched.
        """
        async with self._lock:
            if not self.available:
                raise StoreUnavailableError("Register was not loaded from the local store")
            result = await operation(self.state, *args)
            if isinstance(result, AppState):
                self.state = result
                return None
            new_state, record = result
            self.state = new_state
            return record


def get_state_holder(request: Request) -> StateHolder:
    return request.app.state.bia
