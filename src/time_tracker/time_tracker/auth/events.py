from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..core.enums import AuthEvent
from .model import AuthSession

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthEventBus:
    """Fan-out of auth state changes to subscribed listeners.

    A failing listener is logged and does not stop the others.
    """

    def __init__(self):
        self._listeners: List[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, event: AuthEvent, session: Optional[AuthSession] = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener failed for %s", event.value)
