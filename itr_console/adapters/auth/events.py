"""Auth state change fan-out shared by the identity provider adapters."""

import logging
from threading import Lock

from itr_console.domain.entities import AuthEventType, AuthSession
from itr_console.ports.identity import AuthStateCallback, Subscription

logger = logging.getLogger(__name__)


class AuthEventHub:
    def __init__(self) -> None:
        self._callbacks: list[AuthStateCallback] = []
        self._lock = Lock()

    def subscribe(self, callback: AuthStateCallback) -> Subscription:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return Subscription(unsubscribe=unsubscribe)

    def emit(self, event: AuthEventType, session: AuthSession | None) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(event, session)
            except Exception:
                # Remaining listeners still run
                logger.exception(f"Auth listener failed on {event}")
