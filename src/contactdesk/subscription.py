"""Summary: Scoped subscription handles for listeners.

Importance: Guarantees auth, store, and resize listeners are torn down with their owner.
Alternatives: Return bare unsubscribe callables and trust callers to invoke them.
"""

from __future__ import annotations

from typing import Callable


class Subscription:
    """Summary: Idempotent handle that runs an unsubscribe action once.

    Importance: Stops callback delivery deterministically on close.
    Alternatives: Use weak references and rely on garbage collection.
    """

    def __init__(self, unsubscribe: Callable[[], None] | None = None) -> None:
        self._unsubscribe = unsubscribe
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ListenerSet:
    """Summary: Ordered set of callbacks with subscription handles.

    Importance: Shared fan-out used by providers that push state changes.
    Alternatives: Keep ad-hoc callback lists in each provider.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[..., None]] = []

    def add(self, callback: Callable[..., None]) -> Subscription:
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(_remove)

    def notify(self, *args: object) -> None:
        # Copy so callbacks may unsubscribe while being notified.
        for callback in list(self._listeners):
            if callback in self._listeners:
                callback(*args)

    def __len__(self) -> int:
        return len(self._listeners)
