from __future__ import annotations

from typing import Callable

EventListener = Callable[[], None]


class EventService:
    """Fan-out of change notifications to the currently subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: EventListener) -> None:
        self._listeners = [*self._listeners, listener]

    def unsubscribe(self, listener: EventListener) -> None:
        self._listeners = [x for x in self._listeners if x is not listener]

    def publish(self) -> None:
        for listener in self._listeners:
            listener()
