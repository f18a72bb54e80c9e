"""Append-only event log for external observers.

Events are observational only: they are not part of the authoritative
state and are not persisted in snapshots. The ledger records an event
while it holds the identity lock and notifies subscribers after releasing
it, so subscribers may call back into the ledger. Notifications from
different threads can interleave; order by ``seq``. A failing subscriber
is logged and skipped.
"""

from __future__ import annotations

import threading
from typing import Callable

import bittensor as bt

from .models import LedgerEvent

Subscriber = Callable[[LedgerEvent], None]


class EventLog:
    """Ordered, append-only log of ledger events."""

    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: LedgerEvent) -> LedgerEvent:
        """Record an event and notify subscribers."""
        stored = self.record(event)
        self.notify(stored)
        return stored

    def record(self, event: LedgerEvent) -> LedgerEvent:
        """Assign the next sequence number and store, without notifying."""
        with self._lock:
            stored = event.model_copy(update={"seq": len(self._events) + 1})
            self._events.append(stored)
            return stored

    def notify(self, event: LedgerEvent) -> None:
        """Deliver a recorded event to every subscriber, in subscription order."""
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                bt.logging.warning({"event_log": {
                    "event": "subscriber_error",
                    "seq": event.seq,
                    "error": str(e),
                }})

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def events(self, since: int = 0) -> list[LedgerEvent]:
        """Events with sequence number greater than ``since``, in order."""
        with self._lock:
            return list(self._events[max(since, 0):])


__all__ = ["EventLog", "Subscriber"]
