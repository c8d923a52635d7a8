"""Push-style change feeds delivering full collection snapshots."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .errors import SubscriptionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SnapshotCallback = Callable[[list[T]], None]
ErrorCallback = Callable[[SubscriptionError], None]


@dataclass
class _Subscriber(Generic[T]):
    callback: SnapshotCallback
    on_error: Optional[ErrorCallback]


class CollectionFeed(Generic[T]):
    """Notifies subscribers with the whole collection after every change.

    There is no incremental merge: each delivery replaces whatever the
    subscriber held before.
    """

    def __init__(self, name: str, loader: Callable[[], list[T]]) -> None:
        self.name = name
        self._loader = loader
        self._subscribers: dict[int, _Subscriber[T]] = {}
        self._next_token = 0
        self._lock = threading.RLock()

    def subscribe(self, callback: SnapshotCallback, on_error: Optional[ErrorCallback] = None) -> Callable[[], None]:
        """Register ``callback`` and deliver the current snapshot to it right away."""
        with self._lock:
            token = self._next_token
            self._next_token += 1
            subscriber = _Subscriber(callback=callback, on_error=on_error)
            self._subscribers[token] = subscriber
            self._deliver([subscriber])

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self) -> None:
        with self._lock:
            if self._subscribers:
                self._deliver(list(self._subscribers.values()))

    def _deliver(self, subscribers: list[_Subscriber[T]]) -> None:
        try:
            snapshot = self._loader()
        except Exception as exc:
            logger.warning("event=feed_error collection=%s message=%s", self.name, exc)
            error = SubscriptionError(self.name, f"Could not load '{self.name}': {exc}")
            error.__cause__ = exc
            for subscriber in subscribers:
                self._fail(subscriber, error)
            return

        for subscriber in subscribers:
            try:
                subscriber.callback(list(snapshot))
            except Exception as exc:
                logger.exception("event=subscriber_error collection=%s", self.name)
                error = SubscriptionError(self.name, f"Subscriber failed on '{self.name}': {exc}")
                error.__cause__ = exc
                self._fail(subscriber, error)

    def _fail(self, subscriber: _Subscriber[T], error: SubscriptionError) -> None:
        if subscriber.on_error is None:
            logger.error("event=unhandled_feed_error collection=%s message=%s", self.name, error)
            return
        subscriber.on_error(error)
