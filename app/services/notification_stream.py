from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Any


NotificationPayload = dict[str, Any]


@dataclass(eq=False)
class Subscription:
    user_id: str
    queue: asyncio.Queue[NotificationPayload]
    loop: asyncio.AbstractEventLoop


class NotificationBroker:
    """Fans newly created notifications out to connected clients, keyed by user id.

    Publishing happens from the request worker threads, so queue writes are
    marshalled onto each subscriber's event loop.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, set[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, user_id: str) -> Subscription:
        subscription = Subscription(user_id=user_id, queue=asyncio.Queue(), loop=asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.setdefault(user_id, set()).add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            current = self._subscriptions.get(subscription.user_id)
            if not current:
                return
            current.discard(subscription)
            if not current:
                self._subscriptions.pop(subscription.user_id, None)

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(user_id, ()))

    def publish(self, user_id: str, payload: NotificationPayload) -> int:
        with self._lock:
            targets = list(self._subscriptions.get(user_id, ()))
        for subscription in targets:
            if subscription.loop.is_closed():
                self.unsubscribe(subscription)
                continue
            subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, payload)
        return len(targets)


notification_broker = NotificationBroker()
