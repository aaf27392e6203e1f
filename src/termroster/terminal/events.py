"""Terminal notifications and a minimal synchronous dispatcher."""

from __future__ import annotations

import logging as py_logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = py_logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class TerminalBusyEvent:
    busy: bool


@dataclass(frozen=True)
class TerminalSubprocessEvent:
    handle: str
    has_subprocesses: bool


@dataclass(frozen=True)
class TerminalCwdEvent:
    handle: str
    cwd: str


class Subscription:
    def __init__(self, bus: EventBus, event_type: type, handler: Callable[[Any], None]) -> None:
        self._bus = bus
        self.event_type = event_type
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._bus._unsubscribe(self)


class EventBus:
    """Dispatches events to handlers registered for their exact type.

    Handlers run synchronously on the publishing thread, in subscription
    order. A failing handler is logged and does not stop delivery.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[type, list[Subscription]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Subscription:
        subscription = Subscription(self, event_type, handler)
        with self._lock:
            self._handlers.setdefault(event_type, []).append(subscription)
        return subscription

    def publish(self, event: object) -> None:
        with self._lock:
            subscriptions = list(self._handlers.get(type(event), ()))
        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception("Event handler failed event=%s handler=%r", type(event).__name__, subscription.handler)

    def handler_count(self, event_type: type) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._handlers.get(subscription.event_type)
            if not subscriptions:
                return
            remaining = [item for item in subscriptions if item is not subscription]
            if remaining:
                self._handlers[subscription.event_type] = remaining
            else:
                del self._handlers[subscription.event_type]
