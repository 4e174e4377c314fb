"""Notification sinks for aggregator events.

The aggregator depends only on the NotificationSink protocol.  Two sinks
ship with the service: one writes structured log lines, the other fans
events out to in-process subscribers.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from cadence_guard.domain.events import EmergencyModeChanged, Notification

logger = logging.getLogger(__name__)

Subscriber = Callable[[Notification], None]


class NotificationSink(Protocol):
    """Protocol for anything that can receive aggregator events."""

    def publish(self, event: Notification) -> None:
        """Deliver *event*.  Must not block on network I/O."""
        ...


class LoggingSink:
    """Writes every event as a structured log record."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def publish(self, event: Notification) -> None:
        level = logging.INFO
        if isinstance(event, EmergencyModeChanged) and event.emergency_mode:
            level = logging.WARNING
        self._log.log(level, "%s %s", event.event, event.model_dump_json(exclude={"event"}))


class SubscriberHub:
    """In-memory fan-out to registered callbacks, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.remove(subscriber)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: Notification) -> None:
        # One failing subscriber must not starve the rest
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", subscriber, event.event)


class RecordingSink:
    """Keeps every published event; handy for tests and debugging."""

    def __init__(self) -> None:
        self.events: list[Notification] = []

    def publish(self, event: Notification) -> None:
        self.events.append(event)

    def of_type(self, kind: type) -> list[Notification]:
        return [e for e in self.events if isinstance(e, kind)]
