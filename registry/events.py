"""
NFT Registry - Notification Delivery

This module fans ledger notifications out to external subscribers. The
registry core never stores notifications itself; recording and audit logging
are provided here as ordinary subscribers.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .schema import RegistryEvent


EventCallback = Callable[[RegistryEvent], None]


class EventDispatcher:
    """Ordered delivery of notifications to registered callbacks."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._callbacks: List[EventCallback] = []
        self._sequence = 0

    def next_sequence(self) -> int:
        """Allocate the sequence number of the next notification."""
        self._sequence += 1
        return self._sequence

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """
        Register a notification callback.

        Returns:
            Function removing the callback again
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, event: RegistryEvent) -> None:
        """Deliver a notification to every subscriber, in registration order."""
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                # The mutation is already committed; a failing subscriber
                # must not hide the notification from the others
                self.logger.exception(
                    f"Event callback failed for {event.event} #{event.sequence}"
                )


class EventRecorder:
    """Subscriber keeping every notification in memory."""

    def __init__(self):
        self.events: List[RegistryEvent] = []

    def __call__(self, event: RegistryEvent) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def of_type(self, event_name: str) -> List[RegistryEvent]:
        """Filter recorded notifications by name (Transfer, Approval, ...)."""
        return [e for e in self.events if e.event == event_name]

    def last(self) -> Optional[RegistryEvent]:
        return self.events[-1] if self.events else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.model_dump() for e in self.events]

    def clear(self) -> None:
        self.events.clear()


class LoggingSubscriber:
    """Subscriber writing an audit trail of notifications through logging."""

    def __init__(self, logger_name: str = "registry.audit", level: int = logging.INFO):
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def __call__(self, event: RegistryEvent) -> None:
        fields = event.model_dump(exclude={"event", "sequence"})
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        self.logger.log(self.level, f"#{event.sequence} {event.event} {rendered}")
