"""Event recording.

Conditions that operators need to see, such as a missing device or a
device already holding a foreign filesystem, are recorded as events in
addition to the log.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

logger = logging.getLogger(__name__)

# Event reasons
REASON_DEVICE_NOT_EXISTS = "DeviceNotExists"
REASON_EXISTS_FORMAT_ERROR = "ExistsFormatErr"


class EventType(Enum):
    """Severity of an event."""

    NORMAL = "Normal"
    WARNING = "Warning"


@dataclass(frozen=True, slots=True)
class Event:
    """A recorded event.

    Attributes:
        type: Event severity.
        reason: Short machine-readable reason.
        message: Human-readable message.
        timestamp: When the event was recorded.
    """

    type: EventType
    reason: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class EventRecorder(ABC):
    """Abstract event sink. Recording never fails the caller."""

    @abstractmethod
    def record_event(self, event_type: EventType, reason: str, message: str) -> None:
        """Record one event.

        Args:
            event_type: Event severity.
            reason: Short machine-readable reason.
            message: Human-readable message.
        """


class LoggingEventRecorder(EventRecorder):
    """Write events to the log and keep the most recent ones in memory."""

    def __init__(self, max_events: int = 100) -> None:
        self._events: deque[Event] = deque(maxlen=max_events)

    def record_event(self, event_type: EventType, reason: str, message: str) -> None:
        """Log the event and add it to the history."""
        level = logging.WARNING if event_type == EventType.WARNING else logging.INFO
        logger.log(level, "Event %s/%s: %s", event_type.value, reason, message)
        self._events.append(Event(type=event_type, reason=reason, message=message))

    @property
    def events(self) -> list[Event]:
        """Recorded events, oldest first."""
        return list(self._events)
