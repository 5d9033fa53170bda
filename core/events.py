"""Lifecycle events published by the orchestrator to the UI.

The set of event kinds is closed; payload types per kind:

    INITIAL_START           None
    PROBLEM_EXTRACTED       ProblemInfo
    INITIAL_SOLUTION_ERROR  str (error message)
    DEBUG_START             None
    DEBUG_SUCCESS           DebugResult
    DEBUG_ERROR             str (error message)
    NO_SCREENSHOTS          None
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional
import logging

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Kinds of processing lifecycle events."""
    INITIAL_START = "initial-start"
    PROBLEM_EXTRACTED = "problem-extracted"
    INITIAL_SOLUTION_ERROR = "solution-error"
    DEBUG_START = "debug-start"
    DEBUG_SUCCESS = "debug-success"
    DEBUG_ERROR = "debug-error"
    NO_SCREENSHOTS = "processing-no-screenshots"

    @property
    def is_terminal(self) -> bool:
        return self not in (EventKind.INITIAL_START, EventKind.DEBUG_START)


@dataclass
class ProcessingEvent:
    """Record of a published event.

    Attributes:
        kind: Event kind.
        payload: Kind-specific payload (see module docstring).
        timestamp: When the event was published.
    """
    kind: EventKind
    payload: Any = None
    timestamp: datetime = field(default_factory=datetime.now)


class EventSink(ABC):
    """Delivers named lifecycle events to the UI."""

    @abstractmethod
    def publish(self, kind: EventKind, payload: Any = None) -> None:
        """Publish one event.

        Args:
            kind: Event kind.
            payload: Kind-specific payload.
        """
        pass


class RecordingEventSink(EventSink):
    """Event sink that keeps every published event in order."""

    def __init__(self):
        self.events: List[ProcessingEvent] = []

    def publish(self, kind: EventKind, payload: Any = None) -> None:
        self.events.append(ProcessingEvent(kind=kind, payload=payload))

    @property
    def kinds(self) -> List[EventKind]:
        return [event.kind for event in self.events]

    def last(self) -> Optional[ProcessingEvent]:
        return self.events[-1] if self.events else None

    def clear(self) -> None:
        self.events.clear()


class CallbackEventSink(EventSink):
    """Event sink forwarding every event to a callback.

    Callback exceptions are logged and never reach the orchestrator.
    """

    def __init__(self, callback: Callable[[ProcessingEvent], None]):
        """Initialize the sink.

        Args:
            callback: Function invoked with each ProcessingEvent.
        """
        self._callback = callback

    def publish(self, kind: EventKind, payload: Any = None) -> None:
        event = ProcessingEvent(kind=kind, payload=payload)
        try:
            self._callback(event)
        except Exception as e:
            logger.warning(f"Event callback error for {kind.name}: {e}")
