"""Shared data model, events and errors of the processing core."""

from core.models import (
    CaptureKind,
    CaptureItem,
    ProblemInfo,
    Solution,
    DebugResult,
    AnalysisResult,
    ConnectionResult,
    CloudConfig,
    LocalConfig,
    ProviderConfig,
    View,
)
from core.events import (
    EventKind,
    ProcessingEvent,
    EventSink,
    RecordingEventSink,
    CallbackEventSink,
)
from core.errors import (
    AssistantError,
    ConfigurationError,
    ConnectivityError,
    ProviderError,
    ParseError,
    CancellationError,
    BusyError,
)

__all__ = [
    # Models
    'CaptureKind',
    'CaptureItem',
    'ProblemInfo',
    'Solution',
    'DebugResult',
    'AnalysisResult',
    'ConnectionResult',
    'CloudConfig',
    'LocalConfig',
    'ProviderConfig',
    'View',
    # Events
    'EventKind',
    'ProcessingEvent',
    'EventSink',
    'RecordingEventSink',
    'CallbackEventSink',
    # Errors
    'AssistantError',
    'ConfigurationError',
    'ConnectivityError',
    'ProviderError',
    'ParseError',
    'CancellationError',
    'BusyError',
]
