"""Processing core of the overlay assistant.

Components:
    - CaptureQueue: Ordered, bounded queue of captures per channel
    - AssistantContext: View state, current problem and active provider
    - ProcessingOrchestrator: Pipeline selection, cancellation and events

Example:
    from core import RecordingEventSink
    from processing import AssistantContext, ProcessingOrchestrator

    context = AssistantContext(adapter=adapter)
    orchestrator = ProcessingOrchestrator(context, RecordingEventSink())

    context.primary_queue.add("screen.png")
    await orchestrator.process_screenshots()
"""

from processing.capture_queue import CaptureQueue
from processing.state import SessionState, AssistantContext
from processing.orchestrator import (
    Channel,
    RequestHandle,
    ProcessingOrchestrator,
    NO_PROBLEM_INFO,
)


__all__ = [
    'CaptureQueue',
    'SessionState',
    'AssistantContext',
    'Channel',
    'RequestHandle',
    'ProcessingOrchestrator',
    'NO_PROBLEM_INFO',
]
