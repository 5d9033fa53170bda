"""Processing orchestrator.

This module decides which capture to process and how:
- Queue view: initial extraction from the last primary capture
  (audio transcript or screenshot analysis)
- Solutions view: debug analysis of the follow-up captures against a
  freshly generated solution

Each of the two channels has at most one request in flight. Every call
publishes one start event (when work begins) followed by exactly one
terminal event, except when the request is cancelled, which is silent.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, TypeVar
import asyncio
import logging

from core.errors import AssistantError, BusyError, CancellationError, ConfigurationError
from core.events import EventKind, EventSink
from core.models import AnalysisResult, CaptureItem, DebugResult, ProblemInfo, View
from processing.state import AssistantContext
from providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

T = TypeVar('T')

NO_PROBLEM_INFO = "No problem info available"

IMAGE_PIPELINES = ('describe', 'extract')


class Channel(Enum):
    """Independent processing lines."""
    PRIMARY = "primary"
    DEBUG = "debug"


@dataclass
class RequestHandle:
    """Cancellation handle for the request in flight on a channel.

    The adapter is captured when the handle is created and is the only
    adapter the request ever talks to.

    Attributes:
        channel: Channel the request runs on.
        adapter: Adapter active when the request started (None if no
            provider was configured).
        adapter_version: Context adapter version at creation.
        cancelled: Set once cancel() has been called.
    """
    channel: Channel
    adapter: Optional[ProviderAdapter]
    adapter_version: int
    cancelled: bool = False
    _task: Optional['asyncio.Future[Any]'] = field(default=None, repr=False)

    def cancel(self) -> None:
        """Signal cancellation and abort the running adapter call."""
        self.cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Run an adapter call under this handle.

        Raises:
            CancellationError: If the handle was cancelled before, during or
                right after the call.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise CancellationError(f"{self.channel.value} request cancelled")

        self._task = asyncio.ensure_future(awaitable)
        try:
            result = await self._task
        except asyncio.CancelledError:
            if self.cancelled:
                raise CancellationError(f"{self.channel.value} request cancelled") from None
            raise
        finally:
            self._task = None

        if self.cancelled:
            raise CancellationError(f"{self.channel.value} request cancelled")

        return result


class ProcessingOrchestrator:
    """Runs the capture pipelines and publishes their lifecycle events.

    Example:
        context = AssistantContext(adapter=adapter)
        sink = RecordingEventSink()
        orchestrator = ProcessingOrchestrator(context, sink)

        context.primary_queue.add("/tmp/screen.png")
        await orchestrator.process_screenshots()
    """

    def __init__(
        self,
        context: AssistantContext,
        event_sink: EventSink,
        image_pipeline: str = 'describe',
    ):
        """Initialize the orchestrator.

        Args:
            context: Shared assistant context.
            event_sink: Where lifecycle events are published.
            image_pipeline: 'describe' analyzes the last screenshot as free
                text; 'extract' runs structured extraction over the whole
                primary queue.

        Raises:
            ValueError: If image_pipeline is unknown.
        """
        if image_pipeline not in IMAGE_PIPELINES:
            raise ValueError(f"Unknown image pipeline: {image_pipeline!r}")

        self.context = context
        self.events = event_sink
        self.image_pipeline = image_pipeline

        self._handles: Dict[Channel, Optional[RequestHandle]] = {
            Channel.PRIMARY: None,
            Channel.DEBUG: None,
        }

    def is_running(self, channel: Channel) -> bool:
        """Check if a request is in flight on a channel."""
        return self._handles[channel] is not None

    def handle_for(self, channel: Channel) -> Optional[RequestHandle]:
        return self._handles[channel]

    async def process_screenshots(self) -> None:
        """Process the relevant capture queue for the current view.

        Raises:
            BusyError: If the channel for the current view already has a
                request in flight. No event is published in that case.
        """
        if self.context.session.view is View.QUEUE:
            await self._process_primary()
        else:
            await self._process_debug()

    def cancel_ongoing_requests(self) -> None:
        """Cancel the requests on both channels and clear their handles."""
        for channel, handle in self._handles.items():
            if handle is not None:
                logger.info(f"Cancelling {channel.value} request")
                handle.cancel()
                self._handles[channel] = None

        self.context.session.has_debugged = False

    def reset(self) -> None:
        """Cancel everything, clear both queues and return to the queue view."""
        self.cancel_ongoing_requests()
        self.context.clear_queues()
        self.context.session.reset()
        logger.info("Processing state reset")

    async def process_audio_base64(self, data: str, mime_type: str) -> AnalysisResult:
        """Analyze audio supplied directly as base64 (e.g. a microphone stream)."""
        return await self.context.require_adapter().analyze_audio(data=data, mime_type=mime_type)

    async def process_audio_file(self, path: str) -> AnalysisResult:
        """Analyze an audio file outside the queue pipelines."""
        return await self.context.require_adapter().analyze_audio(path)

    def _publish(self, kind: EventKind, payload: Any = None) -> None:
        logger.debug(f"Publishing {kind.name}")
        self.events.publish(kind, payload)

    def _ensure_idle(self, channel: Channel) -> None:
        if self._handles[channel] is not None:
            logger.warning(f"Rejected request: {channel.value} channel is busy")
            raise BusyError(channel.value)

    def _open(self, channel: Channel) -> RequestHandle:
        handle = RequestHandle(
            channel=channel,
            adapter=self.context.adapter,
            adapter_version=self.context.adapter_version,
        )
        self._handles[channel] = handle
        return handle

    def _release(self, handle: RequestHandle) -> None:
        # A cancel followed by a new request may already have replaced it
        if self._handles[handle.channel] is handle:
            self._handles[handle.channel] = None

    @staticmethod
    def _adapter_of(handle: RequestHandle) -> ProviderAdapter:
        if handle.adapter is None:
            raise ConfigurationError("LLM provider not configured. Please set up your AI model first.")
        return handle.adapter

    async def _process_primary(self) -> None:
        self._ensure_idle(Channel.PRIMARY)

        last = self.context.primary_queue.peek_last()
        if last is None:
            logger.info("No screenshots to process")
            self._publish(EventKind.NO_SCREENSHOTS)
            return

        self._publish(EventKind.INITIAL_START)
        self.context.session.view = View.SOLUTIONS
        handle = self._open(Channel.PRIMARY)

        try:
            if last.is_audio:
                problem = await self._audio_pipeline(handle, last)
            else:
                problem = await self._image_pipeline(handle, last)
        except CancellationError:
            logger.info("Initial processing cancelled")
        except AssistantError as e:
            logger.error(f"Initial processing error: {e}")
            self._publish(EventKind.INITIAL_SOLUTION_ERROR, str(e))
        except Exception as e:
            logger.error(f"Unexpected error during initial processing: {e}", exc_info=True)
            self._publish(EventKind.INITIAL_SOLUTION_ERROR, str(e))
        else:
            self._publish(EventKind.PROBLEM_EXTRACTED, problem)
            self.context.session.problem_info = problem
        finally:
            self._release(handle)

    async def _audio_pipeline(self, handle: RequestHandle, item: CaptureItem) -> ProblemInfo:
        adapter = self._adapter_of(handle)
        logger.info(f"Processing audio capture {item.path}")

        result = await handle.run(adapter.analyze_audio(item.path))
        return ProblemInfo.from_text(result.text)

    async def _image_pipeline(self, handle: RequestHandle, item: CaptureItem) -> ProblemInfo:
        adapter = self._adapter_of(handle)

        if self.image_pipeline == 'extract':
            images: List[CaptureItem] = [i for i in self.context.primary_queue.list() if not i.is_audio]
            logger.info(f"Extracting problem from {len(images)} screenshot(s)")
            return await handle.run(adapter.extract_problem(images))

        logger.info(f"Processing screenshot {item.path}")
        result = await handle.run(adapter.analyze_image(item.path))
        return ProblemInfo.from_screenshot_text(result.text)

    async def _process_debug(self) -> None:
        self._ensure_idle(Channel.DEBUG)

        # Debug analysis works on screenshots only
        items = [i for i in self.context.debug_queue.list() if not i.is_audio]
        if not items:
            logger.info("No extra screenshots to process")
            self._publish(EventKind.NO_SCREENSHOTS)
            return

        self._publish(EventKind.DEBUG_START)
        handle = self._open(Channel.DEBUG)

        try:
            problem = self.context.session.problem_info
            if problem is None:
                raise AssistantError(NO_PROBLEM_INFO)

            adapter = self._adapter_of(handle)
            result = await handle.run(self._debug_pipeline(adapter, problem, items))
        except CancellationError:
            logger.info("Debug processing cancelled")
        except AssistantError as e:
            logger.error(f"Debug processing error: {e}")
            self._publish(EventKind.DEBUG_ERROR, str(e))
        except Exception as e:
            logger.error(f"Unexpected error during debug processing: {e}", exc_info=True)
            self._publish(EventKind.DEBUG_ERROR, str(e))
        else:
            self.context.session.has_debugged = True
            self._publish(EventKind.DEBUG_SUCCESS, result)
        finally:
            self._release(handle)

    @staticmethod
    async def _debug_pipeline(
        adapter: ProviderAdapter,
        problem: ProblemInfo,
        items: List[CaptureItem],
    ) -> DebugResult:
        solution = await adapter.generate_solution(problem)
        return await adapter.debug_solution(problem, solution.code, items)
