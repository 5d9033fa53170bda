"""Tests for the processing orchestrator pipelines and event ordering."""

import asyncio

import pytest

from conftest import FakeAdapter
from core.errors import BusyError, ParseError, ProviderError
from core.events import EventKind
from core.models import DebugResult, ProblemInfo, View
from processing.orchestrator import Channel, NO_PROBLEM_INFO, ProcessingOrchestrator
from processing.state import AssistantContext


class TestEmptyQueues:
    """Empty queues publish NO_SCREENSHOTS and change nothing."""

    @pytest.mark.asyncio
    async def test_empty_primary_queue(self, orchestrator, context, sink, adapter):
        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.NO_SCREENSHOTS]
        assert context.session.view is View.QUEUE
        assert context.session.problem_info is None
        assert adapter.calls == []

    @pytest.mark.asyncio
    async def test_empty_debug_queue(self, orchestrator, context, sink, adapter):
        context.session.view = View.SOLUTIONS
        context.session.has_debugged = True
        problem = ProblemInfo(problem_statement="p")
        context.session.problem_info = problem

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.NO_SCREENSHOTS]
        assert context.session.view is View.SOLUTIONS
        assert context.session.has_debugged is True
        assert context.session.problem_info is problem
        assert adapter.calls == []


class TestPrimaryChannel:
    """Initial extraction from the last primary capture."""

    @pytest.mark.asyncio
    async def test_image_capture(self, orchestrator, context, sink, adapter):
        context.primary_queue.add("imgA.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.PROBLEM_EXTRACTED]
        problem = sink.events[1].payload
        assert isinstance(problem, ProblemInfo)
        assert problem.problem_statement == "A: image imgA.png"
        assert problem.validation_type == "manual"
        assert problem.difficulty == "custom"
        assert context.session.view is View.SOLUTIONS
        assert context.session.problem_info is problem
        assert adapter.calls == ["analyze_image"]
        assert not orchestrator.is_running(Channel.PRIMARY)

    @pytest.mark.asyncio
    async def test_last_item_is_processed(self, orchestrator, context, sink, adapter):
        context.primary_queue.add("first.png")
        context.primary_queue.add("second.png")

        await orchestrator.process_screenshots()

        assert sink.events[1].payload.problem_statement == "A: image second.png"

    @pytest.mark.asyncio
    async def test_audio_capture(self, orchestrator, context, sink, adapter):
        context.primary_queue.add("clip.wav")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.PROBLEM_EXTRACTED]
        problem = sink.events[1].payload
        assert problem.problem_statement == "A: transcript"
        assert problem.input_format == {}
        assert problem.test_cases == []
        assert context.session.problem_info is problem
        assert context.session.view is View.SOLUTIONS
        assert "analyze_image" not in adapter.calls
        assert "extract_problem" not in adapter.calls

    @pytest.mark.asyncio
    async def test_mp3_is_audio(self, orchestrator, context, sink, adapter):
        context.primary_queue.add("/captures/Recording.MP3")

        await orchestrator.process_screenshots()

        assert adapter.calls == ["analyze_audio"]

    @pytest.mark.asyncio
    async def test_audio_failure_keeps_solutions_view(self, context, sink):
        context.set_adapter(FakeAdapter("A", error=ProviderError("quota exceeded")))
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("clip.mp3")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.INITIAL_SOLUTION_ERROR]
        assert sink.events[1].payload == "quota exceeded"
        assert context.session.view is View.SOLUTIONS
        assert context.session.problem_info is None

    @pytest.mark.asyncio
    async def test_image_failure(self, context, sink):
        context.set_adapter(FakeAdapter("A", error=ParseError("not json")))
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("imgA.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.INITIAL_SOLUTION_ERROR]
        assert sink.events[1].payload == "not json"
        assert not orchestrator.is_running(Channel.PRIMARY)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_error_event(self, context, sink):
        context.set_adapter(FakeAdapter("A", error=OSError("file vanished")))
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("imgA.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.INITIAL_SOLUTION_ERROR]
        assert "file vanished" in sink.events[1].payload

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, sink):
        context = AssistantContext()
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("imgA.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.INITIAL_SOLUTION_ERROR]
        assert "not configured" in sink.events[1].payload

    @pytest.mark.asyncio
    async def test_extract_pipeline_uses_whole_queue(self, context, sink, adapter):
        orchestrator = ProcessingOrchestrator(context, sink, image_pipeline='extract')
        context.primary_queue.add("a.png")
        context.primary_queue.add("note.wav")
        context.primary_queue.add("b.png")

        await orchestrator.process_screenshots()

        assert adapter.calls == ["extract_problem"]
        assert sink.events[1].payload.problem_statement == "A: 2 images"

    def test_unknown_image_pipeline(self, context, sink):
        with pytest.raises(ValueError):
            ProcessingOrchestrator(context, sink, image_pipeline='ocr')


class TestDebugChannel:
    """Debug analysis in the solutions view."""

    @pytest.mark.asyncio
    async def test_missing_problem_info(self, orchestrator, context, sink, adapter):
        context.session.view = View.SOLUTIONS
        context.debug_queue.add("debug.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.DEBUG_START, EventKind.DEBUG_ERROR]
        assert sink.events[1].payload == NO_PROBLEM_INFO == "No problem info available"
        assert adapter.calls == []
        assert not orchestrator.is_running(Channel.DEBUG)

    @pytest.mark.asyncio
    async def test_debug_success(self, orchestrator, context, sink, adapter):
        context.session.view = View.SOLUTIONS
        context.session.problem_info = ProblemInfo(problem_statement="sum two numbers")
        context.debug_queue.add("d1.png")
        context.debug_queue.add("d2.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.DEBUG_START, EventKind.DEBUG_SUCCESS]
        result = sink.events[1].payload
        assert isinstance(result, DebugResult)
        assert result.new_code == "print('A')"
        assert result.feedback == "A: 2 debug images"
        assert adapter.calls == ["generate_solution", "debug_solution"]
        assert context.session.has_debugged is True
        assert not orchestrator.is_running(Channel.DEBUG)

    @pytest.mark.asyncio
    async def test_debug_failure(self, context, sink):
        context.set_adapter(FakeAdapter("A", error=ParseError("Solution has no code")))
        orchestrator = ProcessingOrchestrator(context, sink)
        context.session.view = View.SOLUTIONS
        context.session.problem_info = ProblemInfo(problem_statement="p")
        context.debug_queue.add("d1.png")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.DEBUG_START, EventKind.DEBUG_ERROR]
        assert sink.events[1].payload == "Solution has no code"
        assert context.session.has_debugged is False

    @pytest.mark.asyncio
    async def test_audio_in_debug_queue_is_skipped(self, orchestrator, context, sink, adapter):
        context.session.view = View.SOLUTIONS
        context.session.problem_info = ProblemInfo(problem_statement="p")
        context.debug_queue.add("d1.png")
        context.debug_queue.add("note.wav")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.DEBUG_START, EventKind.DEBUG_SUCCESS]
        assert sink.events[1].payload.feedback == "A: 1 debug images"

    @pytest.mark.asyncio
    async def test_audio_only_debug_queue(self, orchestrator, context, sink, adapter):
        context.session.view = View.SOLUTIONS
        context.session.problem_info = ProblemInfo(problem_statement="p")
        context.debug_queue.add("note.mp3")

        await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.NO_SCREENSHOTS]
        assert adapter.calls == []

    @pytest.mark.asyncio
    async def test_full_session(self, orchestrator, context, sink):
        context.primary_queue.add("problem.png")
        await orchestrator.process_screenshots()

        context.debug_queue.add("result.png")
        await orchestrator.process_screenshots()

        assert sink.kinds == [
            EventKind.INITIAL_START,
            EventKind.PROBLEM_EXTRACTED,
            EventKind.DEBUG_START,
            EventKind.DEBUG_SUCCESS,
        ]


class TestBusyGuard:
    """A channel accepts one request at a time."""

    @pytest.mark.asyncio
    async def test_second_debug_request_rejected(self, context, sink):
        gated = FakeAdapter("A", gate=asyncio.Event())
        context.set_adapter(gated)
        orchestrator = ProcessingOrchestrator(context, sink)
        context.session.view = View.SOLUTIONS
        context.session.problem_info = ProblemInfo(problem_statement="p")
        context.debug_queue.add("d1.png")

        first = asyncio.create_task(orchestrator.process_screenshots())
        await gated.started.wait()

        with pytest.raises(BusyError):
            await orchestrator.process_screenshots()

        assert sink.kinds == [EventKind.DEBUG_START]

        gated.gate.set()
        await first

        assert sink.kinds == [EventKind.DEBUG_START, EventKind.DEBUG_SUCCESS]

    @pytest.mark.asyncio
    async def test_second_primary_request_rejected(self, context, sink):
        gated = FakeAdapter("A", gate=asyncio.Event())
        context.set_adapter(gated)
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("imgA.png")

        first = asyncio.create_task(orchestrator.process_screenshots())
        await gated.started.wait()

        context.session.view = View.QUEUE
        with pytest.raises(BusyError) as exc_info:
            await orchestrator.process_screenshots()
        assert exc_info.value.channel == "primary"

        gated.gate.set()
        await first

        assert sink.kinds == [EventKind.INITIAL_START, EventKind.PROBLEM_EXTRACTED]

    @pytest.mark.asyncio
    async def test_channels_run_concurrently(self, context, sink):
        gated = FakeAdapter("A", gate=asyncio.Event())
        context.set_adapter(gated)
        orchestrator = ProcessingOrchestrator(context, sink)
        context.primary_queue.add("imgA.png")
        context.debug_queue.add("d1.png")
        context.session.problem_info = ProblemInfo(problem_statement="earlier problem")

        primary = asyncio.create_task(orchestrator.process_screenshots())
        await gated.started.wait()

        # The primary run switched the view, so this call uses the debug channel
        debug = asyncio.create_task(orchestrator.process_screenshots())
        await asyncio.sleep(0)

        assert orchestrator.is_running(Channel.PRIMARY)
        assert orchestrator.is_running(Channel.DEBUG)

        gated.gate.set()
        await asyncio.gather(primary, debug)

        assert sorted(k.name for k in sink.kinds) == sorted([
            'INITIAL_START', 'PROBLEM_EXTRACTED', 'DEBUG_START', 'DEBUG_SUCCESS',
        ])


class TestReset:

    @pytest.mark.asyncio
    async def test_reset_clears_everything(self, orchestrator, context, sink):
        context.primary_queue.add("imgA.png")
        await orchestrator.process_screenshots()
        context.debug_queue.add("d1.png")
        await orchestrator.process_screenshots()

        orchestrator.reset()

        assert context.session.view is View.QUEUE
        assert context.session.problem_info is None
        assert context.session.has_debugged is False
        assert len(context.primary_queue) == 0
        assert len(context.debug_queue) == 0
