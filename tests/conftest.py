"""Shared pytest configuration and fixtures for the processing core tests."""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest
from PIL import Image

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.events import RecordingEventSink
from core.models import (
    AnalysisResult,
    ConnectionResult,
    DebugResult,
    ProblemInfo,
    Solution,
)
from processing.orchestrator import ProcessingOrchestrator
from processing.state import AssistantContext
from providers.base import ProviderAdapter


# =============================================================================
# Fake adapter
# =============================================================================

class FakeAdapter(ProviderAdapter):
    """Adapter returning responses tagged with its name.

    If a gate is given, every pipeline call sets `started` and then waits
    on the gate, so tests can act while a request is in flight.
    """

    provider_name = "fake"

    def __init__(self, tag: str, gate: Optional[asyncio.Event] = None, error: Optional[Exception] = None):
        self.tag = tag
        self.gate = gate
        self.error = error
        self.started = asyncio.Event()
        self.calls: List[str] = []

    @property
    def model_name(self) -> str:
        return f"{self.tag}-model"

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def generate(self, prompt: str, media: Sequence = (), json_output: bool = False) -> str:
        await self._enter("generate")
        return f"{self.tag}: {prompt}"

    async def test_connection(self) -> ConnectionResult:
        return ConnectionResult(success=True)

    async def analyze_image(self, path) -> AnalysisResult:
        await self._enter("analyze_image")
        return AnalysisResult(text=f"{self.tag}: image {path}")

    async def analyze_audio(self, path=None, *, data=None, mime_type=None) -> AnalysisResult:
        await self._enter("analyze_audio")
        return AnalysisResult(text=f"{self.tag}: transcript")

    async def extract_problem(self, images) -> ProblemInfo:
        await self._enter("extract_problem")
        return ProblemInfo(problem_statement=f"{self.tag}: {len(images)} images")

    async def generate_solution(self, problem: ProblemInfo) -> Solution:
        await self._enter("generate_solution")
        return Solution(code=f"print('{self.tag}')")

    async def debug_solution(self, problem, code, images) -> DebugResult:
        await self._enter("debug_solution")
        return DebugResult(new_code=code, feedback=f"{self.tag}: {len(images)} debug images")


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter("A")


@pytest.fixture
def context(adapter) -> AssistantContext:
    return AssistantContext(adapter=adapter)


@pytest.fixture
def orchestrator(context, sink) -> ProcessingOrchestrator:
    return ProcessingOrchestrator(context, sink)


@pytest.fixture
def sample_png(tmp_path) -> Path:
    """Small PNG screenshot on disk."""
    path = tmp_path / "imgA.png"
    Image.new('RGB', (64, 48), color=(200, 30, 30)).save(path)
    return path


@pytest.fixture
def sample_wav(tmp_path) -> Path:
    """Audio file on disk (content is irrelevant to the core)."""
    path = tmp_path / "clip.wav"
    path.write_bytes(b"RIFF\x00\x00\x00\x00WAVEfmt ")
    return path
