"""Data model shared by the providers and the processing orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import time

from utils.media import is_audio_path


class CaptureKind(Enum):
    """Kind of a queued capture, derived from the file extension."""
    IMAGE = "image"
    AUDIO = "audio"


@dataclass(frozen=True)
class CaptureItem:
    """One screenshot or audio recording waiting to be processed.

    Attributes:
        path: Filesystem path of the capture.
        kind: Image or audio.
    """
    path: str
    kind: CaptureKind

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'CaptureItem':
        """Create a capture item, deriving its kind from the extension."""
        kind = CaptureKind.AUDIO if is_audio_path(path) else CaptureKind.IMAGE
        return cls(path=str(path), kind=kind)

    @property
    def is_audio(self) -> bool:
        return self.kind is CaptureKind.AUDIO


@dataclass
class ProblemInfo:
    """Structured description of the task extracted from a capture.

    Attributes:
        problem_statement: What the user is looking at / asking about.
        input_format: Input description (free-form mapping).
        output_format: Output description (free-form mapping).
        constraints: Known constraints.
        test_cases: Example cases, if any were visible.
        complexity: Expected time/space complexity.
        validation_type: How a solution should be validated.
        difficulty: Difficulty label.
        metadata: Any other keys the model returned (context,
            suggested_responses, reasoning, ...).
    """
    problem_statement: str
    input_format: Dict[str, Any] = field(default_factory=dict)
    output_format: Dict[str, Any] = field(default_factory=dict)
    constraints: List[Any] = field(default_factory=list)
    test_cases: List[Any] = field(default_factory=list)
    complexity: Optional[Dict[str, str]] = None
    validation_type: Optional[str] = None
    difficulty: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str) -> 'ProblemInfo':
        """Problem info for a transcript: statement only, empty structure."""
        return cls(problem_statement=text)

    @classmethod
    def from_screenshot_text(cls, text: str) -> 'ProblemInfo':
        """Problem info for a screenshot description with placeholder structure."""
        return cls(
            problem_statement=text,
            input_format={"description": "Generated from screenshot", "parameters": []},
            output_format={"description": "Generated from screenshot", "type": "string", "subtype": "text"},
            complexity={"time": "N/A", "space": "N/A"},
            validation_type="manual",
            difficulty="custom",
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "problem_statement": self.problem_statement,
            "input_format": self.input_format,
            "output_format": self.output_format,
            "constraints": self.constraints,
            "test_cases": self.test_cases,
        }
        if self.complexity is not None:
            data["complexity"] = self.complexity
        if self.validation_type is not None:
            data["validation_type"] = self.validation_type
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        data.update(self.metadata)
        return data


@dataclass
class Solution:
    """Generated solution for a problem. Not persisted."""
    code: str
    problem_statement: str = ""
    context: str = ""
    suggested_responses: List[str] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class DebugResult:
    """Structured feedback on a solution given follow-up screenshots.

    Attributes:
        new_code: Corrected code, if the model proposed one.
        thoughts: Individual observations.
        time_complexity: Complexity estimate of the new code.
        space_complexity: Complexity estimate of the new code.
        feedback: Overall feedback text.
        raw: The full JSON object returned by the model.
    """
    new_code: str = ""
    thoughts: List[str] = field(default_factory=list)
    time_complexity: str = ""
    space_complexity: str = ""
    feedback: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    """Free-text result of an audio or image analysis."""
    text: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class ConnectionResult:
    """Outcome of a connection test or provider switch."""
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class CloudConfig:
    """Cloud backend settings.

    Attributes:
        api_key: Credential for the cloud service.
        model: Model identifier.
        timeout: Request timeout in seconds.
    """
    api_key: str
    model: str = "gemini-2.0-flash"
    timeout: float = 60.0


@dataclass(frozen=True)
class LocalConfig:
    """Local inference server settings.

    Attributes:
        model: Preferred model name; replaced by the first available model
            if the server does not have it.
        url: Base URL of the server.
        timeout: Request timeout in seconds.
    """
    model: str = "gemma:latest"
    url: str = "http://localhost:11434"
    timeout: float = 120.0


ProviderConfig = Union[CloudConfig, LocalConfig]


class View(Enum):
    """Which screen the overlay is showing."""
    QUEUE = "queue"
    SOLUTIONS = "solutions"
