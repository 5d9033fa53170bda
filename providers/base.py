"""Provider adapter facade over the cloud and local model backends.

Each backend variant implements a single text-generation primitive plus
its own connection test and model listing. The pipeline operations
(problem extraction, solution generation, debugging, audio/image analysis,
chat) are built once on top of that primitive here, so both variants share
the same prompts and the same structured-output contract.

Adapters are immutable once constructed: switching providers builds a new
adapter instead of reconfiguring a live one.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union
import base64
import binascii
import logging

from core.errors import ConfigurationError
from core.models import (
    AnalysisResult,
    CaptureItem,
    ConnectionResult,
    DebugResult,
    ProblemInfo,
    Solution,
)
from providers import parsing, prompts
from utils.media import MediaPayload, load_audio, load_image
from utils.string_utils import truncate

logger = logging.getLogger(__name__)


ImageSource = Union[CaptureItem, str, Path]


def _image_path(image: ImageSource) -> str:
    return image.path if isinstance(image, CaptureItem) else str(image)


class ProviderAdapter(ABC):
    """Uniform interface over the AI backends."""

    #: Short backend identifier ("cloud" or "local")
    provider_name: str = ""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model currently used for requests."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        media: Sequence[MediaPayload] = (),
        json_output: bool = False,
    ) -> str:
        """Send one prompt (with optional attachments) and return the text reply.

        Args:
            prompt: Full prompt text.
            media: Images or audio to attach.
            json_output: Ask the backend to constrain the reply to JSON.

        Returns:
            Response text.

        Raises:
            ProviderError: On a non-success backend response.
            ConnectivityError: If the backend cannot be reached.
        """
        pass

    @abstractmethod
    async def test_connection(self) -> ConnectionResult:
        """Send a minimal probe request. Never raises."""
        pass

    async def list_models(self) -> List[str]:
        """List models offered by the backend. Empty unless overridden."""
        return []

    async def _load_images(self, images: Sequence[ImageSource]) -> List[MediaPayload]:
        return [await load_image(_image_path(image)) for image in images]

    async def extract_problem(self, images: Sequence[ImageSource]) -> ProblemInfo:
        """Extract a structured problem description from screenshots.

        Raises:
            ParseError: If the reply is not JSON with a problem_statement.
        """
        media = await self._load_images(images)
        logger.info(f"Extracting problem from {len(media)} image(s) with {self.model_name}")

        text = await self.generate(
            prompts.with_system_prompt(prompts.EXTRACT_PROBLEM_PROMPT),
            media=media,
            json_output=True,
        )
        return parsing.parse_problem_info(text)

    async def generate_solution(self, problem: ProblemInfo) -> Solution:
        """Generate a solution for a problem.

        Raises:
            ParseError: If the reply is malformed or has no code.
        """
        logger.info(f"Generating solution with {self.model_name}")

        text = await self.generate(
            prompts.with_system_prompt(prompts.solution_prompt(problem)),
            json_output=True,
        )
        solution = parsing.parse_solution(text)
        logger.debug(f"Solution code: {truncate(solution.code, 200)}")
        return solution

    async def debug_solution(
        self,
        problem: ProblemInfo,
        code: str,
        images: Sequence[ImageSource],
    ) -> DebugResult:
        """Review solution code against follow-up screenshots.

        Raises:
            ParseError: If the reply is not a JSON object.
        """
        media = await self._load_images(images)
        logger.info(f"Debugging solution with {len(media)} image(s) using {self.model_name}")

        text = await self.generate(
            prompts.with_system_prompt(prompts.debug_prompt(problem, code)),
            media=media,
            json_output=True,
        )
        return parsing.parse_debug_result(text)

    async def analyze_audio(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        data: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> AnalysisResult:
        """Describe or transcribe an audio clip.

        The clip is given either as a file path or as base64 data with its
        MIME type.

        Raises:
            ConfigurationError: If neither a path nor base64 data is given.
        """
        if path is not None:
            payload = await load_audio(path)
        elif data is not None and mime_type:
            try:
                payload = MediaPayload(data=base64.b64decode(data, validate=True), mime_type=mime_type)
            except (binascii.Error, ValueError) as e:
                raise ConfigurationError(f"Audio data is not valid base64: {e}")
        else:
            raise ConfigurationError("analyze_audio needs a path or base64 data with a MIME type")

        logger.info(f"Analyzing audio ({payload.mime_type}, {payload.size_kb:.1f}KB) with {self.model_name}")

        text = await self.generate(
            prompts.with_system_prompt(prompts.DESCRIBE_AUDIO_PROMPT),
            media=[payload],
        )
        return AnalysisResult(text=text)

    async def analyze_image(self, path: ImageSource) -> AnalysisResult:
        """Describe a screenshot in free text."""
        media = await self._load_images([path])
        logger.info(f"Analyzing image {Path(_image_path(path)).name} with {self.model_name}")

        text = await self.generate(
            prompts.with_system_prompt(prompts.DESCRIBE_IMAGE_PROMPT),
            media=media,
        )
        return AnalysisResult(text=text)

    async def chat(self, message: str) -> str:
        """Single-turn chat. No previous turns are remembered."""
        return await self.generate(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model_name!r})"
