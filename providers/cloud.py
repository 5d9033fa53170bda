"""Cloud backend (Google Gemini via the google-genai SDK)."""

from typing import Any, Optional, Sequence
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from core.errors import ConfigurationError, ConnectivityError, ProviderError
from core.models import CloudConfig, ConnectionResult
from providers import prompts
from providers.base import ProviderAdapter
from utils.media import MediaPayload

logger = logging.getLogger(__name__)


class CloudAdapter(ProviderAdapter):
    """Adapter for the Gemini generative API.

    Images and audio are attached inline with their MIME types. Structured
    pipelines request an application/json response.
    """

    provider_name = "cloud"

    def __init__(self, config: CloudConfig, client: Optional[Any] = None):
        """Initialize the adapter with cloud credentials.

        Args:
            config: Cloud backend settings.
            client: Pre-built genai.Client (used to stub the SDK).

        Raises:
            ConfigurationError: If the API key is missing or the client
                cannot be created.
        """
        if not config.api_key:
            raise ConfigurationError("No Gemini API key provided")

        self.config = config

        if client is None:
            try:
                client = genai.Client(
                    api_key=config.api_key,
                    http_options=types.HttpOptions(timeout=int(config.timeout * 1000)),
                )
            except ValueError as e:
                raise ConfigurationError(f"Could not create Gemini client: {e}")

        self.client = client

        logger.info(f"CloudAdapter initialized with model: {config.model}")

    @property
    def model_name(self) -> str:
        return self.config.model

    async def generate(
        self,
        prompt: str,
        media: Sequence[MediaPayload] = (),
        json_output: bool = False,
    ) -> str:
        contents: list = [prompt]
        contents.extend(types.Part.from_bytes(data=m.data, mime_type=m.mime_type) for m in media)

        generation_config = None
        if json_output:
            generation_config = types.GenerateContentConfig(response_mime_type="application/json")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.config.model,
                contents=contents,
                config=generation_config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise ProviderError(f"Gemini API error: {e.message or e}", status_code=e.code)
        except httpx.ConnectError as e:
            logger.error(f"Gemini connection error: {e}")
            raise ConnectivityError(f"Cannot connect to Gemini: {e}")
        except httpx.TimeoutException as e:
            logger.error(f"Gemini request timed out: {e}")
            raise ConnectivityError("Request to Gemini timed out")
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise ProviderError(f"Gemini request failed: {e}")

        text = response.text
        if not text:
            raise ProviderError("Empty response from Gemini")

        return text

    async def test_connection(self) -> ConnectionResult:
        try:
            await self.generate(prompts.PROBE_PROMPT)
        except (ConnectivityError, ProviderError) as e:
            return ConnectionResult(success=False, error=str(e))

        return ConnectionResult(success=True)
