"""Local inference backend (Ollama HTTP API)."""

from typing import Any, Dict, List, Optional, Sequence
import logging

import httpx

from core.errors import ConnectivityError, ProviderError
from core.models import ConnectionResult, LocalConfig
from providers import prompts
from providers.base import ProviderAdapter
from utils.media import MediaPayload

logger = logging.getLogger(__name__)


class LocalAdapter(ProviderAdapter):
    """Adapter for a locally hosted Ollama server.

    Requests use the non-streaming /api/generate endpoint. Images are sent
    base64-encoded for vision-capable models; audio is not accepted by the
    Ollama API.

    Call initialize() once after construction to resolve the model against
    the models the server actually has.

    Example:
        adapter = LocalAdapter(LocalConfig(model="llama3.2"))
        await adapter.initialize()
        reply = await adapter.chat("Hello")
    """

    provider_name = "local"

    #: Sampling options sent with every generate request
    GENERATE_OPTIONS = {"temperature": 0.7, "top_p": 0.9}

    def __init__(
        self,
        config: LocalConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Local backend settings.
            transport: Optional httpx transport (used to stub the server).
        """
        self.config = config
        self.base_url = config.url.rstrip('/')
        self._model = config.model
        self._transport = transport
        self._timeout = httpx.Timeout(float(config.timeout), connect=10.0)

        logger.info(f"LocalAdapter created for {self.base_url} (model: {self._model})")

    @property
    def model_name(self) -> str:
        return self._model

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Perform one HTTP request against the server and decode the JSON body.

        Raises:
            ConnectivityError: If the server cannot be reached.
            ProviderError: On a non-2xx status or a non-JSON body.
        """
        try:
            async with self._client() as client:
                response = await client.request(method, endpoint, json=payload)
        except httpx.ConnectError as e:
            logger.error(f"Cannot connect to Ollama at {self.base_url}: {e}")
            raise ConnectivityError(
                f"Cannot connect to Ollama at {self.base_url}. Make sure Ollama is running.",
                url=self.base_url,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request to Ollama at {self.base_url} timed out: {e}")
            raise ConnectivityError(f"Request to Ollama at {self.base_url} timed out", url=self.base_url)
        except httpx.HTTPError as e:
            logger.error(f"Ollama request failed: {e}")
            raise ProviderError(f"Ollama request failed: {e}")

        if response.is_error:
            message = self._error_message(response)
            logger.error(f"Ollama API error: {response.status_code} {message}")
            raise ProviderError(f"Ollama API error: {response.status_code} {message}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ProviderError("Ollama returned a non-JSON body", status_code=response.status_code)

        if not isinstance(data, dict):
            raise ProviderError("Ollama returned an unexpected payload", status_code=response.status_code)

        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.reason_phrase

    async def generate(
        self,
        prompt: str,
        media: Sequence[MediaPayload] = (),
        json_output: bool = False,
    ) -> str:
        audio = [m for m in media if m.mime_type.startswith('audio/')]
        if audio:
            raise ProviderError("The local backend does not accept audio input; switch to the cloud provider")

        payload: Dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": dict(self.GENERATE_OPTIONS),
        }
        if media:
            payload["images"] = [m.to_base64() for m in media]
        if json_output:
            payload["format"] = "json"

        data = await self._request("POST", "/api/generate", payload)

        if "response" not in data:
            raise ProviderError("Ollama response has no 'response' field")

        return str(data["response"])

    async def list_models(self) -> List[str]:
        """List model names installed on the server, in server order.

        Raises:
            ConnectivityError: If the server cannot be reached.
            ProviderError: On a non-success response.
        """
        data = await self._request("GET", "/api/tags")
        models = data.get("models") or []
        return [m["name"] for m in models if isinstance(m, dict) and m.get("name")]

    async def is_available(self) -> bool:
        """Check server liveness via the tags endpoint."""
        try:
            await self._request("GET", "/api/tags")
            return True
        except (ConnectivityError, ProviderError):
            return False

    async def initialize(self) -> None:
        """Resolve the model to use and probe the server.

        If the configured model is not installed, the first model reported
        by the server is used instead. Failures are logged, not raised: the
        adapter stays usable and errors surface on the first real request.
        """
        try:
            available = await self.list_models()
        except (ConnectivityError, ProviderError) as e:
            logger.error(f"Could not list Ollama models: {e}")
            return

        if not available:
            logger.warning(f"No Ollama models found at {self.base_url}")
            return

        if self._model not in available:
            logger.info(f"Model {self._model!r} not available, auto-selected {available[0]!r}")
            self._model = available[0]

        try:
            await self.generate(prompts.PROBE_PROMPT)
            logger.info(f"Ollama initialized with model: {self._model}")
        except (ConnectivityError, ProviderError) as e:
            logger.error(f"Ollama probe with model {self._model!r} failed: {e}")

    async def test_connection(self) -> ConnectionResult:
        if not await self.is_available():
            return ConnectionResult(success=False, error=f"Ollama not available at {self.base_url}")

        try:
            await self.generate(prompts.PROBE_PROMPT)
        except (ConnectivityError, ProviderError) as e:
            return ConnectionResult(success=False, error=str(e))

        return ConnectionResult(success=True)
