"""Commands the UI can invoke on the processing core.

Every command that talks to a backend goes through the adapter that is
active at the moment it is invoked.
"""

from typing import Any, Dict, List, Optional
import logging

from config import get_config_value
from core.errors import AssistantError, ConfigurationError
from core.events import EventSink
from core.models import AnalysisResult, ConnectionResult, ProviderConfig
from processing.orchestrator import ProcessingOrchestrator
from processing.state import AssistantContext
from providers.factory import local_config_from_settings, provider_config_from_settings
from providers.local import LocalAdapter

logger = logging.getLogger(__name__)


class AssistantCommands:
    """Command surface of the processing core.

    Example:
        commands = await create_assistant(load_config(), RecordingEventSink())
        commands.context.primary_queue.add("screen.png")
        await commands.process_screenshots()
    """

    def __init__(
        self,
        context: AssistantContext,
        orchestrator: ProcessingOrchestrator,
        settings: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the command surface.

        Args:
            context: Shared assistant context.
            orchestrator: Orchestrator operating on the same context.
            settings: Full configuration dictionary (used for the local
                server URL when listing models).
        """
        self.context = context
        self.orchestrator = orchestrator
        self.settings = settings or {}

    async def process_screenshots(self) -> None:
        """Process the queue for the current view (see ProcessingOrchestrator)."""
        await self.orchestrator.process_screenshots()

    def cancel_ongoing_requests(self) -> None:
        self.orchestrator.cancel_ongoing_requests()

    def reset_queues(self) -> None:
        """Cancel requests, clear both queues and return to the queue view."""
        self.orchestrator.reset()

    async def switch_provider(self, provider_config: ProviderConfig, **adapter_kwargs: Any) -> ConnectionResult:
        """Switch the active backend. Never raises."""
        return await self.context.switch_provider(provider_config, **adapter_kwargs)

    async def test_connection(self) -> ConnectionResult:
        """Probe the active backend. Never raises."""
        adapter = self.context.adapter
        if adapter is None:
            return ConnectionResult(success=False, error="LLM provider not configured. Please set up your AI model first.")

        try:
            return await adapter.test_connection()
        except AssistantError as e:
            logger.error(f"Error testing LLM connection: {e}")
            return ConnectionResult(success=False, error=str(e))

    async def list_local_models(self, **adapter_kwargs: Any) -> List[str]:
        """List models installed on the local server.

        When the active adapter is not the local one, a temporary local
        adapter for the configured URL is queried so that models can be
        browsed before switching.
        """
        adapter = self.context.adapter
        if not isinstance(adapter, LocalAdapter):
            adapter = LocalAdapter(local_config_from_settings(self.settings), **adapter_kwargs)

        try:
            return await adapter.list_models()
        except AssistantError as e:
            logger.error(f"Error fetching local models: {e}")
            return []

    async def chat(self, message: str) -> str:
        """Single-turn chat with the active backend.

        Raises:
            ConfigurationError: If no provider is configured.
        """
        return await self.context.require_adapter().chat(message)

    def current_provider(self) -> Dict[str, Any]:
        """Describe the active backend for display."""
        adapter = self.context.adapter
        if adapter is None:
            return {"provider": "none", "model": "Not configured", "is_local": False}

        return {
            "provider": adapter.provider_name,
            "model": adapter.model_name,
            "is_local": isinstance(adapter, LocalAdapter),
        }

    async def analyze_audio_base64(self, data: str, mime_type: str) -> AnalysisResult:
        return await self.orchestrator.process_audio_base64(data, mime_type)

    async def analyze_audio_file(self, path: str) -> AnalysisResult:
        return await self.orchestrator.process_audio_file(path)

    async def analyze_image_file(self, path: str) -> AnalysisResult:
        return await self.context.require_adapter().analyze_image(path)


async def create_assistant(
    settings: Dict[str, Any],
    event_sink: EventSink,
    **adapter_kwargs: Any,
) -> AssistantCommands:
    """Factory function to assemble the processing core from configuration.

    A missing or unusable provider configuration is not fatal: the core
    starts without an active adapter and pipeline runs report a
    configuration error until switch_provider() succeeds.

    Args:
        settings: Full configuration dictionary (after environment overrides).
        event_sink: Where lifecycle events are published.
        **adapter_kwargs: Passed to the adapter constructor.

    Returns:
        Ready AssistantCommands.
    """
    context = AssistantContext(
        max_queue_size=int(get_config_value(settings, 'processing.max_queue_size', 5)),
    )
    orchestrator = ProcessingOrchestrator(
        context,
        event_sink,
        image_pipeline=get_config_value(settings, 'processing.image_pipeline', 'describe'),
    )

    try:
        provider_config = provider_config_from_settings(settings)
    except ConfigurationError as e:
        logger.warning(f"No provider configured: {e}")
    else:
        result = await context.switch_provider(provider_config, **adapter_kwargs)
        if not result.success:
            logger.warning(f"Starting without an active provider: {result.error}")

    return AssistantCommands(context, orchestrator, settings)
