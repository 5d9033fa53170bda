"""Session state and the explicit context object shared by the core.

The AssistantContext is constructed once and passed to the orchestrator
and the command handlers. It owns the view state, the current problem,
both capture queues and the active provider adapter.
"""

from dataclasses import dataclass
from typing import Any, Optional
import logging

from core.errors import AssistantError, ConfigurationError
from core.models import ConnectionResult, ProblemInfo, ProviderConfig, View
from processing.capture_queue import CaptureQueue
from providers.base import ProviderAdapter
from providers.factory import create_adapter

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """View state of the overlay and the problem being worked on.

    Attributes:
        view: Which screen is showing.
        has_debugged: Set after the first successful debug run.
        problem_info: Problem extracted by the last initial run.
    """
    view: View = View.QUEUE
    has_debugged: bool = False
    problem_info: Optional[ProblemInfo] = None

    def reset(self) -> None:
        """Return to the queue view and forget the current problem."""
        self.view = View.QUEUE
        self.has_debugged = False
        self.problem_info = None


class AssistantContext:
    """Explicit holder for all state the processing core works on.

    The active adapter is replaced, never mutated: switch_provider() builds
    a new adapter and then swaps the reference in one assignment. Requests
    capture the reference they started with, so a switch never redirects
    a request that is already in flight.
    """

    def __init__(
        self,
        adapter: Optional[ProviderAdapter] = None,
        max_queue_size: int = 5,
    ):
        """Initialize the context.

        Args:
            adapter: Initially active adapter, if one is configured.
            max_queue_size: Capacity of each capture queue.
        """
        self.session = SessionState()
        self.primary_queue = CaptureQueue("primary", max_size=max_queue_size)
        self.debug_queue = CaptureQueue("debug", max_size=max_queue_size)

        self._adapter = adapter
        self._adapter_version = 0 if adapter is None else 1

    @property
    def adapter(self) -> Optional[ProviderAdapter]:
        """Currently active adapter (None if no provider is configured)."""
        return self._adapter

    @property
    def adapter_version(self) -> int:
        """Incremented on every provider switch."""
        return self._adapter_version

    def require_adapter(self) -> ProviderAdapter:
        """Return the active adapter.

        Raises:
            ConfigurationError: If no provider is configured.
        """
        if self._adapter is None:
            raise ConfigurationError("LLM provider not configured. Please set up your AI model first.")
        return self._adapter

    def set_adapter(self, adapter: ProviderAdapter) -> int:
        """Make an already validated adapter the active one.

        Returns:
            The new adapter version.
        """
        self._adapter = adapter
        self._adapter_version += 1
        logger.info(f"Active provider is now {adapter.provider_name} "
                    f"({adapter.model_name}, version {self._adapter_version})")
        return self._adapter_version

    async def switch_provider(self, provider_config: ProviderConfig, **adapter_kwargs: Any) -> ConnectionResult:
        """Replace the active adapter with a new one built from a configuration.

        The previous adapter stays active if the new one cannot be built.

        Args:
            provider_config: Target backend configuration.
            **adapter_kwargs: Passed to the adapter constructor.

        Returns:
            ConnectionResult describing whether the switch happened.
        """
        try:
            adapter = await create_adapter(provider_config, **adapter_kwargs)
        except AssistantError as e:
            logger.error(f"Provider switch failed: {e}")
            return ConnectionResult(success=False, error=str(e))

        self.set_adapter(adapter)
        return ConnectionResult(success=True)

    def clear_queues(self) -> None:
        self.primary_queue.clear()
        self.debug_queue.clear()
