"""Construction of provider adapters from configuration."""

from typing import Any, Dict
import logging

from config import get_config_value
from core.errors import ConfigurationError
from core.models import CloudConfig, LocalConfig, ProviderConfig
from providers.base import ProviderAdapter
from providers.cloud import CloudAdapter
from providers.local import LocalAdapter

logger = logging.getLogger(__name__)


def provider_config_from_settings(config: Dict[str, Any]) -> ProviderConfig:
    """Build the ProviderConfig selected by a configuration dictionary.

    Args:
        config: Full configuration dictionary (after environment overrides).

    Returns:
        CloudConfig or LocalConfig.

    Raises:
        ConfigurationError: If the provider type is unknown or the cloud
            provider is selected without an API key.
    """
    provider_type = get_config_value(config, 'provider.type', 'cloud')

    if provider_type == 'local':
        return local_config_from_settings(config)

    if provider_type == 'cloud':
        api_key = get_config_value(config, 'provider.cloud.api_key')
        if not api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY not found. Either set GEMINI_API_KEY or enable "
                "the local provider with USE_OLLAMA=true"
            )
        return CloudConfig(
            api_key=api_key,
            model=get_config_value(config, 'provider.cloud.model', CloudConfig.model),
            timeout=float(get_config_value(config, 'provider.cloud.timeout', CloudConfig.timeout)),
        )

    raise ConfigurationError(f"Unknown provider type: {provider_type!r}")


def local_config_from_settings(config: Dict[str, Any]) -> LocalConfig:
    """LocalConfig from the provider.local section, whatever provider is selected."""
    return LocalConfig(
        model=get_config_value(config, 'provider.local.model', LocalConfig.model),
        url=get_config_value(config, 'provider.local.url', LocalConfig.url),
        timeout=float(get_config_value(config, 'provider.local.timeout', LocalConfig.timeout)),
    )


async def create_adapter(provider_config: ProviderConfig, **kwargs: Any) -> ProviderAdapter:
    """Create and validate a brand-new adapter for a provider configuration.

    The cloud adapter is usable once its client exists. The local adapter
    is initialized best effort (model resolution and probe never raise).

    Args:
        provider_config: Target backend configuration.
        **kwargs: Passed to the adapter constructor (client/transport stubs).

    Returns:
        A new adapter instance.

    Raises:
        ConfigurationError: If the configuration is unusable.
    """
    if isinstance(provider_config, CloudConfig):
        return CloudAdapter(provider_config, **kwargs)

    if isinstance(provider_config, LocalConfig):
        adapter = LocalAdapter(provider_config, **kwargs)
        await adapter.initialize()
        return adapter

    raise ConfigurationError(f"Unsupported provider configuration: {provider_config!r}")
