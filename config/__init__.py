"""Configuration for the overlay assistant.

Settings come from a YAML file (config/default.yaml unless another path is
given). The provider section can then be overridden from the environment:

    GEMINI_API_KEY   cloud credential (provider.cloud.api_key)
    USE_OLLAMA=true  select the local backend (provider.type)
    OLLAMA_MODEL     local model name (provider.local.model)
    OLLAMA_URL       local server URL (provider.local.url)

Overrides are applied by apply_env_overrides(), which returns a new
dictionary and leaves the loaded one untouched.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = Path(__file__).parent / 'default.yaml'

# Environment variables recognised as overrides of the provider section
ENV_API_KEY = 'GEMINI_API_KEY'
ENV_USE_LOCAL = 'USE_OLLAMA'
ENV_LOCAL_MODEL = 'OLLAMA_MODEL'
ENV_LOCAL_URL = 'OLLAMA_URL'


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default.yaml if not specified.

    Returns:
        Dictionary containing configuration values.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the config file is invalid YAML.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    return config or {}


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated path to the value (e.g., 'provider.local.url').
        default: Default value if key is not found.

    Returns:
        The configuration value or default.
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def apply_env_overrides(config: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Overlay provider settings from environment variables.

    The input dictionary is not modified.

    Args:
        config: Configuration dictionary.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        New configuration dictionary with the overrides applied.
    """
    env = os.environ if environ is None else environ

    provider = dict(config.get('provider') or {})
    cloud = dict(provider.get('cloud') or {})
    local = dict(provider.get('local') or {})

    if env.get(ENV_USE_LOCAL, '').lower() == 'true':
        provider['type'] = 'local'
    if env.get(ENV_API_KEY):
        cloud['api_key'] = env[ENV_API_KEY]
    if env.get(ENV_LOCAL_MODEL):
        local['model'] = env[ENV_LOCAL_MODEL]
    if env.get(ENV_LOCAL_URL):
        local['url'] = env[ENV_LOCAL_URL]

    provider['cloud'] = cloud
    provider['local'] = local

    merged = dict(config)
    merged['provider'] = provider
    return merged


__all__ = [
    'load_config',
    'get_config_value',
    'apply_env_overrides',
    'DEFAULT_CONFIG_PATH',
    'ENV_API_KEY',
    'ENV_USE_LOCAL',
    'ENV_LOCAL_MODEL',
    'ENV_LOCAL_URL',
]
