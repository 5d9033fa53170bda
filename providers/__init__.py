"""AI provider adapters for the overlay assistant.

Two backends sit behind one facade:
    - CloudAdapter: Google Gemini through the google-genai SDK
    - LocalAdapter: a locally hosted Ollama server over HTTP

Example:
    from core import LocalConfig
    from providers import create_adapter

    adapter = await create_adapter(LocalConfig(model="llama3.2"))
    problem = await adapter.extract_problem(["screen.png"])
    solution = await adapter.generate_solution(problem)
"""

from providers.base import ProviderAdapter
from providers.cloud import CloudAdapter
from providers.local import LocalAdapter
from providers.factory import (
    create_adapter,
    provider_config_from_settings,
    local_config_from_settings,
)
from providers.parsing import (
    parse_json_object,
    parse_problem_info,
    parse_solution,
    parse_debug_result,
)


__all__ = [
    'ProviderAdapter',
    'CloudAdapter',
    'LocalAdapter',
    'create_adapter',
    'provider_config_from_settings',
    'local_config_from_settings',
    'parse_json_object',
    'parse_problem_info',
    'parse_solution',
    'parse_debug_result',
]
