"""UI command surface and command line front end."""

from commands.handlers import AssistantCommands, create_assistant

__all__ = [
    'AssistantCommands',
    'create_assistant',
]
