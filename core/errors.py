"""Exception hierarchy for the processing core.

Backend-facing errors (configuration, connectivity, provider, parse) are
converted into error events at the orchestrator boundary. Cancellation is
silent and BusyError is raised straight to the caller.
"""

from typing import Optional


class AssistantError(Exception):
    """Base class for all processing core errors."""
    pass


class ConfigurationError(AssistantError):
    """No provider configured, or a required credential is missing."""
    pass


class ConnectivityError(AssistantError):
    """Exception raised when a backend cannot be reached."""

    def __init__(self, message: str, url: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Error description.
            url: Endpoint that could not be reached.
        """
        self.url = url
        super().__init__(message)


class ProviderError(AssistantError):
    """Exception raised on a non-success status or malformed backend payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize the error.

        Args:
            message: Error description, the backend's own message where available.
            status_code: HTTP status returned by the backend, if any.
        """
        self.status_code = status_code
        super().__init__(message)


class ParseError(AssistantError):
    """Exception raised when a structured response is not valid JSON or lacks keys."""

    def __init__(self, message: str, raw_response: str = ""):
        """Initialize the error.

        Args:
            message: Error description.
            raw_response: Response text that failed to parse.
        """
        self.raw_response = raw_response
        super().__init__(message)


class CancellationError(AssistantError):
    """Exception raised when a request was aborted by the user."""
    pass


class BusyError(AssistantError):
    """Exception raised when a channel already has a request in flight."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"A request is already in progress on the {channel} channel")
