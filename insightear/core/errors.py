"""
Application errors for clean API error handling.

Use ServiceUnavailableError when the assistant is misconfigured (no API key or
assistant id) and AssistantRunError when a research turn cannot finish, so the
API can answer with a single degraded response instead of an unhandled fault.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. the hosted assistant) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AssistantRunError(Exception):
    """Raised when an assistant run ends in a non-completed state or the turn fails midway.

    status carries the raw run status (failed, cancelled, expired, timed_out, error ...)
    for diagnostics.
    """

    def __init__(self, message: str, status: str = "error") -> None:
        self.message = message
        self.status = status
        super().__init__(f"{message} (status: {status})")


class ToolArgumentsError(AssistantRunError):
    """Raised when the assistant sends tool arguments that are not a JSON object."""

    def __init__(self, tool_name: str, raw_arguments: str) -> None:
        self.tool_name = tool_name
        self.raw_arguments = raw_arguments
        super().__init__(f"Malformed arguments for tool {tool_name!r}", status="invalid_tool_arguments")
