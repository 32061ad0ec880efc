"""Error types for MemData MCP.

Only ConfigError is fatal. The others are raised while serving a single
tool call and are turned into a failure message at the tool boundary.
"""


class MemDataError(Exception):
    """Base class for all MemData MCP errors."""


class ConfigError(MemDataError):
    """Required configuration is missing or invalid."""


class ApiError(MemDataError):
    """HTTP-level failure talking to the MemData API.

    ``status_code`` is None when no response was received at all
    (DNS failure, refused connection, timeout).
    """

    def __init__(self, status_code: int | None, detail: str):
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            super().__init__(f"Connection error: {detail}")
        else:
            super().__init__(f"API error ({status_code}): {detail}")


class RemoteError(MemDataError):
    """The API answered but reported ``success: false``."""


class DecodeError(MemDataError):
    """The API answered with a body that does not match the expected shape."""
