"""Configuration for MemData MCP.

Frozen dataclass resolved once at process start.
Override via environment variables with MEMDATA_ prefix.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from memdata_mcp.errors import ConfigError
from memdata_mcp.log_config import get_logger

log = get_logger("config")

DEFAULT_API_URL = "https://memdata.ai"
DEFAULT_TIMEOUT = 30.0
API_KEY_URL = "https://memdata.ai/dashboard/api-keys"

# Look for .env in the working directory, then next to the package
_pkg_dir = Path(__file__).parent.parent
_env_loaded = load_dotenv(find_dotenv(usecwd=True)) or load_dotenv(_pkg_dir / ".env")
log.debug(f"Loaded .env file: {_env_loaded}")


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable with MEMDATA_ prefix."""
    return os.getenv(f"MEMDATA_{key}", default).strip()


@dataclass(frozen=True)
class Config:
    """MemData MCP configuration.

    Attributes:
        api_key: Bearer token for the MemData API (keys start with md_)
        api_url: Base URL of the MemData API (default: https://memdata.ai)
        timeout: HTTP timeout in seconds (default: 30)
    """

    api_key: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.api_key:
            raise ConfigError("MEMDATA_API_KEY environment variable is required")
        # frozen, so normalise through object.__setattr__
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

    @classmethod
    def from_env(cls) -> "Config":
        """Build the configuration from MEMDATA_* environment variables.

        Raises:
            ConfigError: If MEMDATA_API_KEY is unset or blank, or
                MEMDATA_TIMEOUT is not a positive number
        """
        timeout_raw = _get_env("TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigError(f"MEMDATA_TIMEOUT must be a number, got {timeout_raw!r}") from None
        if timeout <= 0:
            raise ConfigError(f"MEMDATA_TIMEOUT must be positive, got {timeout}")

        config = cls(
            api_key=_get_env("API_KEY"),
            api_url=_get_env("API_URL") or DEFAULT_API_URL,
            timeout=timeout,
        )
        log.info(f"Config initialized: api_url={config.api_url}, timeout={config.timeout}")
        return config

    def __repr__(self) -> str:
        return f"Config(api_url={self.api_url!r}, timeout={self.timeout!r}, api_key='***')"
