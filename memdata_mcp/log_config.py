"""Logging configuration for MemData MCP.

Uses loguru with automatic rotation and structured logging.
Logs are stored in ~/.memdata_mcp/logs/ with:
- Rotation at 10 MB per file
- Retention of 7 days
- Compression of old logs

Console output goes to stderr only: stdout carries the MCP stdio transport.

Environment variables:
- MEMDATA_LOG_LEVEL: Console log level (default: INFO)
- MEMDATA_LOG_DIR: Directory for log files (default: ~/.memdata_mcp/logs)
"""

import os
import sys
from pathlib import Path

from loguru import logger

_console_log_level = os.getenv("MEMDATA_LOG_LEVEL", "INFO").upper()


def _log_filter(record) -> bool:
    """Filter console records against MEMDATA_LOG_LEVEL."""
    try:
        return record["level"].no >= logger.level(_console_log_level).no
    except ValueError:
        return True  # Unknown level name, let everything through


# Remove default handler
logger.remove()

_log_dir = Path(os.getenv("MEMDATA_LOG_DIR", str(Path.home() / ".memdata_mcp" / "logs")))
_log_dir.mkdir(parents=True, exist_ok=True)

# Console handler - filter decides the level
logger.add(
    sys.stderr,
    level=0,
    filter=_log_filter,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    colorize=True,
)

# File handler - DEBUG level, with rotation
logger.add(
    _log_dir / "memdata_{time:YYYY-MM-DD}.log",
    level="DEBUG",
    format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}",
    rotation="10 MB",
    retention="7 days",
    compression="zip",
    enqueue=True,
)

logger.configure(extra={"name": "memdata"})


def get_logger(name: str):
    """Get a logger with the given name bound to context.

    Args:
        name: Module or component name

    Returns:
        Logger instance with name bound
    """
    return logger.bind(name=name)


__all__ = ["logger", "get_logger"]
