"""
Logger configuration.

Provides configured stdout logging with ISO timestamps for the service and
quiets the HTTP client libraries used by the provider SDKs.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

_NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "openai", "pinecone")


def configure_logging(level: str | int = "INFO") -> None:
    """
    Configure root logging with ISO timestamp and structured format.

    Args:
        level: Root log level name or number (e.g. settings.log_level)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
