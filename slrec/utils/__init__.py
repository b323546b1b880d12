"""Error types, logging and configuration utilities."""

from slrec.utils.logging_config import configure_logging, setup_logging, get_logger

__all__ = ["configure_logging", "setup_logging", "get_logger"]
