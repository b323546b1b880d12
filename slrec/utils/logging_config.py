"""Logging configuration for reconstruction runs."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Union

import numpy as np

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
APP_LOG_NAME = "app.jsonl"
ERROR_LOG_NAME = "errors.jsonl"


def _json_default(value: Any) -> Any:
    """Serialize numpy values found in log props (metrics, shapes, masks)."""
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    return str(value)


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `props` passed via `extra` are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineNo": record.lineno,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # station id, analysis, quality metrics
        props = getattr(record, "props", None)
        if props:
            log_obj.update(props)

        return json.dumps(log_obj, default=_json_default)


def _jsonl_handler(path: Path, level: Union[int, str]) -> logging.Handler:
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Union[str, Path] = "logs") -> None:
    """
    Route all records to the console and to JSON-lines files.

    `<log_dir>/app.jsonl` receives records at `log_level` and above,
    `<log_dir>/errors.jsonl` only errors. Calling it again replaces the
    handlers installed before.

    Args:
        log_level: Logging level name (INFO, DEBUG, etc.)
        log_dir: Directory for the JSON-lines files, created if missing
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_level = str(log_level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_jsonl_handler(log_dir / APP_LOG_NAME, log_level))
    root_logger.addHandler(_jsonl_handler(log_dir / ERROR_LOG_NAME, logging.ERROR))

    logging.getLogger(__name__).info(
        f"Logging configured with level {log_level}",
        extra={"props": {"log_dir": str(log_dir)}},
    )


def configure_logging(settings: Mapping[str, Any]) -> None:
    """
    Apply the `logging` section of a validated configuration.

    Args:
        settings: Mapping with optional 'level' and 'log_dir' keys
    """
    setup_logging(
        log_level=settings.get("level", "INFO"),
        log_dir=settings.get("log_dir", "logs"),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
