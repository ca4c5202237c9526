"""
Logging configuration for Report Delivery.

This module provides console logging through Rich, optional rotating
file logging and a structured JSON formatter for log shipping.
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "report_delivery"

_RESERVED_RECORD_KEYS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
}


class LogLevel(str, Enum):
    """Log levels for structured logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogEntry:
    """Structured log entry with metadata."""
    timestamp: datetime = field(default_factory=datetime.now)
    level: LogLevel = LogLevel.INFO
    logger: str = ROOT_LOGGER_NAME
    message: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created),
            level=LogLevel(record.levelname),
            logger=record.name,
            message=record.getMessage(),
            metadata={
                'module': record.module,
                'function': record.funcName,
                'line': record.lineno,
            }
        )

        # Extra fields passed through logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry.metadata[key] = value

        if record.exc_info:
            log_entry.metadata['exception'] = self.formatException(record.exc_info)

        return log_entry.to_json()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rich_console: bool = True,
    structured_logging: bool = False,
    log_rotation: bool = True,
    max_log_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Set up logging for the report_delivery package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rich_console: Whether to use Rich console handler for CLI
        structured_logging: Whether to use structured JSON logging
        log_rotation: Whether to enable log rotation
        max_log_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    if rich_console and not structured_logging:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        if structured_logging:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        if log_rotation:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_log_size,
                backupCount=backup_count
            )
        else:
            file_handler = logging.FileHandler(log_file)

        if structured_logging:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

        logger.addHandler(file_handler)

    return logger
