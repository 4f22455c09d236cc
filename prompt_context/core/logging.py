"""
Logging for the prompt context server.

Everything is written to stderr: with the stdio transport, stdout carries the
MCP protocol stream.
"""

import itertools
import logging
import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class PromptContextFormatter(logging.Formatter):
    """
    Formatter with level emoji, structured key=value data and TTY colors.
    """

    LEVEL_EMOJIS = {
        "DEBUG": "🔍",
        "INFO": "ℹ️",
        "WARNING": "⚠️",
        "ERROR": "❌",
        "CRITICAL": "🚨",
    }

    COLORS = {
        "DEBUG": "\033[90m",  # Gray
        "INFO": "\033[36m",  # Cyan
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with emoji, color, and structured data."""
        emoji = self.LEVEL_EMOJIS.get(record.levelname, "📝")
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        message = f"[{timestamp}] {emoji}  {record.name}: {record.getMessage()}"

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            parts = [f"{key}={value}" for key, value in extra_data.items()]
            message += f" ({', '.join(parts)})"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, "")
            message = f"{color}{message}{self.COLORS['RESET']}"

        return message


class StructuredLogger:
    """
    Logger taking structured data as keyword arguments.

    Records propagate to the handlers installed by ``setup_logging``.
    """

    def __init__(self, name: str, level: str | None = None):
        self.logger = logging.getLogger(name)
        if level:
            self.logger.setLevel(getattr(logging, level.upper()))

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs, exc_info=exc_info)

    def critical(self, message: str, **kwargs) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def _log(
        self,
        level: int,
        message: str,
        extra_data: dict[str, Any],
        exc_info: bool = False,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            message,
            extra={"extra_data": extra_data},
            exc_info=exc_info,
            stacklevel=3,
        )


class RequestLogger:
    """
    Traces MCP requests through the server.

    Each incoming request gets a sequential id which is echoed on the
    matching response, tool call and resource access entries.
    """

    def __init__(self, name: str = "prompt_context.requests"):
        self.log = StructuredLogger(name)
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()

    def next_request_id(self) -> str:
        with self._ids_lock:
            return str(next(self._ids))

    def log_request(self, method: str, params: Any = None) -> str:
        """Log an incoming request and return its id."""
        request_id = self.next_request_id()
        self.log.info(
            f"📥 Incoming Request [{request_id}]",
            method=method,
            params=params,
            timestamp=time.perf_counter(),
        )
        return request_id

    def log_response(
        self, request_id: str, result: Any = None, error: Any = None
    ) -> None:
        """Log the outcome of a request."""
        if error is not None:
            self.log.info(
                f"📤 Outgoing Response [{request_id}] ❌ ERROR",
                error=error,
                timestamp=time.perf_counter(),
            )
        else:
            self.log.info(
                f"📤 Outgoing Response [{request_id}] ✅ SUCCESS",
                result=_summarize(result),
                timestamp=time.perf_counter(),
            )

    def log_tool_call(self, tool_name: str, arguments: Any, request_id: str) -> None:
        self.log.info(
            f"🔧 Tool Call [{request_id}]", tool=tool_name, arguments=arguments
        )

    def log_resource_access(self, uri: str, request_id: str) -> None:
        self.log.info(f"📄 Resource Access [{request_id}]", uri=uri)

    def log_server_event(self, event: str, **data) -> None:
        self.log.info(f"🚀 Server Event: {event}", **data)


def _summarize(result: Any, limit: int = 200) -> str:
    """Shorten large payloads such as whole documents for the log."""
    text = str(result)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text)} chars)"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Setup application-wide logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to write logs to
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(PromptContextFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)


__all__ = [
    "PromptContextFormatter",
    "RequestLogger",
    "StructuredLogger",
    "setup_logging",
]
