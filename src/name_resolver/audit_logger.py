"""
Audit Logger module for the name resolver.

Writes structured entries as JSON lines, human-readable text lines or
both. Entries under the configured minimum level are dropped, and values
under secret-looking keys (API keys, auth headers, RPC URLs) are replaced
before anything is written.
"""

import json
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from name_resolver.enums import LogLevel


# Entries kept in memory for inspection; older entries are discarded
DEFAULT_HISTORY_SIZE = 1000

OUTPUT_FORMATS = {
    "json": ("json",),
    "text": ("text",),
    "both": ("json", "text"),
}


@dataclass
class LogEntry:
    """One structured log record."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


class AuditLogger:
    """
    Structured logger shared by the resolver components.

    The most recent ``history_size`` entries are kept in memory as well
    as written, so tests can inspect what a component logged.
    """

    # Matched as substrings of lowercased keys. RPC URLs are included
    # because providers put API keys in their path or query string.
    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'rpc_url',
        'auth', 'authorization', 'credential', 'private_key',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Where entries are written (stderr by default)
            level: Entries below this level are dropped
            history_size: Number of recent entries kept in memory (0 keeps none)
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown log output format: {output_format!r}")

        self._format = output_format
        self._stream = output_stream or sys.stderr
        self._level = level
        self._history: deque[LogEntry] = deque(maxlen=max(history_size, 0))

    @classmethod
    def from_config(cls, logging_config, output_stream: Optional[TextIO] = None) -> "AuditLogger":
        """Build a logger from a LoggingConfig; unknown level names mean info."""
        try:
            level = LogLevel(logging_config.level)
        except ValueError:
            level = LogLevel.INFO
        return cls(
            output_format=logging_config.output_format,
            output_stream=output_stream,
            level=level,
        )

    @property
    def output_format(self) -> str:
        return self._format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        """Snapshot of the retained entries, oldest first."""
        return list(self._history)

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write one entry.

        Args:
            level: Severity
            component: Name of the component writing the entry
            message: Short description of the event
            data: Structured context, masked before it is stored

        Returns:
            The written entry, or None when the level is filtered out
        """
        if level.rank < self._level.rank:
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._history.append(entry)
        self._write(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Write an error entry.

        Resolver errors add their ``code`` and ``details`` to the context.
        """
        context = dict(additional_data or {})
        if error is not None:
            context.update(error_type=type(error).__name__, error_message=str(error))
            if getattr(error, "code", None) is not None:
                context["error_code"] = error.code
            if getattr(error, "details", None):
                context["error_details"] = error.details
        return self.log(LogLevel.ERROR, component, message, context)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> Optional[LogEntry]:
        """Write the access entry of one served HTTP request."""
        return self.log(
            LogLevel.INFO,
            "HttpServer",
            f"{method} {path} -> {status_code}",
            {
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 1),
            },
        )

    def mask_sensitive_data(self, data: dict) -> dict:
        """Copy of ``data`` with the values of sensitive keys replaced, at any depth."""
        return self._mask(data)

    def _mask(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: self.MASK_VALUE if self._is_sensitive(key) else self._mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._mask(item) for item in value]
        return value

    def _is_sensitive(self, key: Any) -> bool:
        lowered = str(key).lower()
        return any(marker in lowered for marker in self.SENSITIVE_KEYS)

    def _write(self, entry: LogEntry) -> None:
        for kind in OUTPUT_FORMATS[self._format]:
            line = self.format_json(entry) if kind == "json" else self.format_text(entry)
            self._stream.write(line + "\n")
        self._stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps(entry.to_dict(), ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """``[timestamp] LEVEL [component] message {data}``"""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line

    def clear_entries(self) -> None:
        self._history.clear()
