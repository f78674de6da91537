"""Structured request logging utilities.

Responsibilities:
- Configure one `loguru` sink with a plain message format.
- Emit concise, deterministic per-request synthesis events.
- Keep secrets, input text, and audio out of log lines.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    return " " + " ".join(tokens) if tokens else ""


def configure_logging(level: str = "INFO", sink: TextIO | None = None) -> None:
    """Replace loguru's default handler with one plain-format sink."""

    _loguru_logger.remove()
    _loguru_logger.add(
        sink or sys.stderr,
        format="{message}",
        level=level.upper(),
        colorize=False,
    )


class RequestLogger:
    """Emit deterministic synthesis events scoped to one request id."""

    def __init__(self, request_id: str) -> None:
        """Bind the logger to a request id used as correlation token."""

        self.request_id = request_id

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = (
            f"[synthesis] level={level} request_id={self.request_id} event={event}"
            f"{_format_context(context)}"
        )
        _loguru_logger.log(level, line)

    def log_transition(self, source: str, target: str) -> None:
        """Emit a state-machine transition event."""

        self._emit("INFO", "transition", source=source, target=target)

    def log_failure(self, state: str, error: Exception) -> None:
        """Emit a failure event with the error type and provider failure kind only."""

        self._emit(
            "ERROR",
            "failure",
            state=state,
            error_type=type(error).__name__,
            failure_kind=getattr(error, "failure_kind", None),
            provider_status=getattr(error, "provider_status", None),
        )

    def log_cleanup(self, voice_id: str, mode: str, deleted: bool, detail: str | None) -> None:
        """Emit the outcome of a cloned-voice delete."""

        if deleted:
            self._emit("INFO", "cleanup", voice_id=voice_id, mode=mode, deleted="true")
            return
        self._emit(
            "WARNING",
            "cleanup",
            voice_id=voice_id,
            mode=mode,
            deleted="false",
            detail=detail,
        )
