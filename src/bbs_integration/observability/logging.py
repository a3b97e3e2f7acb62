"""Structured logging configuration.

Provides JSON-formatted structured logging with contextual fields
(user_id, repository, request_id) via contextvars.
"""

import json
import logging
import sys
from contextvars import ContextVar, Token
from typing import List, Optional, Tuple

# Context variables for request-scoped logging fields
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
_repository: ContextVar[Optional[str]] = ContextVar("repository", default=None)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_log_context(
    user_id: Optional[str] = None,
    repository: Optional[str] = None,
    request_id: Optional[str] = None,
) -> List[Tuple[ContextVar, Token]]:
    """Set contextual logging fields for the current async context.

    Returns the tokens needed to restore the previous values with
    reset_log_context.
    """
    tokens = []
    if user_id is not None:
        tokens.append((_user_id, _user_id.set(user_id)))
    if repository is not None:
        tokens.append((_repository, _repository.set(repository)))
    if request_id is not None:
        tokens.append((_request_id, _request_id.set(request_id)))
    return tokens


def reset_log_context(tokens: List[Tuple[ContextVar, Token]]):
    """Restore the fields changed by a set_log_context call."""
    for var, token in reversed(tokens):
        var.reset(token)


def clear_log_context():
    """Clear all contextual logging fields."""
    _user_id.set(None)
    _repository.set(None)
    _request_id.set(None)


def _context_fields() -> dict:
    fields = {}
    user_id = _user_id.get()
    if user_id:
        fields["user_id"] = user_id
    repository = _repository.get()
    if repository:
        fields["repository"] = repository
    request_id = _request_id.get()
    if request_id:
        fields["request_id"] = request_id
    return fields


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter with context fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_context_fields())

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable log formatter with context fields for development."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"[{self.formatTime(record, self.datefmt)}]",
            f"{record.levelname:8s}",
            f"{record.name}:",
            record.getMessage(),
        ]

        ctx = _context_fields()
        if ctx:
            short = {"user_id": "user", "repository": "repo", "request_id": "req"}
            parts.append("[" + ", ".join(f"{short[k]}={v}" for k, v in ctx.items()) + "]")

        msg = " ".join(parts)

        if record.exc_info and record.exc_info[1]:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def configure_logging(environment: str = "development", log_level: str = "INFO"):
    """Configure logging for the process.

    Args:
        environment: "production" for JSON output, anything else for human-readable.
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter(
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger.addHandler(handler)

    # Quiet noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
