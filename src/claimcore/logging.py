"""Logging utilities for the claim engine.

This module provides:
- Logging configuration from ClaimCoreConfig
- Safe preview utilities for log values
- Structured logging with claim and subject identity
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from .config import ClaimCoreConfig, LogLevel

if TYPE_CHECKING:
    from .claims.claim import Claim
    from .interfaces import Subject


# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "claim_id", "subject_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple, set, frozenset)):
        try:
            s = json.dumps(value if isinstance(value, (dict, list)) else sorted(value, key=str), default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"
    return s


def safe_log_value(value: Any, limit: int = 240) -> str:
    """Preview suitable for a log field.

    Enum members log as their value, UUIDs in canonical form.
    """
    if isinstance(value, Enum):
        value = value.value
    elif isinstance(value, UUID):
        value = str(value)
    return safe_preview(value, limit=limit)


class ClaimLogFormatter(logging.Formatter):
    """Formatter adding ``claim_id``/``subject_id`` to every record.

    Output is one JSON object per line, or plain text when
    ``json_format`` is False. Extra fields are safe-previewed.
    """

    def __init__(self, json_format: bool = True, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        claim_id = getattr(record, "claim_id", None)
        subject_id = getattr(record, "subject_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if claim_id:
            log_data["claim_id"] = safe_log_value(claim_id)
        if subject_id:
            log_data["subject_id"] = safe_log_value(subject_id)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = safe_log_value(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        if claim_id:
            parts.append(f"claim_id={log_data['claim_id']}")
        if subject_id:
            parts.append(f"subject_id={log_data['subject_id']}")
        parts.append(f": {log_data['message']}")
        text = " ".join(parts)
        if "exception" in log_data:
            text = f"{text}\n{log_data['exception']}"
        return text


class ClaimLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds claim and subject identity to log records.

    Usage:
        logger = get_claim_logger(__name__)
        logger.info("Flag toggled", claim=claim, subject=subject)
    """

    def __init__(
        self,
        logger: logging.Logger,
        claim_id: Optional[UUID | str] = None,
        subject_id: Optional[UUID | str] = None,
    ):
        super().__init__(logger, {})
        self.claim_id = claim_id
        self.subject_id = subject_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        claim_id = kwargs.pop("claim_id", self.claim_id)
        subject_id = kwargs.pop("subject_id", self.subject_id)

        claim: Optional[Claim] = kwargs.pop("claim", None)
        if claim is not None:
            claim_id = claim_id or claim.id
        subject: Optional[Subject] = kwargs.pop("subject", None)
        if subject is not None:
            subject_id = subject_id or subject.unique_id or subject.name

        extra = dict(kwargs.get("extra") or {})
        if claim_id:
            extra["claim_id"] = claim_id
        if subject_id:
            extra["subject_id"] = subject_id
        kwargs["extra"] = extra

        return msg, kwargs


_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


def setup_logging(config: Optional[ClaimCoreConfig] = None, json_format: Optional[bool] = None) -> None:
    """Configure the root logger for the claim engine.

    Args:
        config: ClaimCoreConfig instance (if None, loads from environment)
        json_format: Overrides ``config.log_json`` when given
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()
    if json_format is None:
        json_format = config.log_json

    log_level = _LEVELS.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ClaimLogFormatter(json_format=json_format))
    root_logger.addHandler(console_handler)


def get_claim_logger(
    name: str,
    claim_id: Optional[UUID | str] = None,
    subject_id: Optional[UUID | str] = None,
) -> ClaimLoggerAdapter:
    """Get a logger adapter carrying claim/subject identity.

    Example:
        logger = get_claim_logger(__name__)
        logger.info("Transferred claim", claim=claim)
    """
    return ClaimLoggerAdapter(logging.getLogger(name), claim_id=claim_id, subject_id=subject_id)


__all__ = [
    "ClaimLogFormatter",
    "ClaimLoggerAdapter",
    "get_claim_logger",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
]
