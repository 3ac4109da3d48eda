"""Structured logging for Civic Ledger.

Every entry passes through ``secret_sanitizer`` before rendering, so Pinata
JWTs, labelled wallet keys and keyed RPC URLs never reach a sink. Values
logged under secret-named keys (``jwt``, ``private_key``) are masked whole.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import structlog

from civic_ledger.utils.security import SecretRedactor, is_sensitive_key

if TYPE_CHECKING:
    from civic_ledger.config.schema import LoggingConfig


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Global redactor instance for log sanitization
_redactor: SecretRedactor | None = None


def _get_redactor() -> SecretRedactor:
    """Get or create the global secret redactor."""
    global _redactor
    if _redactor is None:
        _redactor = SecretRedactor(placeholder="[REDACTED]")
    return _redactor


def sanitize_log_value(value: Any) -> Any:
    """Recursively sanitize secrets from log values.

    Dictionary entries whose key names a secret are masked outright.

    Args:
        value: Value to sanitize (can be nested dict/list/str)

    Returns:
        Sanitized value with secrets redacted
    """
    redactor = _get_redactor()

    if isinstance(value, str):
        return redactor.redact(value)
    elif isinstance(value, dict):
        return {
            k: redactor.placeholder
            if isinstance(k, str) and is_sensitive_key(k) and v
            else sanitize_log_value(v)
            for k, v in value.items()
        }
    elif isinstance(value, (list, tuple)):
        return type(value)(sanitize_log_value(v) for v in value)
    else:
        return value


def secret_sanitizer(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor to sanitize secrets from log entries."""
    result = sanitize_log_value(dict(event_dict))
    return cast(MutableMapping[str, Any], result)


def add_context_processor(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add service name and version to all log entries."""
    event_dict["service"] = "civic-ledger"

    try:
        from civic_ledger._version import __version__

        event_dict["version"] = __version__
    except (ImportError, RuntimeError):
        pass

    return event_dict


# Third-party loggers that echo RPC payloads or request lines at INFO
NOISY_LOGGERS = ("web3", "httpx", "httpcore", "uvicorn.access")


def _build_processors(log_format: LogFormat) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        # After format_exc_info so tracebacks are already strings
        secret_sanitizer,
    ]
    if log_format == LogFormat.JSON:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def _build_handlers(file_path: Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path is None:
        return handlers
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path))
    except OSError as e:
        logging.getLogger("civic_ledger.logging").warning(
            "Could not open log file %s, logging to stderr only: %s", file_path, e
        )
    return handlers


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.JSON,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structlog and the stdlib root logger.

    Output goes to stderr so that ``civic-ledger list`` keeps stdout for JSON.
    Web3 and HTTP client loggers are held at WARNING unless ``level`` is DEBUG.

    Args:
        level: Log level name or enum.
        log_format: ``json`` for aggregation, ``console`` for development.
        file_path: Optional log file, used when ``file_enabled`` is set.
        file_enabled: Whether to also write to ``file_path``.
    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format
    numeric_level = logging.getLevelName(level.value)

    structlog.configure(
        processors=_build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    target = Path(file_path) if file_enabled and file_path else None
    handlers = _build_handlers(target)
    for handler in handlers:
        handler.setLevel(numeric_level)
    logging.basicConfig(format="%(message)s", level=numeric_level, handlers=handlers, force=True)

    noisy_level = logging.DEBUG if level == LogLevel.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def configure_from_config(config: LoggingConfig) -> None:
    """Apply the ``logging`` section of the configuration file."""
    configure_logging(
        level=config.level,
        log_format=config.format,
        file_path=config.file.path,
        file_enabled=config.file.enabled,
    )


def bind_context(**kwargs: Any) -> None:
    """Bind contextual variables for all subsequent log calls.

    Example:
        bind_context(chain_id=11155111, account="0xabc...")
        log.info("listing_issues")  # Includes chain_id and account
    """
    structlog.contextvars.bind_contextvars(**kwargs)


class LogEventNames:
    """Standard log event names for consistency."""

    # Reads
    ISSUE_COUNT_READ = "issue_count_read"
    ISSUES_LISTED = "issues_listed"
    FUNDING_FETCH_FAILED = "funding_fetch_failed"

    # Actions
    ISSUE_REPORTED = "issue_reported"
    STATUS_UPDATED = "status_updated"
    ISSUE_CONFIRMED = "issue_confirmed"
    ISSUE_FUNDED = "issue_funded"
    FUNDS_WITHDRAWN = "funds_withdrawn"
    TRANSACTION_REJECTED = "transaction_rejected"
    ACTION_BLOCKED = "action_blocked"

    # Mirror
    MIRROR_UPLOADED = "mirror_uploaded"
    MIRROR_FAILED = "mirror_failed"

    # Chain
    CHAIN_CALL_FAILED = "chain_call_failed"
    CONTRACT_NOT_DEPLOYED = "contract_not_deployed"
