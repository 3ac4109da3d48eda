"""Secret redaction and input validation.

Redaction is fail-closed: a pattern that cannot be compiled or applied
raises ``RedactionError`` instead of passing text through unredacted.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


# 0x followed by exactly 40 hex digits; checksum casing is not verified here
ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Structured log keys whose values are always masked
SENSITIVE_KEYS = frozenset({"jwt", "private_key", "api_key", "secret", "password", "token"})


class RedactionRule(NamedTuple):
    """A named secret pattern."""

    name: str
    pattern: re.Pattern[str]


# (regex, name). Bare 64-hex strings are also transaction hashes, so wallet
# keys are only matched when labelled.
DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", "JWT"),
    (r"(?i)bearer\s+[\w.-]{16,}", "Bearer token"),
    (r"(?i)private[_-]?key\s*[=:]\s*[\"']?(?:0x)?[0-9a-f]{64}", "Labelled private key"),
    (r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----", "PEM private key"),
    (r"(?i)(infura\.io/v3/|alchemy\.com/v2/)[a-zA-Z0-9_-]{16,}", "RPC provider key"),
    (
        r"(?i)(api[_-]?key|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
        "Generic secret",
    ),
)


def _compile(patterns: Sequence[tuple[str, str]]) -> tuple[RedactionRule, ...]:
    rules = []
    for source, name in patterns:
        try:
            rules.append(RedactionRule(name, re.compile(source)))
        except re.error as e:
            log.error("pattern_compilation_failed", rule=name, error=str(e))
            raise RedactionError(f"Failed to compile secret pattern {name!r}: {e}") from e
    return tuple(rules)


class SecretRedactor:
    """Finds and replaces chain and storage credentials in text.

    Example:
        redactor = SecretRedactor()
        redactor.redact("Authorization: Bearer eyJ...")  # "Authorization: [REDACTED]"
    """

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        """Compile the default patterns plus any ``(regex, name)`` extras.

        Raises:
            RedactionError: If a pattern does not compile.
        """
        self.placeholder = placeholder
        self._rules = _compile([*DEFAULT_PATTERNS, *(custom_patterns or ())])

    def redact(self, text: str) -> str:
        """Return ``text`` with every match replaced by the placeholder.

        Raises:
            RedactionError: If a substitution fails.
        """
        if not text:
            return text
        for rule in self._rules:
            try:
                text = rule.pattern.sub(self.placeholder, text)
            except Exception as e:
                log.error("redaction_failed", rule=rule.name, error=str(e))
                raise RedactionError(f"Redaction failed for {rule.name}: {e}") from e
        return text


def validate_address_format(address: str) -> bool:
    """Validate that a string looks like an EVM address.

    Args:
        address: Candidate address.

    Returns:
        True if it is ``0x`` followed by 40 hex digits.
    """
    if not address:
        return False
    return bool(ADDRESS_PATTERN.match(address))


def is_sensitive_key(key: str) -> bool:
    """Return True if a config or log key names a secret."""
    key_lower = key.lower()
    return any(s in key_lower for s in SENSITIVE_KEYS)

