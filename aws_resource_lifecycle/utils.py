"""Shared helpers for resource handlers."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from botocore.exceptions import ClientError

from .context import OperationContext
from .errors import ImportFormatError, TransientRemoteError, error_code, error_message_contains

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_TIMEOUT_SECONDS = 300.0
DEFAULT_RETRY_INTERVAL_SECONDS = 2.0


def retry_when_message_contains(
    func: Callable[[], T],
    matches: Iterable[Tuple[str, str]],
    *,
    timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
    interval: float = DEFAULT_RETRY_INTERVAL_SECONDS,
    context: Optional[OperationContext] = None,
) -> T:
    """Call *func* until it succeeds or fails with a non-retryable error.

    *matches* lists ``(error_code, message_substring)`` pairs. A
    :class:`ClientError` matching any pair is retried every *interval*
    seconds until *timeout* seconds have passed, after which a
    :class:`TransientRemoteError` is raised. Any other error propagates
    immediately.
    """

    context = context or OperationContext()
    matches = list(matches)
    started = context.clock()
    attempt = 0
    while True:
        context.check()
        attempt += 1
        try:
            return func()
        except ClientError as exc:
            if not any(error_message_contains(exc, code, text) for code, text in matches):
                raise
            elapsed = context.clock() - started
            if elapsed >= timeout:
                raise TransientRemoteError(
                    f"still failing after {attempt} attempt(s) over {elapsed:.0f}s: {exc}",
                    code=error_code(exc),
                ) from exc
            logger.debug("Retrying after transient error (attempt %d): %s", attempt, exc)
            context.wait(min(interval, timeout - elapsed))


def split_import_id(external_id: str, arity: int, expected: str, delimiter: str = "/") -> List[str]:
    """Split *external_id* into exactly *arity* non-empty parts.

    Raises :class:`ImportFormatError` naming *expected* when the identifier
    has the wrong number of parts or any part is empty.
    """

    parts = external_id.split(delimiter)
    if len(parts) != arity or any(part == "" for part in parts):
        raise ImportFormatError(external_id, expected)
    return parts


def format_rfc3339(value: Optional[datetime]) -> str:
    """Format *value* as an RFC 3339 UTC timestamp; ``None`` becomes ``""``."""

    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


__all__ = [
    "DEFAULT_RETRY_INTERVAL_SECONDS",
    "DEFAULT_RETRY_TIMEOUT_SECONDS",
    "format_rfc3339",
    "retry_when_message_contains",
    "split_import_id",
]
