"""Exception types raised by resource lifecycle operations."""
from __future__ import annotations

from typing import Optional

from botocore.exceptions import ClientError


class ResourceLifecycleError(Exception):
    """Base class for every error raised by this package."""


class RemoteError(ResourceLifecycleError):
    """An error reported by the AWS API."""

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class NotFoundError(RemoteError):
    """The remote resource does not exist."""


class EmptyResultError(NotFoundError):
    """The API call succeeded but returned no matching entity."""


class ValidationError(RemoteError):
    """A request was malformed, either locally or according to the API."""


class TransientRemoteError(RemoteError):
    """A retryable error that persisted past its retry window."""


class ImportFormatError(ResourceLifecycleError):
    """An external identifier does not match the expected pattern."""

    def __init__(self, external_id: str, expected: str) -> None:
        super().__init__(f"unexpected format ({external_id!r}), expected {expected}")
        self.external_id = external_id
        self.expected = expected


class OperationCancelled(ResourceLifecycleError):
    """The operation context was cancelled or its deadline passed."""


class OperationFailed(ResourceLifecycleError):
    """A lifecycle operation failed.

    The message carries the operation verb, the resource kind and identity so
    callers can report it without further context. ``cause`` holds the
    translated underlying error.
    """

    def __init__(self, operation: str, resource: str, identity: str, cause: Exception) -> None:
        super().__init__(f"{operation} {resource} ({identity}): {cause}")
        self.operation = operation
        self.resource = resource
        self.identity = identity
        self.cause = cause


def error_code(exc: BaseException) -> str:
    """Return the AWS error code carried by *exc* or an empty string."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "") or ""
    return ""


def error_message(exc: BaseException) -> str:
    """Return the AWS error message carried by *exc*."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message", "") or ""
    return str(exc)


def error_code_equals(exc: BaseException, *codes: str) -> bool:
    """Return ``True`` when *exc* is a client error with one of *codes*."""

    return bool(codes) and error_code(exc) in codes


def error_message_contains(exc: BaseException, code: str, substring: str) -> bool:
    """Return ``True`` when *exc* has error *code* and its message contains *substring*."""

    return error_code(exc) == code and substring in error_message(exc)


def translate_client_error(exc: ClientError) -> RemoteError:
    """Map a botocore :class:`ClientError` onto the package error types."""

    code = error_code(exc)
    message = str(exc)
    if code in {"ValidationError", "ValidationException"}:
        return ValidationError(message, code=code)
    if code in {"ResourceNotFoundException", "NotFound", "NoSuchEntity"}:
        return NotFoundError(message, code=code)
    return RemoteError(message, code=code)


__all__ = [
    "EmptyResultError",
    "ImportFormatError",
    "NotFoundError",
    "OperationCancelled",
    "OperationFailed",
    "RemoteError",
    "ResourceLifecycleError",
    "TransientRemoteError",
    "ValidationError",
    "error_code",
    "error_code_equals",
    "error_message",
    "error_message_contains",
    "translate_client_error",
]
