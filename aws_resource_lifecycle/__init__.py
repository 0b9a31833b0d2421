"""Declarative lifecycle management for individual AWS resources."""

from __future__ import annotations

from .config import ConfigurationError, ProviderConfig
from .context import OperationContext
from .core import DELETED, converge, delete, import_resource, reconcile
from .errors import (
    EmptyResultError,
    ImportFormatError,
    NotFoundError,
    OperationCancelled,
    OperationFailed,
    RemoteError,
    ResourceLifecycleError,
    TransientRemoteError,
    ValidationError,
)
from .resource import Identity, Phase, ResourceData
from .resources import RESOURCE_HANDLERS, ResourceHandler, build_handler

__all__ = [
    "ConfigurationError",
    "DELETED",
    "EmptyResultError",
    "Identity",
    "ImportFormatError",
    "NotFoundError",
    "OperationCancelled",
    "OperationContext",
    "OperationFailed",
    "Phase",
    "ProviderConfig",
    "RESOURCE_HANDLERS",
    "RemoteError",
    "ResourceData",
    "ResourceHandler",
    "ResourceLifecycleError",
    "TransientRemoteError",
    "ValidationError",
    "build_handler",
    "converge",
    "delete",
    "import_resource",
    "reconcile",
]
