"""Lifecycle operations shared by every resource handler.

An orchestrator drives one resource instance through four operations:

* :func:`converge` creates or updates the resource, then re-reads it.
* :func:`reconcile` refreshes local state from the provider and reports
  out-of-band deletion with :data:`DELETED`.
* :func:`delete` removes the resource, treating "already gone" as success.
* :func:`import_resource` adopts an existing resource from an external id.

Remote failures surface as :class:`OperationFailed` naming the operation and
the resource identity.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, NoReturn, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from .context import OperationContext
from .errors import (
    NotFoundError,
    OperationFailed,
    RemoteError,
    translate_client_error,
)
from .resource import Identity, Phase, ResourceData
from .resources import ResourceHandler

logger = logging.getLogger(__name__)


class _Deleted:
    """Marker returned by :func:`reconcile` when the resource no longer exists."""

    def __repr__(self) -> str:
        return "DELETED"


DELETED = _Deleted()

ReadResult = Union[Dict[str, Any], _Deleted]


def _fail(operation: str, handler: ResourceHandler, data: ResourceData, exc: Exception) -> NoReturn:
    cause: Exception = exc
    if isinstance(exc, ClientError):
        cause = translate_client_error(exc)
    raise OperationFailed(operation, handler.display_name, str(handler.identity(data)), cause) from exc


def converge(
    handler: ResourceHandler,
    data: ResourceData,
    context: Optional[OperationContext] = None,
) -> Identity:
    """Make the remote resource match ``data.config``.

    A resource without an id is created; otherwise it is updated using the
    attributes listed in ``data.changed``. The identity is stored on *data*
    as soon as the write succeeds, then the resource is re-read so that
    ``data.state`` reflects the provider rather than the request.
    """

    context = context or OperationContext()
    data.config = handler.schema.validate(data.config)

    creating = not data.id
    operation = handler.create_verb if creating else handler.update_verb
    try:
        if creating:
            resource_id = handler.create(data, context)
        else:
            handler.update(data, context)
            resource_id = data.id
    except (ClientError, BotoCoreError, RemoteError) as exc:
        _fail(operation, handler, data, exc)

    data.id = resource_id
    logger.info("%s %s (%s) succeeded", operation.capitalize(), handler.display_name, handler.identity(data))

    reconcile(handler, data, Phase.CREATING if creating else Phase.STEADY_STATE, context)
    return handler.identity(data)


def reconcile(
    handler: ResourceHandler,
    data: ResourceData,
    phase: Phase = Phase.STEADY_STATE,
    context: Optional[OperationContext] = None,
) -> ReadResult:
    """Refresh ``data.state`` from the provider.

    Returns the new state, or :data:`DELETED` after clearing *data* when the
    resource is gone in the ``STEADY_STATE`` phase. A missing resource in the
    ``CREATING`` phase raises :class:`OperationFailed`.
    """

    context = context or OperationContext()
    context.check()
    try:
        remote = handler.find(data)
    except NotFoundError as exc:
        if phase is Phase.STEADY_STATE:
            logger.warning(
                "%s %s not found, removing from state", handler.display_name, handler.identity(data)
            )
            data.clear()
            return DELETED
        _fail("reading", handler, data, exc)
    except (ClientError, BotoCoreError, RemoteError) as exc:
        _fail("reading", handler, data, exc)

    data.state = handler.flatten(remote)
    return data.state


def delete(
    handler: ResourceHandler,
    data: ResourceData,
    context: Optional[OperationContext] = None,
) -> None:
    """Delete the remote resource and clear *data*.

    A not-found response counts as success; every other failure is raised.
    """

    context = context or OperationContext()
    context.check()
    try:
        handler.delete(data)
    except ClientError as exc:
        if not handler.is_not_found(exc):
            _fail("deleting", handler, data, exc)
        logger.info("%s %s already deleted", handler.display_name, handler.identity(data))
    except BotoCoreError as exc:
        _fail("deleting", handler, data, exc)
    data.clear()


def import_resource(handler: ResourceHandler, data: ResourceData, external_id: str) -> Identity:
    """Populate the identity of *data* from *external_id*.

    The provider is not contacted; callers reconcile afterwards to confirm the
    resource exists.
    """

    handler.import_id(data, external_id)
    identity = handler.identity(data)
    logger.info("Imported %s %s", handler.display_name, identity)
    return identity


__all__ = [
    "DELETED",
    "ReadResult",
    "converge",
    "delete",
    "import_resource",
    "reconcile",
]
