"""Resource handlers and registry helpers."""
from __future__ import annotations

import importlib
import pkgutil
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Type

import boto3
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from ..config import ProviderConfig
from ..context import OperationContext
from ..resource import Identity, ResourceData
from ..schema import Schema


class ResourceHandler:
    """Maps one resource type onto calls against its AWS API.

    Subclasses describe their attributes with :attr:`schema` and implement the
    remote calls; :mod:`aws_resource_lifecycle.core` drives them through the
    converge, reconcile, delete and import operations.
    """

    type_name: str = ""
    display_name: str = ""
    service_name: str = ""
    schema: Schema = Schema()
    import_format: str = ""
    create_verb = "creating"
    update_verb = "updating"

    def __init__(self, client: BaseClient, config: Optional[ProviderConfig] = None) -> None:
        self.client = client
        self.config = config or ProviderConfig()

    @classmethod
    def from_session(
        cls, session: boto3.session.Session, config: Optional[ProviderConfig] = None
    ) -> "ResourceHandler":
        return cls(session.client(cls.service_name), config)

    def identity(self, data: ResourceData) -> Identity:
        raise NotImplementedError

    def plan_changes(self, data: ResourceData) -> FrozenSet[str]:
        """Return the attributes of *data* that differ from its last read state.

        Orchestrators call this to fill :attr:`ResourceData.changed`; the
        lifecycle operations never recompute it.
        """

        return frozenset(self.schema.changed_keys(data.config, data.state))

    def requires_replacement(self, changed: Iterable[str]) -> bool:
        """Return ``True`` when any of *changed* is a force-new attribute."""

        force_new = set(self.schema.force_new_keys())
        return any(key in force_new for key in changed)

    def create(self, data: ResourceData, context: OperationContext) -> str:
        """Create the resource and return the identity value to store."""

        raise NotImplementedError

    def update(self, data: ResourceData, context: OperationContext) -> None:
        raise NotImplementedError

    def find(self, data: ResourceData) -> Mapping[str, Any]:
        """Return the remote object or raise :class:`NotFoundError`."""

        raise NotImplementedError

    def flatten(self, remote: Mapping[str, Any]) -> Dict[str, Any]:
        """Map a remote object onto local state attributes."""

        raise NotImplementedError

    def delete(self, data: ResourceData) -> None:
        raise NotImplementedError

    def is_not_found(self, exc: ClientError) -> bool:
        raise NotImplementedError

    def import_id(self, data: ResourceData, external_id: str) -> None:
        """Populate identity attributes of *data* from *external_id*."""

        raise NotImplementedError


HandlerFactory = Type[ResourceHandler]


class ResourceRegistry:
    """Registry that stores available resource handler classes."""

    def __init__(self) -> None:
        self._handlers: Dict[str, HandlerFactory] = {}

    @staticmethod
    def _normalize(name: str) -> str:
        if not name:
            raise ValueError("Resource type must be a non-empty string")
        return name.strip().lower()

    def register(self, name: str) -> Callable[[HandlerFactory], HandlerFactory]:
        """Return a decorator that registers *name* for the wrapped handler class."""

        normalized = self._normalize(name)

        def decorator(cls: HandlerFactory) -> HandlerFactory:
            if normalized in self._handlers and self._handlers[normalized] is not cls:
                raise ValueError(f"Resource type '{name}' is already registered")
            cls.type_name = normalized
            self._handlers[normalized] = cls
            return cls

        return decorator

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self._normalize(name) in self._handlers

    def __getitem__(self, name: str) -> HandlerFactory:
        return self._handlers[self._normalize(name)]

    def keys(self) -> Iterator[str]:
        return iter(self._handlers)

    def as_mapping(self) -> Mapping[str, HandlerFactory]:
        return MappingProxyType(self._handlers)


RESOURCE_REGISTRY = ResourceRegistry()
register_resource = RESOURCE_REGISTRY.register


def get_resource_handlers() -> Mapping[str, HandlerFactory]:
    """Return a read-only mapping of registered handler classes."""

    return RESOURCE_REGISTRY.as_mapping()


def build_handler(
    type_name: str, session: boto3.session.Session, config: Optional[ProviderConfig] = None
) -> ResourceHandler:
    """Instantiate the handler registered for *type_name*."""

    if type_name not in RESOURCE_REGISTRY:
        valid = ", ".join(sorted(RESOURCE_REGISTRY.keys()))
        raise ValueError(f"Unknown resource type '{type_name}'. Valid types: {valid}")
    return RESOURCE_REGISTRY[type_name].from_session(session, config)


def _import_resource_modules() -> None:
    """Import modules that register handlers via decorators."""

    package_name = __name__
    package_paths = getattr(__spec__, "submodule_search_locations", None)
    if not package_paths:
        return

    for module_info in pkgutil.iter_modules(package_paths):
        module_name = module_info.name
        if module_name.startswith("_"):
            continue
        importlib.import_module(f"{package_name}.{module_name}")


_import_resource_modules()

RESOURCE_HANDLERS: Mapping[str, HandlerFactory] = get_resource_handlers()

__all__ = [
    "RESOURCE_HANDLERS",
    "RESOURCE_REGISTRY",
    "ResourceHandler",
    "ResourceRegistry",
    "build_handler",
    "get_resource_handlers",
    "register_resource",
]
