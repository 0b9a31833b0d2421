"""Data models describing a managed resource instance."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class Phase(str, Enum):
    """Where a read happens in the resource lifecycle.

    A resource missing during ``CREATING`` means the write silently failed;
    missing during ``STEADY_STATE`` means it was deleted out of band.
    """

    CREATING = "creating"
    STEADY_STATE = "steady_state"


@dataclass(frozen=True)
class Identity:
    """Stable key identifying a resource to the provider."""

    name: str
    parent: Optional[str] = None

    def __str__(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent}/{self.name}"


@dataclass
class ResourceData:
    """Desired configuration and last known remote state for one resource.

    ``config`` only holds attributes the caller set: a missing key is unset,
    a key with an empty value is explicitly empty. ``changed`` lists the
    attributes the orchestrator considers changed since the last read.
    """

    config: Dict[str, Any] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)
    id: str = ""
    changed: FrozenSet[str] = frozenset()

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Return the configured value for *key* and whether it was set."""

        if key in self.config and self.config[key] is not None:
            return self.config[key], True
        return None, False

    def value(self, key: str, default: Any = None) -> Any:
        """Return the configured value for *key*, falling back to state."""

        value, ok = self.get_ok(key)
        if ok:
            return value
        return self.state.get(key, default)

    def has_change(self, key: str) -> bool:
        return key in self.changed

    def clear(self) -> None:
        """Forget the remote resource."""

        self.id = ""
        self.state = {}


__all__ = ["Identity", "Phase", "ResourceData"]
