"""Pydantic models describing the configurable attributes of a resource."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from .errors import ValidationError

FORCE_NEW = "force_new"
COMPUTED = "computed"


def attribute(default: Any = ..., *, force_new: bool = False, computed: bool = False, **kwargs: Any) -> Any:
    """Return a pydantic ``Field`` carrying lifecycle markers.

    ``force_new`` attributes cannot change in place. ``computed`` marks an
    optional attribute the provider fills in when the caller leaves it unset.
    """

    markers: Dict[str, Any] = {}
    if force_new:
        markers[FORCE_NEW] = True
    if computed:
        markers[COMPUTED] = True
    return Field(default, json_schema_extra=markers or None, **kwargs)


class ResourceConfig(BaseModel):
    """Base model for the attributes a caller may set on a resource."""

    model_config = {"extra": "forbid"}


def _markers(info: FieldInfo) -> Dict[str, Any]:
    extra = info.json_schema_extra
    return extra if isinstance(extra, dict) else {}


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}"


@dataclass(frozen=True)
class Schema:
    """Settable attributes (``config_model``) plus provider-only attribute names."""

    config_model: Type[ResourceConfig] = ResourceConfig
    computed: Tuple[str, ...] = ()

    def names(self) -> List[str]:
        return list(self.config_model.model_fields) + list(self.computed)

    def force_new_keys(self) -> List[str]:
        """Return attributes whose change requires replacing the resource."""

        return [
            name for name, info in self.config_model.model_fields.items() if _markers(info).get(FORCE_NEW)
        ]

    def _check(self, config: Mapping[str, Any]) -> Tuple[Optional[ResourceConfig], List[str]]:
        problems = [
            f"{key}: attribute is computed and cannot be set" for key in config if key in self.computed
        ]
        settable = {key: value for key, value in config.items() if key not in self.computed}
        try:
            model = self.config_model.model_validate(settable)
        except PydanticValidationError as exc:
            problems.extend(_format_error(error) for error in exc.errors())
            return None, problems
        return model, problems

    def problems(self, config: Mapping[str, Any]) -> List[str]:
        """Return every problem found in *config*."""

        return self._check(config)[1]

    def validate(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate *config* and return only the attributes the caller set.

        Raises :class:`ValidationError` listing every problem. Unset attributes
        are absent from the result; explicitly empty values are kept.
        """

        model, problems = self._check(config)
        if problems or model is None:
            raise ValidationError("invalid configuration: " + "; ".join(problems))
        return model.model_dump(exclude_unset=True)

    def changed_keys(self, config: Mapping[str, Any], state: Mapping[str, Any]) -> List[str]:
        """Return attributes whose configured value differs from *state*.

        Removing a plain optional attribute counts as a change. Attributes the
        provider computes are only compared when the caller sets them.
        """

        changed: List[str] = []
        for name, info in self.config_model.model_fields.items():
            if name in config:
                if config[name] != state.get(name):
                    changed.append(name)
            elif not _markers(info).get(COMPUTED) and state.get(name) not in (None, "", [], {}):
                changed.append(name)
        return changed


__all__ = ["COMPUTED", "FORCE_NEW", "ResourceConfig", "Schema", "attribute"]
