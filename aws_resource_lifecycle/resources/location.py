"""Handler for Amazon Location Service maps."""
from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, FrozenSet, List, Mapping, Optional

from botocore.exceptions import ClientError
from pydantic import Field, StrictStr

from ..context import OperationContext
from ..errors import EmptyResultError, NotFoundError, error_code_equals
from ..resource import Identity, ResourceData
from ..schema import ResourceConfig, Schema, attribute
from ..tags import ignore_aws, merge_default_tags, partition_tags, plan_tag_update
from ..utils import format_rfc3339, split_import_id
from . import ResourceHandler, register_resource

logger = logging.getLogger(__name__)

ERR_CODE_RESOURCE_NOT_FOUND = "ResourceNotFoundException"


class MapConfiguration(ResourceConfig):
    style: StrictStr = attribute(force_new=True, min_length=1, max_length=100)


class MapConfig(ResourceConfig):
    """Attributes a caller may set on a map."""

    configuration: List[MapConfiguration] = attribute(force_new=True, min_length=1, max_length=1)
    description: Optional[Annotated[StrictStr, Field(max_length=1000)]] = None
    map_name: StrictStr = attribute(force_new=True, min_length=1, max_length=100)
    tags: Optional[Dict[StrictStr, StrictStr]] = None


MAP_SCHEMA = Schema(
    config_model=MapConfig,
    computed=("create_time", "map_arn", "tags_all", "update_time"),
)


def expand_configuration(block: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if block is None:
        return None

    api_object: Dict[str, Any] = {}
    style = block.get("style")
    if isinstance(style, str) and style:
        api_object["Style"] = style
    return api_object


def flatten_configuration(api_object: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if api_object is None:
        return None

    block: Dict[str, Any] = {}
    if api_object.get("Style") is not None:
        block["style"] = api_object["Style"]
    return block


@register_resource("aws_location_map")
class MapHandler(ResourceHandler):
    """Location Service maps use distinct create and update calls.

    The map name is both the caller-supplied key and the identity the
    provider returns from ``CreateMap``. Only the description and tags can
    change in place.
    """

    display_name = "Location Service Map"
    service_name = "location"
    schema = MAP_SCHEMA
    import_format = "<map-name>"

    def identity(self, data: ResourceData) -> Identity:
        return Identity(name=data.id or data.value("map_name", ""))

    def desired_tags(self, data: ResourceData) -> Dict[str, str]:
        """Return configured tags merged over the provider default tags."""

        return merge_default_tags(self.config.default_tags, data.value("tags") or {})

    def plan_changes(self, data: ResourceData) -> FrozenSet[str]:
        changed = set(super().plan_changes(data))
        if self.desired_tags(data) != (data.state.get("tags_all") or {}):
            changed.add("tags_all")
        return frozenset(changed)

    def create(self, data: ResourceData, context: OperationContext) -> str:
        params: Dict[str, Any] = {}

        blocks, ok = data.get_ok("configuration")
        if ok and blocks and blocks[0] is not None:
            params["Configuration"] = expand_configuration(blocks[0])

        description, ok = data.get_ok("description")
        if ok:
            params["Description"] = description

        map_name, ok = data.get_ok("map_name")
        if ok:
            params["MapName"] = map_name

        tags = ignore_aws(self.desired_tags(data))
        if tags:
            params["Tags"] = tags

        context.check()
        logger.info("Creating Location Service Map: %s", params.get("MapName"))
        output = self.client.create_map(**params)
        if not output:
            raise EmptyResultError("creating map: empty result")
        return output["MapName"]

    def update(self, data: ResourceData, context: OperationContext) -> None:
        if data.has_change("description"):
            params: Dict[str, Any] = {"MapName": data.id}
            description, ok = data.get_ok("description")
            if ok:
                params["Description"] = description
            context.check()
            logger.info("Updating Location Service Map: %s", data.id)
            self.client.update_map(**params)

        if data.has_change("tags") or data.has_change("tags_all"):
            context.check()
            self.update_tags(
                data.state.get("map_arn", ""),
                data.state.get("tags_all") or {},
                self.desired_tags(data),
            )

    def update_tags(self, arn: str, old: Mapping[str, str], new: Mapping[str, str]) -> None:
        """Apply the difference between *old* and *new* tags to *arn*."""

        removed, updated = plan_tag_update(old, new)
        if removed:
            logger.debug("Removing tags %s from %s", removed, arn)
            self.client.untag_resource(ResourceArn=arn, TagKeys=removed)
        if updated:
            logger.debug("Setting tags %s on %s", sorted(updated), arn)
            self.client.tag_resource(ResourceArn=arn, Tags=updated)

    def find(self, data: ResourceData) -> Mapping[str, Any]:
        try:
            output = self.client.describe_map(MapName=data.id)
        except ClientError as exc:
            if error_code_equals(exc, ERR_CODE_RESOURCE_NOT_FOUND):
                raise NotFoundError(str(exc), code=ERR_CODE_RESOURCE_NOT_FOUND) from exc
            raise

        if not output:
            raise EmptyResultError(f"empty response describing map {data.id!r}")
        return output

    def flatten(self, remote: Mapping[str, Any]) -> Dict[str, Any]:
        configuration: List[Dict[str, Any]] = []
        if remote.get("Configuration") is not None:
            configuration = [flatten_configuration(remote["Configuration"])]

        tags, tags_all = partition_tags(
            remote.get("Tags"), self.config.default_tags, self.config.ignore_tags
        )
        return {
            "configuration": configuration,
            "create_time": format_rfc3339(remote.get("CreateTime")),
            "description": remote.get("Description"),
            "map_arn": remote.get("MapArn"),
            "map_name": remote.get("MapName"),
            "tags": tags,
            "tags_all": tags_all,
            "update_time": format_rfc3339(remote.get("UpdateTime")),
        }

    def delete(self, data: ResourceData) -> None:
        logger.info("Deleting Location Service Map: %s", data.id)
        self.client.delete_map(MapName=data.id)

    def is_not_found(self, exc: ClientError) -> bool:
        return error_code_equals(exc, ERR_CODE_RESOURCE_NOT_FOUND)

    def import_id(self, data: ResourceData, external_id: str) -> None:
        (map_name,) = split_import_id(external_id, 1, self.import_format)
        data.state["map_name"] = map_name
        data.id = map_name


__all__ = [
    "MAP_SCHEMA",
    "MapConfig",
    "MapConfiguration",
    "MapHandler",
    "expand_configuration",
    "flatten_configuration",
]
