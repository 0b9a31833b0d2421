"""Handler for Auto Scaling group lifecycle hooks."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import ClientError
from pydantic import StrictInt, StrictStr

from ..context import OperationContext
from ..errors import EmptyResultError, NotFoundError, error_message_contains
from ..resource import Identity, ResourceData
from ..schema import ResourceConfig, Schema, attribute
from ..utils import retry_when_message_contains, split_import_id
from . import ResourceHandler, register_resource

logger = logging.getLogger(__name__)

ERR_CODE_VALIDATION_ERROR = "ValidationError"

# PutLifecycleHook publishes a test message to the notification target, which
# fails until a freshly created topic or queue (and its IAM role) propagates.
PUT_TRANSIENT_ERRORS = (
    (ERR_CODE_VALIDATION_ERROR, "Unable to publish test message to notification target"),
)


class LifecycleHookConfig(ResourceConfig):
    """Attributes a caller may set on a lifecycle hook."""

    # A hook cannot move between groups; changing the group replaces it.
    autoscaling_group_name: StrictStr = attribute(force_new=True)
    default_result: Optional[StrictStr] = attribute(None, computed=True)
    heartbeat_timeout: Optional[StrictInt] = None
    lifecycle_transition: StrictStr
    name: StrictStr = attribute(force_new=True)
    notification_metadata: Optional[StrictStr] = None
    notification_target_arn: Optional[StrictStr] = None
    role_arn: Optional[StrictStr] = None


LIFECYCLE_HOOK_SCHEMA = Schema(config_model=LifecycleHookConfig, computed=("global_timeout",))

# Optional attributes copied into PutLifecycleHook only when set.
_PUT_PARAMETERS = (
    ("default_result", "DefaultResult"),
    ("heartbeat_timeout", "HeartbeatTimeout"),
    ("lifecycle_transition", "LifecycleTransition"),
    ("notification_metadata", "NotificationMetadata"),
    ("notification_target_arn", "NotificationTargetARN"),
    ("role_arn", "RoleARN"),
)


def _is_not_found(exc: ClientError) -> bool:
    return error_message_contains(exc, ERR_CODE_VALIDATION_ERROR, "not found")


def _group_name(data: ResourceData) -> Optional[str]:
    """Return the group that holds the hook.

    Once the hook exists it lives in the group recorded in state, even when
    the configuration now names another one.
    """

    if data.id and data.state.get("autoscaling_group_name"):
        return data.state["autoscaling_group_name"]
    return data.value("autoscaling_group_name")


@register_resource("aws_autoscaling_lifecycle_hook")
class LifecycleHookHandler(ResourceHandler):
    """Lifecycle hooks are written with a single idempotent put call.

    The hook name is the local identity; the owning Auto Scaling group is
    kept alongside it in state and forms the parent of the composite import
    identifier ``<asg-name>/<lifecycle-hook-name>``.
    """

    display_name = "Auto Scaling Lifecycle Hook"
    service_name = "autoscaling"
    schema = LIFECYCLE_HOOK_SCHEMA
    import_format = "<asg-name>/<lifecycle-hook-name>"
    create_verb = "putting"
    update_verb = "putting"

    def identity(self, data: ResourceData) -> Identity:
        return Identity(
            name=data.id or data.value("name", ""),
            parent=_group_name(data) or None,
        )

    def put_input(self, data: ResourceData) -> Dict[str, Any]:
        """Build PutLifecycleHook parameters from the configured attributes."""

        params: Dict[str, Any] = {
            "AutoScalingGroupName": data.value("autoscaling_group_name"),
            "LifecycleHookName": data.value("name"),
        }
        for key, parameter in _PUT_PARAMETERS:
            value, ok = data.get_ok(key)
            if ok:
                params[parameter] = value
        return params

    def _put(self, data: ResourceData, context: OperationContext) -> str:
        params = self.put_input(data)
        logger.info("Putting Auto Scaling Lifecycle Hook: %s", params)
        retry_when_message_contains(
            lambda: self.client.put_lifecycle_hook(**params),
            PUT_TRANSIENT_ERRORS,
            timeout=self.config.put_retry_timeout_seconds,
            interval=self.config.retry_interval_seconds,
            context=context,
        )
        return params["LifecycleHookName"]

    def create(self, data: ResourceData, context: OperationContext) -> str:
        return self._put(data, context)

    def update(self, data: ResourceData, context: OperationContext) -> None:
        self._put(data, context)

    def find(self, data: ResourceData) -> Mapping[str, Any]:
        hook_name = data.id
        params = {
            "AutoScalingGroupName": _group_name(data),
            "LifecycleHookNames": [hook_name],
        }
        try:
            output = self.client.describe_lifecycle_hooks(**params)
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(str(exc), code=ERR_CODE_VALIDATION_ERROR) from exc
            raise

        if not output:
            raise EmptyResultError(f"empty result for {params}")

        for hook in output.get("LifecycleHooks", []):
            if hook.get("LifecycleHookName") == hook_name:
                return hook

        raise NotFoundError(f"no lifecycle hook named {hook_name!r} in {params}")

    def flatten(self, remote: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "autoscaling_group_name": remote.get("AutoScalingGroupName"),
            "default_result": remote.get("DefaultResult"),
            "global_timeout": remote.get("GlobalTimeout"),
            "heartbeat_timeout": remote.get("HeartbeatTimeout"),
            "lifecycle_transition": remote.get("LifecycleTransition"),
            "name": remote.get("LifecycleHookName"),
            "notification_metadata": remote.get("NotificationMetadata"),
            "notification_target_arn": remote.get("NotificationTargetARN"),
            "role_arn": remote.get("RoleARN"),
        }

    def delete(self, data: ResourceData) -> None:
        logger.info("Deleting Auto Scaling Lifecycle Hook: %s", data.id)
        self.client.delete_lifecycle_hook(
            AutoScalingGroupName=_group_name(data),
            LifecycleHookName=data.id,
        )

    def is_not_found(self, exc: ClientError) -> bool:
        return _is_not_found(exc)

    def import_id(self, data: ResourceData, external_id: str) -> None:
        asg_name, hook_name = split_import_id(external_id, 2, self.import_format)
        data.state["autoscaling_group_name"] = asg_name
        data.state["name"] = hook_name
        data.id = hook_name


__all__ = ["LIFECYCLE_HOOK_SCHEMA", "LifecycleHookConfig", "LifecycleHookHandler", "PUT_TRANSIENT_ERRORS"]
