"""Tests for the command line interface."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from aws_resource_lifecycle import cli
from aws_resource_lifecycle.resources.autoscaling import LifecycleHookHandler
from aws_resource_lifecycle.resources.location import MapHandler

MAP_ARN = "arn:aws:geo:us-east-1:123456789012:map/my-map"
NOW = datetime(2023, 4, 5, 6, 7, 8, tzinfo=timezone.utc)


def _described_map(**overrides):
    remote = {
        "MapName": "my-map",
        "MapArn": MAP_ARN,
        "DataSource": "Esri",
        "Configuration": {"Style": "VectorEsriStreets"},
        "Description": "",
        "CreateTime": NOW,
        "UpdateTime": NOW,
    }
    remote.update(overrides)
    return remote


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in ("AWS_PROFILE", "RESOURCE_LIFECYCLE_DEFAULT_TAGS", "RESOURCE_LIFECYCLE_PUT_RETRY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def _use_handler(monkeypatch, handler_cls, client):
    def build(type_name, session, config):
        return handler_cls(client, config)

    monkeypatch.setattr(cli, "build_handler", build)


def test_types_lists_registered_resources(capsys) -> None:
    """Both resource types are available."""

    assert cli.main(["types"]) == 0
    assert capsys.readouterr().out.split() == ["aws_autoscaling_lifecycle_hook", "aws_location_map"]


def test_import_prints_reconciled_state(monkeypatch, capsys, autoscaling_stub) -> None:
    """Import parses the identifier and reads the hook."""

    client, stubber = autoscaling_stub
    stubber.add_response(
        "describe_lifecycle_hooks",
        {
            "LifecycleHooks": [
                {
                    "LifecycleHookName": "hook-1",
                    "AutoScalingGroupName": "asg-1",
                    "LifecycleTransition": "autoscaling:EC2_INSTANCE_TERMINATING",
                    "DefaultResult": "CONTINUE",
                }
            ]
        },
        {"AutoScalingGroupName": "asg-1", "LifecycleHookNames": ["hook-1"]},
    )
    _use_handler(monkeypatch, LifecycleHookHandler, client)

    assert cli.main(["--region", "us-east-1", "import", "aws_autoscaling_lifecycle_hook", "asg-1/hook-1"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["id"] == "hook-1"
    assert payload["attributes"]["lifecycle_transition"] == "autoscaling:EC2_INSTANCE_TERMINATING"


def test_import_reports_malformed_identifier(monkeypatch, capsys, autoscaling_stub) -> None:
    """A bad identifier exits with status 1 and the expected format."""

    client, _ = autoscaling_stub
    _use_handler(monkeypatch, LifecycleHookHandler, client)

    assert cli.main(["--region", "us-east-1", "import", "aws_autoscaling_lifecycle_hook", "asg-1"]) == 1
    assert "<asg-name>/<lifecycle-hook-name>" in capsys.readouterr().err


def test_apply_creates_and_writes_state(monkeypatch, tmp_path, location_stub) -> None:
    """Apply without prior state creates the map and saves its state."""

    client, stubber = location_stub
    stubber.add_response(
        "create_map",
        {"MapName": "my-map", "MapArn": MAP_ARN, "CreateTime": NOW},
        {"MapName": "my-map", "Configuration": {"Style": "VectorEsriStreets"}},
    )
    stubber.add_response("describe_map", _described_map(), {"MapName": "my-map"})
    _use_handler(monkeypatch, MapHandler, client)

    config_path = tmp_path / "map.json"
    config_path.write_text(json.dumps({"map_name": "my-map", "configuration": [{"style": "VectorEsriStreets"}]}))
    state_path = tmp_path / "state.json"

    code = cli.main(
        ["--region", "us-east-1", "--output", str(state_path), "apply", "aws_location_map", "--config", str(config_path)]
    )

    assert code == 0
    state = json.loads(state_path.read_text())
    assert state["id"] == "my-map"
    assert state["attributes"]["map_arn"] == MAP_ARN
    assert state["attributes"]["create_time"] == "2023-04-05T06:07:08Z"


def test_apply_replaces_map_when_style_changes(monkeypatch, tmp_path, capsys, location_stub) -> None:
    """A force-new change deletes the map and creates it again."""

    client, stubber = location_stub
    stubber.add_response("describe_map", _described_map(), {"MapName": "my-map"})
    stubber.add_response("delete_map", {}, {"MapName": "my-map"})
    stubber.add_response(
        "create_map",
        {"MapName": "my-map", "MapArn": MAP_ARN, "CreateTime": NOW},
        {"MapName": "my-map", "Configuration": {"Style": "VectorEsriNavigation"}},
    )
    stubber.add_response(
        "describe_map",
        _described_map(Configuration={"Style": "VectorEsriNavigation"}),
        {"MapName": "my-map"},
    )
    _use_handler(monkeypatch, MapHandler, client)

    config_path = tmp_path / "map.json"
    config_path.write_text(json.dumps({"map_name": "my-map", "configuration": [{"style": "VectorEsriNavigation"}]}))
    state_path = tmp_path / "state.json"
    state_path.write_text(json.dumps({"id": "my-map", "attributes": {"map_name": "my-map"}}))

    code = cli.main(
        ["--region", "us-east-1", "apply", "aws_location_map", "--config", str(config_path), "--state", str(state_path)]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["attributes"]["configuration"] == [{"style": "VectorEsriNavigation"}]


def test_delete_clears_state(monkeypatch, tmp_path, capsys, location_stub) -> None:
    """Delete prints an empty state."""

    client, stubber = location_stub
    stubber.add_response("delete_map", {}, {"MapName": "my-map"})
    _use_handler(monkeypatch, MapHandler, client)

    state_path = tmp_path / "state.json"
    state_path.write_text(json.dumps({"id": "my-map", "attributes": {"map_name": "my-map"}}))

    assert cli.main(["--region", "us-east-1", "delete", "aws_location_map", "--state", str(state_path)]) == 0
    assert json.loads(capsys.readouterr().out) == {"id": "", "attributes": {}}


def test_unknown_resource_type_is_reported(capsys) -> None:
    """Unregistered resource types are rejected."""

    assert cli.main(["--region", "us-east-1", "read", "aws_nope", "--state", "missing.json"]) == 1
    assert "Unknown resource type" in capsys.readouterr().err


def test_apply_moves_hook_to_new_group(monkeypatch, tmp_path, capsys, autoscaling_stub) -> None:
    """Changing the group deletes the hook from the old group before putting it in the new one."""

    client, stubber = autoscaling_stub
    hook = {
        "LifecycleHookName": "hook-1",
        "LifecycleTransition": "autoscaling:EC2_INSTANCE_TERMINATING",
        "DefaultResult": "CONTINUE",
    }
    stubber.add_response(
        "describe_lifecycle_hooks",
        {"LifecycleHooks": [dict(hook, AutoScalingGroupName="asg-1")]},
        {"AutoScalingGroupName": "asg-1", "LifecycleHookNames": ["hook-1"]},
    )
    stubber.add_response(
        "delete_lifecycle_hook", {}, {"AutoScalingGroupName": "asg-1", "LifecycleHookName": "hook-1"}
    )
    stubber.add_response(
        "put_lifecycle_hook",
        {},
        {
            "AutoScalingGroupName": "asg-2",
            "LifecycleHookName": "hook-1",
            "LifecycleTransition": "autoscaling:EC2_INSTANCE_TERMINATING",
        },
    )
    stubber.add_response(
        "describe_lifecycle_hooks",
        {"LifecycleHooks": [dict(hook, AutoScalingGroupName="asg-2")]},
        {"AutoScalingGroupName": "asg-2", "LifecycleHookNames": ["hook-1"]},
    )
    _use_handler(monkeypatch, LifecycleHookHandler, client)

    config_path = tmp_path / "hook.json"
    config_path.write_text(
        json.dumps(
            {
                "autoscaling_group_name": "asg-2",
                "name": "hook-1",
                "lifecycle_transition": "autoscaling:EC2_INSTANCE_TERMINATING",
            }
        )
    )
    state_path = tmp_path / "state.json"
    state_path.write_text(
        json.dumps({"id": "hook-1", "attributes": {"autoscaling_group_name": "asg-1", "name": "hook-1"}})
    )

    code = cli.main(
        [
            "--region",
            "us-east-1",
            "apply",
            "aws_autoscaling_lifecycle_hook",
            "--config",
            str(config_path),
            "--state",
            str(state_path),
        ]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["attributes"]["autoscaling_group_name"] == "asg-2"
