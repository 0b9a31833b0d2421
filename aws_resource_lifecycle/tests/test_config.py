"""Tests for provider configuration loading."""

from __future__ import annotations

import pytest

from aws_resource_lifecycle.config import ConfigurationError, ProviderConfig


def test_defaults() -> None:
    """Defaults give a five minute put retry window."""

    config = ProviderConfig.from_env({})

    assert config.put_retry_timeout_seconds == 300
    assert config.default_tags == {}
    assert config.region is None


def test_from_env_reads_all_settings() -> None:
    """Every supported variable is parsed."""

    config = ProviderConfig.from_env(
        {
            "AWS_DEFAULT_REGION": "eu-west-1",
            "AWS_PROFILE": "ops",
            "RESOURCE_LIFECYCLE_DEFAULT_TAGS": '{"Owner": "platform"}',
            "RESOURCE_LIFECYCLE_IGNORE_TAG_KEYS": "CostCenter, Temp",
            "RESOURCE_LIFECYCLE_IGNORE_TAG_KEY_PREFIXES": "kubernetes.io/",
            "RESOURCE_LIFECYCLE_PUT_RETRY_TIMEOUT": "60",
            "RESOURCE_LIFECYCLE_RETRY_INTERVAL": "0.5",
        }
    )

    assert config.region == "eu-west-1"
    assert config.profile == "ops"
    assert config.default_tags == {"Owner": "platform"}
    assert config.ignore_tags.keys == frozenset({"CostCenter", "Temp"})
    assert config.ignore_tags.ignores("kubernetes.io/cluster/x")
    assert config.put_retry_timeout_seconds == 60
    assert config.retry_interval_seconds == 0.5


def test_overrides_win_over_environment() -> None:
    """Explicit values such as CLI flags replace environment values."""

    config = ProviderConfig.from_env({"AWS_REGION": "eu-west-1"}, region="us-west-2", profile=None)

    assert config.region == "us-west-2"
    assert config.profile is None


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"RESOURCE_LIFECYCLE_PUT_RETRY_TIMEOUT": "soon"}, "must be a number"),
        ({"RESOURCE_LIFECYCLE_PUT_RETRY_TIMEOUT": "7200"}, "put retry timeout"),
        ({"RESOURCE_LIFECYCLE_RETRY_INTERVAL": "-1"}, "retry interval"),
        ({"RESOURCE_LIFECYCLE_DEFAULT_TAGS": "[1]"}, "JSON object"),
        ({"RESOURCE_LIFECYCLE_DEFAULT_TAGS": "{"}, "JSON object"),
        ({"RESOURCE_LIFECYCLE_DEFAULT_TAGS": '{"aws:x": "y"}'}, "reserved prefix"),
    ],
)
def test_invalid_settings_are_rejected(environ, message) -> None:
    """Invalid settings raise ConfigurationError."""

    with pytest.raises(ConfigurationError, match=message):
        ProviderConfig.from_env(environ)
