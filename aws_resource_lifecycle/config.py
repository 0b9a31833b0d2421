"""Provider configuration shared by every resource handler."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import boto3

from .errors import ResourceLifecycleError
from .tags import AWS_TAG_PREFIX, IgnoreTagsConfig
from .utils import DEFAULT_RETRY_INTERVAL_SECONDS, DEFAULT_RETRY_TIMEOUT_SECONDS

ENV_PREFIX = "RESOURCE_LIFECYCLE_"

MAX_RETRY_TIMEOUT_SECONDS = 3600.0


class ConfigurationError(ResourceLifecycleError):
    """Raised when provider configuration is invalid."""


@dataclass(frozen=True)
class ProviderConfig:
    """Settings applied to every resource managed by a handler.

    All fields are validated at construction time.
    """

    region: Optional[str] = None
    profile: Optional[str] = None
    default_tags: Mapping[str, str] = field(default_factory=dict)
    ignore_tags: IgnoreTagsConfig = field(default_factory=IgnoreTagsConfig)
    put_retry_timeout_seconds: float = DEFAULT_RETRY_TIMEOUT_SECONDS
    retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        errors = []
        if not 0 <= self.put_retry_timeout_seconds <= MAX_RETRY_TIMEOUT_SECONDS:
            errors.append(
                f"put retry timeout must be between 0 and {MAX_RETRY_TIMEOUT_SECONDS:.0f} seconds"
            )
        if self.retry_interval_seconds < 0:
            errors.append("retry interval must not be negative")
        for key, value in self.default_tags.items():
            if not isinstance(key, str) or not isinstance(value, str):
                errors.append("default tags must map strings to strings")
                break
            if key.startswith(AWS_TAG_PREFIX):
                errors.append(f"default tag key uses reserved prefix: {key}")
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    def session(self) -> boto3.session.Session:
        """Return a boto3 session for the configured profile and region."""

        return boto3.Session(profile_name=self.profile, region_name=self.region)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ProviderConfig":
        """Build configuration from environment variables.

        Environment Variables:
            AWS_REGION / AWS_DEFAULT_REGION: Region for API calls
            AWS_PROFILE: Shared credentials profile
            RESOURCE_LIFECYCLE_DEFAULT_TAGS: JSON object of tags applied to every resource
            RESOURCE_LIFECYCLE_IGNORE_TAG_KEYS: Comma separated tag keys to ignore
            RESOURCE_LIFECYCLE_IGNORE_TAG_KEY_PREFIXES: Comma separated key prefixes to ignore
            RESOURCE_LIFECYCLE_PUT_RETRY_TIMEOUT: Seconds to retry transient put errors (default: 300)
            RESOURCE_LIFECYCLE_RETRY_INTERVAL: Seconds between retry attempts (default: 2)

        Keyword *overrides* replace values read from the environment when they
        are not ``None``.
        """

        env = os.environ if environ is None else environ

        def get_float(key: str, default: float) -> float:
            value = env.get(ENV_PREFIX + key)
            if value is None or value == "":
                return default
            try:
                return float(value)
            except ValueError as exc:
                raise ConfigurationError(f"{ENV_PREFIX}{key} must be a number: {value}") from exc

        def get_list(key: str) -> list:
            return [item.strip() for item in env.get(ENV_PREFIX + key, "").split(",") if item.strip()]

        def get_tags() -> Dict[str, str]:
            raw = env.get(ENV_PREFIX + "DEFAULT_TAGS", "")
            if not raw:
                return {}
            try:
                tags = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"{ENV_PREFIX}DEFAULT_TAGS must be a JSON object: {exc}") from exc
            if not isinstance(tags, dict):
                raise ConfigurationError(f"{ENV_PREFIX}DEFAULT_TAGS must be a JSON object")
            return tags

        values = {
            "region": env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION"),
            "profile": env.get("AWS_PROFILE"),
            "default_tags": get_tags(),
            "ignore_tags": IgnoreTagsConfig(
                keys=frozenset(get_list("IGNORE_TAG_KEYS")),
                key_prefixes=tuple(get_list("IGNORE_TAG_KEY_PREFIXES")),
            ),
            "put_retry_timeout_seconds": get_float("PUT_RETRY_TIMEOUT", DEFAULT_RETRY_TIMEOUT_SECONDS),
            "retry_interval_seconds": get_float("RETRY_INTERVAL", DEFAULT_RETRY_INTERVAL_SECONDS),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


__all__ = ["ConfigurationError", "ProviderConfig"]
