"""Tag partitioning shared by tag-bearing resources."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

AWS_TAG_PREFIX = "aws:"


@dataclass(frozen=True)
class IgnoreTagsConfig:
    """Tag keys the provider never manages."""

    keys: FrozenSet[str] = field(default_factory=frozenset)
    key_prefixes: Tuple[str, ...] = ()

    def ignores(self, key: str) -> bool:
        return key in self.keys or any(key.startswith(prefix) for prefix in self.key_prefixes)


def _sorted(tags: Mapping[str, str]) -> Dict[str, str]:
    return {key: tags[key] for key in sorted(tags)}


def ignore_aws(tags: Mapping[str, str]) -> Dict[str, str]:
    """Drop tags whose keys use the reserved ``aws:`` prefix."""

    return _sorted({k: v for k, v in tags.items() if not k.startswith(AWS_TAG_PREFIX)})


def ignore_config(tags: Mapping[str, str], ignore: Optional[IgnoreTagsConfig]) -> Dict[str, str]:
    """Drop tags matched by *ignore*."""

    if ignore is None:
        return _sorted(tags)
    return _sorted({k: v for k, v in tags.items() if not ignore.ignores(k)})


def merge_default_tags(defaults: Mapping[str, str], tags: Mapping[str, str]) -> Dict[str, str]:
    """Combine provider default tags with resource tags; resource tags win."""

    merged = dict(defaults)
    merged.update(tags)
    return _sorted(merged)


def remove_default_tags(tags: Mapping[str, str], defaults: Mapping[str, str]) -> Dict[str, str]:
    """Drop tags that equal a provider default tag, key and value."""

    return _sorted({k: v for k, v in tags.items() if defaults.get(k) != v})


def partition_tags(
    remote: Optional[Mapping[str, str]],
    defaults: Mapping[str, str],
    ignore: Optional[IgnoreTagsConfig],
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Split *remote* tags into ``(tags, tags_all)``.

    ``tags_all`` holds every tag not reserved by AWS or ignored by policy;
    ``tags`` additionally hides tags inherited from the provider defaults.
    Both mappings are key-sorted so repeated reads compare equal.
    """

    tags_all = ignore_config(ignore_aws(remote or {}), ignore)
    return remove_default_tags(tags_all, defaults), tags_all


def plan_tag_update(
    old: Mapping[str, str], new: Mapping[str, str]
) -> Tuple[List[str], Dict[str, str]]:
    """Return ``(keys_to_remove, tags_to_set)`` turning *old* into *new*."""

    old = ignore_aws(old)
    new = ignore_aws(new)
    removed = sorted(key for key in old if key not in new)
    updated = _sorted({k: v for k, v in new.items() if old.get(k) != v})
    return removed, updated


__all__ = [
    "AWS_TAG_PREFIX",
    "IgnoreTagsConfig",
    "ignore_aws",
    "ignore_config",
    "merge_default_tags",
    "partition_tags",
    "plan_tag_update",
    "remove_default_tags",
]
