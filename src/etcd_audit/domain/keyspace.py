"""Best-effort discovery of the etcd key prefix for a resource kind.

etcd keys are laid out as `/<group-prefix>/<resource>/<namespace?>/<name>`.
Nothing in etcd records which prefix belongs to which resource, so the
prefix is inferred from the first key whose path contains `/<resource>/`.
First match wins; a resource whose name also appears as a path segment of
another resource's keys can be misresolved.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyPrefix:
    """Discovered key prefix scoping all keys of one resource kind."""

    resource_kind: str
    prefix: str

    @property
    def scope(self) -> str:
        """Prefix including the trailing separator."""
        return f"{self.prefix}/"


def normalize_resource_kind(resource_kind: str) -> str:
    """Drop any API group suffix (`widgets.example.com` -> `widgets`)."""
    return resource_kind.strip().split(".", 1)[0]


def infer_key_prefix(resource_kind: str, keys: Iterable[str]) -> KeyPrefix | None:
    """Infer the key prefix for resource_kind from a key listing.

    Returns None when no key contains `/<resource>/`.
    """
    name = normalize_resource_kind(resource_kind)
    if not name:
        return None
    segment = f"/{name}/"
    for key in keys:
        index = key.find(segment)
        if index < 0:
            continue
        return KeyPrefix(resource_kind=name, prefix=key[: index + len(segment) - 1])
    return None


def count_keys_under(prefix: KeyPrefix, keys: Sequence[str]) -> int:
    """Count keys that live under prefix."""
    scope = prefix.scope
    return sum(1 for key in keys if key.startswith(scope))
