"""Resolve user-supplied resource aliases against `oc api-resources`."""

from __future__ import annotations

from dataclasses import dataclass

from etcd_audit.domain.keyspace import normalize_resource_kind


@dataclass(frozen=True)
class ApiResource:
    """One row of `oc api-resources --no-headers`."""

    name: str
    short_names: tuple[str, ...]
    api_version: str
    namespaced: bool
    kind: str

    def matches(self, alias: str) -> bool:
        """Return whether alias names this resource (case-insensitive)."""
        needle = alias.lower()
        return (
            needle == self.name.lower()
            or needle == self.kind.lower()
            or needle in (short.lower() for short in self.short_names)
        )


def parse_api_resources(text: str) -> list[ApiResource]:
    """Parse headerless `oc api-resources` output.

    The SHORTNAMES column is blank for many resources, so rows have either
    four or five whitespace-separated fields.
    """
    resources: list[ApiResource] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 5:
            name, short, version, namespaced, kind = parts
            short_names = tuple(s for s in short.split(",") if s)
        elif len(parts) == 4:
            name, version, namespaced, kind = parts
            short_names = ()
        else:
            continue
        resources.append(
            ApiResource(
                name=name,
                short_names=short_names,
                api_version=version,
                namespaced=namespaced.lower() == "true",
                kind=kind,
            )
        )
    return resources


def resolve_resource_alias(alias: str, resources: list[ApiResource]) -> str:
    """Return canonical plural resource name for alias.

    Falls back to the alias with any API group suffix stripped.
    """
    search = normalize_resource_kind(alias)
    for resource in resources:
        if resource.matches(search):
            return resource.name
    return search
