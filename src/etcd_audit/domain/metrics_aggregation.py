"""Aggregate API server object-count metrics by resource kind."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

_RESOURCE_LABEL = re.compile(r'resource="([^"]+)"')


@dataclass(frozen=True)
class ResourceCount:
    """Number of stored objects for one resource kind."""

    kind: str
    count: int


def _sample_value(line: str) -> int | None:
    fields = line.rsplit(None, 1)
    if len(fields) != 2:
        return None
    try:
        value = float(fields[1])
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(value)


def aggregate_resource_counts(
    lines: Iterable[str],
    series: str = "apiserver_storage_objects",
) -> list[ResourceCount]:
    """Sum samples of one counter family per resource kind.

    Comment lines, other series and samples without a `resource` label are
    skipped. Result is sorted by count descending; equal counts keep the
    order in which the kind was first seen.
    """
    totals: dict[str, int] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        name = line.split("{", 1)[0].split(None, 1)[0]
        if name != series:
            continue
        match = _RESOURCE_LABEL.search(line)
        if match is None:
            continue
        value = _sample_value(line)
        if value is None:
            continue
        kind = match.group(1)
        totals[kind] = totals.get(kind, 0) + value

    counts = [ResourceCount(kind=kind, count=count) for kind, count in totals.items()]
    return sorted(counts, key=lambda item: item.count, reverse=True)


def top_resource_counts(
    counts: list[ResourceCount], limit: int | None
) -> list[ResourceCount]:
    """Return the first `limit` entries, or all of them when limit is None."""
    if limit is None:
        return list(counts)
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return counts[:limit]
