"""Severity labels for object counts and estimated sizes."""

from typing import Literal

Severity = Literal["critical", "warning", "normal"]


def classify(value: int, *, warning: int, critical: int) -> Severity:
    """Return severity for value given strict-greater-than thresholds."""
    if value > critical:
        return "critical"
    if value > warning:
        return "warning"
    return "normal"
