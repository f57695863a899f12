"""Byte-size conversions and human-readable formatting."""

BYTES_IN_KB = 1024
BYTES_IN_MB = 1024**2
UNDEFINED = "n/a"


def bytes_to_mb(size_bytes: int) -> float:
    """Convert bytes to MiB rounded to two decimals."""
    return round(size_bytes / BYTES_IN_MB, 2)


def format_bytes(size_bytes: int | None) -> str:
    """Render a byte count as B, KB or MB."""
    if size_bytes is None or size_bytes < 0:
        return UNDEFINED
    if size_bytes < BYTES_IN_KB:
        return f"{size_bytes} B"
    if size_bytes < BYTES_IN_MB:
        return f"{size_bytes // BYTES_IN_KB} KB"
    return f"{bytes_to_mb(size_bytes):.2f} MB"


def format_percent(value: int | None) -> str:
    """Render an integer percentage, or the undefined marker."""
    if value is None:
        return UNDEFINED
    return f"{value}%"
