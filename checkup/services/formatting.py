from __future__ import annotations

_KB = 1024
_MB = 1024 * 1024
_GB = 1024 * 1024 * 1024


def format_bytes(num: int | float) -> str:
    value = int(num)
    if value >= _GB:
        return f"{value / _GB:.1f} GB"
    if value >= _MB:
        return f"{value / _MB:.1f} MB"
    if value >= _KB:
        return f"{value / _KB:.1f} KB"
    return f"{value} B"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(max(0, minutes), 60)
    return f"{hours}:{mins:02d}"


def relative_path(path: str, home: str) -> str:
    prefix = home.rstrip("/") + "/"
    if path.startswith(prefix):
        return "~/" + path[len(prefix):]
    return path
