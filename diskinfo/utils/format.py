"""
Formatting utilities.

This module provides the byte-count formatting shared by the collector,
the HTML renderer and the CLI table output.
"""

_UNIT = 1024
_PREFIXES = "KMGTPE"


def human_readable_size(size_bytes: int) -> str:
    """
    Convert bytes to a human readable string on a binary (power of 1024) scale.

    The unit letters look like SI prefixes (``KB``, ``MB``...) but every step
    is 1024, not 1000. Output always has one decimal digit and uses ``.`` as
    the separator regardless of locale.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human readable size string, e.g. ``"512 B"`` or ``"1.5 GB"``
    """
    if size_bytes < _UNIT:
        return f"{size_bytes} B"

    div, exp = _UNIT, 0
    n = size_bytes // _UNIT
    while n >= _UNIT and exp < len(_PREFIXES) - 1:
        div *= _UNIT
        exp += 1
        n //= _UNIT

    return f"{size_bytes / div:.1f} {_PREFIXES[exp]}B"


def format_percent(value: float) -> str:
    """Render a percentage with one decimal digit for display."""
    return f"{value:.1f}%"
