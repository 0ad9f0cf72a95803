"""Paper-size table and orientation.

Sizes are portrait width/height in millimetres. The table is configuration,
not user-editable at runtime; landscape is produced by transposition.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    def toggled(self) -> "Orientation":
        if self is Orientation.PORTRAIT:
            return Orientation.LANDSCAPE
        return Orientation.PORTRAIT


DEFAULT_PAPER_SIZE = "A4"

PAPER_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "A3": (297.0, 420.0),
    "A5": (148.0, 210.0),
    "Letter": (215.9, 279.4),
}


def paper_dimensions(name: str, orientation: Orientation = Orientation.PORTRAIT) -> Tuple[float, float]:
    """
    Look up (width, height) in mm for a named paper size.

    Lookup is case-insensitive ("a4" and "A4" both work).

    Raises:
        KeyError: If the paper size is not in the table
    """
    key = canonical_paper_name(name)
    width, height = PAPER_SIZES[key]
    if Orientation(orientation) is Orientation.LANDSCAPE:
        return height, width
    return width, height


def canonical_paper_name(name: str) -> str:
    """Return the table spelling of a paper name, or raise KeyError."""
    for key in PAPER_SIZES:
        if key.lower() == name.strip().lower():
            return key
    raise KeyError(f"Unknown paper size: {name!r} (known: {', '.join(PAPER_SIZES)})")
