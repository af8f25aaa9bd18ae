"""Branch color palette (symbolic keys only, concrete colors live in the view)."""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class PaletteColor(StrEnum):
    """Closed set of branch colors. Declaration order is the round-robin order."""
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    YELLOW = "yellow"
    RED = "red"
    INDIGO = "indigo"

    @classmethod
    def default(cls) -> PaletteColor:
        return cls.BLUE

    @classmethod
    def round_robin(cls, index: int) -> PaletteColor:
        """Palette entry for the i-th main branch."""
        members = list(cls)
        return members[index % len(members)]

    @classmethod
    def resolve(cls, value: Any) -> PaletteColor:
        """
        Map anything color-like onto a palette entry.

        Accepts enum members, values ("green"), names ("GREEN") and legacy
        style-class strings such as "bg-green-100 text-green-800". Anything
        else falls back to the default entry.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            try:
                return cls(key)
            except ValueError:
                pass
            # Legacy class strings: first palette name contained in the string
            for token in key.replace("-", " ").split():
                try:
                    return cls(token)
                except ValueError:
                    continue
        logger.debug(f"Unknown color key {value!r}, using default palette entry.")
        return cls.default()
