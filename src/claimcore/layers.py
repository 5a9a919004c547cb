"""Precedence tiers for a flag value."""

from __future__ import annotations

from enum import Enum


class FlagLayer(str, Enum):
    """DEFAULT < CLAIM < OVERRIDE in precedence."""

    DEFAULT = "default"
    CLAIM = "claim"
    OVERRIDE = "override"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]


_PRECEDENCE = {
    FlagLayer.DEFAULT: 0,
    FlagLayer.CLAIM: 1,
    FlagLayer.OVERRIDE: 2,
}


__all__ = ["FlagLayer"]
