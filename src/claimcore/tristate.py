"""Three-valued flag state.

``UNDEFINED`` means "not set at this layer". It never comes from a
native boolean; it only arises from the absence of a key in a store.
"""

from __future__ import annotations

from enum import Enum


class Tristate(str, Enum):
    """TRUE, FALSE, or UNDEFINED (absence of an explicit value)."""

    TRUE = "true"
    FALSE = "false"
    UNDEFINED = "undefined"

    @classmethod
    def from_bool(cls, value: bool) -> "Tristate":
        return cls.TRUE if value else cls.FALSE

    @classmethod
    def from_optional(cls, value: bool | None) -> "Tristate":
        """Map a store lookup result to a tristate (``None`` -> UNDEFINED)."""
        if value is None:
            return cls.UNDEFINED
        return cls.from_bool(value)

    @classmethod
    def from_string(cls, value: str) -> "Tristate | None":
        """Parse user input.

        Integers map ``<= -1`` to FALSE, ``0`` to UNDEFINED and anything
        positive to TRUE. Otherwise the names ``true``, ``false`` and
        ``undefined`` are accepted in any case.

        Returns:
            The parsed Tristate, or None when the input is not recognised.
        """
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            pass
        else:
            if number <= -1:
                return cls.FALSE
            if number == 0:
                return cls.UNDEFINED
            return cls.TRUE

        try:
            return cls[text.upper()]
        except KeyError:
            return None

    def as_bool(self) -> bool | None:
        """Boolean for storage; None for UNDEFINED (remove the key)."""
        if self is Tristate.UNDEFINED:
            return None
        return self is Tristate.TRUE

    def toggled(self) -> "Tristate":
        """Next value in the TRUE -> FALSE -> UNDEFINED -> TRUE cycle."""
        return _TOGGLE[self]


_TOGGLE: dict[Tristate, Tristate] = {
    Tristate.TRUE: Tristate.FALSE,
    Tristate.FALSE: Tristate.UNDEFINED,
    Tristate.UNDEFINED: Tristate.TRUE,
}


__all__ = ["Tristate"]
