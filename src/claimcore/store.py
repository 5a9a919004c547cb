"""Flag permission stores.

A store maps ``(context set, permission key)`` to a boolean. Keys absent
for a context set are UNDEFINED at that scope; a stored value is always
TRUE or FALSE.

Two stores exist at runtime, bundled in ``FlagStores``:

- ``transient`` — session-only; holds the DEFAULT layer seeded from the
  flag catalog and DEFAULT-layer toggles.
- ``persistent`` — holds CLAIM and OVERRIDE values and persistent
  overrides of transient defaults.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from .contexts import Context
from .tristate import Tristate

logger = logging.getLogger(__name__)


class PermissionStore:
    """Tagged lookup table keyed by exact context set.

    Each context set owns an immutable snapshot dict that is replaced on
    every write under the store lock, so readers always observe either the
    pre- or post-write mapping.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._data: dict[frozenset[Context], Mapping[str, bool]] = {}
        self._lock = threading.Lock()

    def get_permissions(self, contexts: Iterable[Context]) -> Mapping[str, bool]:
        """Return the key -> bool mapping stored for exactly ``contexts``."""
        return self._data.get(frozenset(contexts), _EMPTY)

    def get_value(self, contexts: Iterable[Context], key: str) -> Tristate:
        return Tristate.from_optional(self.get_permissions(contexts).get(key))

    def set_value(self, contexts: Iterable[Context], key: str, value: Tristate) -> bool:
        """Upsert ``key`` or remove it when ``value`` is UNDEFINED.

        Returns:
            True if the stored state changed.
        """
        scope = frozenset(contexts)
        stored = value.as_bool()
        with self._lock:
            current = self._data.get(scope, _EMPTY)
            if current.get(key) == stored:
                return False
            updated = dict(current)
            if stored is None:
                updated.pop(key, None)
            else:
                updated[key] = stored
            if updated:
                self._data[scope] = MappingProxyType(updated)
            else:
                self._data.pop(scope, None)
        logger.debug("%s store: %s %s -> %s", self.name, sorted(map(str, scope)), key, value.value)
        return True

    def clear(self, contexts: Iterable[Context] | None = None) -> None:
        """Drop every value, or only the values for one context set."""
        with self._lock:
            if contexts is None:
                self._data.clear()
            else:
                self._data.pop(frozenset(contexts), None)

    def scopes(self) -> tuple[frozenset[Context], ...]:
        return tuple(self._data)

    def __len__(self) -> int:
        return sum(len(values) for values in self._data.values())


_EMPTY: Mapping[str, bool] = MappingProxyType({})


@dataclass
class FlagStores:
    """The transient and persistent stores of the global flag subject."""

    transient: PermissionStore = field(default_factory=lambda: PermissionStore("transient"))
    persistent: PermissionStore = field(default_factory=lambda: PermissionStore("persistent"))

    def clear(self) -> None:
        self.transient.clear()
        self.persistent.clear()


__all__ = ["FlagStores", "PermissionStore"]
